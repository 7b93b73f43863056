##########################################################################################
#
# Script name: aggregate.py
#
# Description: Fetches all providers, groups articles into stories, and summarizes one page.
#
##########################################################################################

import logging
import math
import re
from dataclasses import replace
from datetime import datetime, timezone

from .cache import TTLCache, make_cache_key
from .config import (
    DEFAULT_SIMILARITY_THRESHOLD,
    MAX_ARTICLES_PER_SOURCE,
    MAX_GROUPS_PER_PAGE,
    MIN_ARTICLES_PER_SOURCE,
    PROVIDER_BY_SLUG,
    PROVIDERS,
    SOURCE_DOMINANCE_RATIO,
    TITLE_OUTLET_SUFFIX_PATTERN,
    TITLE_PREFIX_PATTERN,
)
from .country_filter import filter_articles_by_country
from .fetchers import NewsQuery, ProviderSettings, default_provider_settings, fetch_all_providers, source_tag
from .grouping import group_similar_articles
from .models import AggregateResult, ArticleGroup, NormalizedArticle, Pagination, SummarizedGroup
from .summarizer import generate_neutral_title, is_generic_title, summarize_groups
from .utils import safe_sentence, utc_now_iso


# ****************************************************************************************
# Global data and configuration
# ****************************************************************************************

log = logging.getLogger(__name__)

# GDELT and Currents filter by country server-side; Guardian only matches text.
COUNTRY_FILTERED_PROVIDERS = {'guardian'}


# ****************************************************************************************
# Functions
# ****************************************************************************************


def balance_articles(articles_by_provider: dict[str, list[NormalizedArticle]]) -> dict[str, list[NormalizedArticle]]:
    balanced = {}
    for slug, articles in articles_by_provider.items():
        limit = max(MIN_ARTICLES_PER_SOURCE, min(MAX_ARTICLES_PER_SOURCE, len(articles)))
        balanced[slug] = list(articles[:limit])
    return balanced


def _provider_order(slugs) -> list[str]:
    known = [provider.slug for provider in PROVIDERS if provider.slug in slugs]
    return known + sorted(slug for slug in slugs if slug not in PROVIDER_BY_SLUG)


def interleave_articles(articles_by_provider: dict[str, list[NormalizedArticle]]) -> list[NormalizedArticle]:
    order = _provider_order(articles_by_provider)
    longest = max((len(articles_by_provider[slug]) for slug in order), default=0)
    pool: list[NormalizedArticle] = []
    for idx in range(longest):
        for slug in order:
            if idx < len(articles_by_provider[slug]):
                pool.append(articles_by_provider[slug][idx])
    return pool


def tag_sources(articles: list[NormalizedArticle]) -> list[NormalizedArticle]:
    return [replace(article, source=source_tag(article.source_name)) for article in articles]


def _normalized_title(title: str) -> str:
    cleaned = re.sub(TITLE_PREFIX_PATTERN, '', (title or '').lower().strip(), flags=re.IGNORECASE)
    cleaned = re.sub(TITLE_OUTLET_SUFFIX_PATTERN, '', cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r'[^\w\s]', ' ', cleaned)
    return re.sub(r'\s+', ' ', cleaned).strip()


def drop_identical_title_groups(groups: list[ArticleGroup]) -> list[ArticleGroup]:
    kept = []
    for group in groups:
        if len(group.articles) > 1:
            titles = [_normalized_title(article.title) for article in group.articles]
            first = titles[0]
            if len(first) > 10 and all(title == first for title in titles):
                log.debug('Dropping %s: all %d articles share title "%s".', group.group_id, len(titles), first[:50])
                continue
        kept.append(group)
    return kept


def recency_score(group: ArticleGroup, now: datetime) -> float:
    latest = group.latest_published()
    if latest is None:
        return 0.0
    hours_ago = (now - latest).total_seconds() / 3600
    if hours_ago <= 24:
        return 1000.0
    if hours_ago <= 48:
        return 500.0
    return max(0.0, 500.0 - (hours_ago - 48) * 10)


def sort_groups(groups: list[ArticleGroup], now: datetime) -> list[ArticleGroup]:
    def sort_key(group: ArticleGroup):
        latest = group.latest_published()
        latest_ts = latest.timestamp() if latest else 0.0
        return (-group.source_count(), -recency_score(group, now), -latest_ts)

    return sorted(groups, key=sort_key)


def paginate(groups: list, page: int, per_page: int = MAX_GROUPS_PER_PAGE) -> tuple[list, Pagination]:
    total_pages = max(1, math.ceil(len(groups) / per_page))
    current = max(1, min(page or 1, total_pages))
    start = (current - 1) * per_page
    pagination = Pagination(
        current_page=current,
        total_pages=total_pages,
        total_groups=len(groups),
        groups_per_page=per_page,
    )
    return groups[start : start + per_page], pagination


def _fallback_summary(group: ArticleGroup) -> str:
    titles = '; '.join(article.title for article in group.articles if article.title)
    return safe_sentence(titles, 400) or 'Summary unavailable. Please review the articles below.'


def build_summarized_group(group: ArticleGroup, summary: dict | None, warnings: list[str]) -> SummarizedGroup:
    first = group.articles[0] if group.articles else None
    if summary is None:
        warnings.append(f'Failed to summarize group {group.group_id}')
        text = _fallback_summary(group)
        title = generate_neutral_title(first.title if first else None, first.description if first else None, text)
    else:
        text = summary.get('summary') or 'Summary not available.'
        title = summary.get('groupTitle') or ''
        if is_generic_title(title):
            title = generate_neutral_title(first.title if first else None, first.description if first else None, text)

    if is_generic_title(title) and len(text) > 20:
        first_sentence = re.split(r'[.!?]', text)[0].strip()
        if len(first_sentence) > 15:
            words = ' '.join(first_sentence.split()[:12])
            title = words[0].upper() + words[1:]

    sources = list(dict.fromkeys(article.source_name or article.source or 'Unknown' for article in group.articles))
    return SummarizedGroup(
        group_id=group.group_id,
        group_title=title,
        summary=text,
        articles=list(group.articles),
        source_count=len(sources),
        sources=sources,
    )


def _provider_warnings(
    articles_by_provider: dict[str, list[NormalizedArticle]],
    providers: list[ProviderSettings],
    warnings: list[str],
) -> None:
    labels = {settings.slug: settings.label for settings in providers}
    total = sum(len(articles) for articles in articles_by_provider.values())
    for slug, articles in articles_by_provider.items():
        label = labels.get(slug, slug)
        log.info('%s: %d article(s).', label, len(articles))
        if not articles and not any(label in warning for warning in warnings):
            message = f'{label} returned 0 articles - check API key and query'
            log.warning(message)
            warnings.append(message)
    if total:
        largest = max(len(articles) for articles in articles_by_provider.values())
        if largest / total > SOURCE_DOMINANCE_RATIO:
            log.warning('One source is dominating (%.1f%% of articles).', largest / total * 100)
    else:
        log.error('All providers returned 0 articles.')


def aggregate_news(
    query: str = '',
    category: str = '',
    country: str = '',
    page: int = 1,
    *,
    providers: list[ProviderSettings] | None = None,
    cache: TTLCache | None = None,
    fetch=fetch_all_providers,
    summarize=summarize_groups,
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    now: datetime | None = None,
) -> AggregateResult:
    news_query = NewsQuery(query=query or '', category=category or '', country=country or '')
    cache_key = make_cache_key(
        query=news_query.search_text,
        category=news_query.effective_category,
        country=news_query.country.upper(),
        page=page,
    )
    if cache is not None:
        cached = cache.get(cache_key)
        if cached is not None:
            log.info('Cache hit for %s', cache_key)
            return cached

    if news_query.is_search:
        log.info('Search mode: query=%s country=%s', news_query.search_text, country or '(none)')
    elif news_query.effective_category:
        log.info('Category mode: category=%s country=%s', news_query.effective_category, country or '(none)')
    else:
        log.warning('No search query or category provided; results may be empty.')

    if providers is None:
        providers = default_provider_settings()
    articles_by_provider, warnings = fetch(news_query, providers)
    warnings = list(warnings)

    if news_query.country:
        for slug in COUNTRY_FILTERED_PROVIDERS & set(articles_by_provider):
            articles_by_provider[slug] = filter_articles_by_country(
                articles_by_provider[slug],
                news_query.country,
                news_query.effective_category,
            )

    _provider_warnings(articles_by_provider, providers, warnings)
    balanced = balance_articles(articles_by_provider)
    pool = tag_sources(interleave_articles(balanced))
    log.info('Article pool: %d article(s) from %d provider(s).', len(pool), len(balanced))

    result = AggregateResult(
        query=query or '',
        country=country or '',
        category=category or '',
        raw_articles=pool,
        generated_at=utc_now_iso(),
    )
    if not pool:
        result.warnings = warnings or ['No articles found from any source.']
        if cache is not None:
            cache.set(cache_key, result)
        return result

    groups = group_similar_articles(pool, similarity_threshold)
    if len(groups) == len(pool):
        log.warning('No articles were grouped; every article is its own group.')
    groups = drop_identical_title_groups(groups)
    groups = sort_groups(groups, now or datetime.now(timezone.utc))

    page_groups, pagination = paginate(groups, page)
    log.info(
        'Page %d of %d: summarizing %d of %d group(s).',
        pagination.current_page,
        pagination.total_pages,
        len(page_groups),
        len(groups),
    )
    summaries = summarize(page_groups)
    result.grouped_articles = [
        build_summarized_group(group, summary, warnings) for group, summary in zip(page_groups, summaries)
    ]
    result.pagination = pagination
    result.warnings = warnings
    if cache is not None:
        cache.set(cache_key, result)
    return result
