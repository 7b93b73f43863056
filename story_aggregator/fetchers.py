##########################################################################################
#
# Script name: fetchers.py
#
# Description: Fetches and normalizes articles from the Guardian, GDELT, and Currents APIs.
#
##########################################################################################

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

import requests
import yaml

from .config import (
    COUNTRY_NAMES,
    COUNTRY_VARIATIONS,
    CURRENTS_CATEGORIES,
    GUARDIAN_SECTIONS,
    NO_DESCRIPTION,
    PROVIDER_BY_SLUG,
    PROVIDERS,
    SOURCE_TAGS,
)
from .errors import ConfigError, ProviderError
from .models import NormalizedArticle
from .utils import extract_hostname, stable_id, strip_html


# ****************************************************************************************
# Global data and configuration
# ****************************************************************************************

log = logging.getLogger(__name__)
USER_AGENT = 'story-aggregator/1.0 (+https://github.com/)'
DEFAULT_PROVIDERS_FILE = 'config/providers.yaml'


@dataclass(frozen=True)
class NewsQuery:
    query: str = ''
    category: str = ''
    country: str = ''

    @property
    def is_search(self) -> bool:
        return bool(self.query.strip())

    @property
    def search_text(self) -> str:
        return self.query.strip() if self.is_search else ''

    @property
    def effective_category(self) -> str:
        return '' if self.is_search else self.category.strip().lower()


@dataclass(frozen=True)
class ProviderSettings:
    slug: str
    label: str
    base_url: str
    api_key_env: str
    page_size: int = 50
    timeout: float = 15.0
    enabled: bool = True

    def api_key(self) -> str:
        return (os.getenv(self.api_key_env) or '').strip()


# ****************************************************************************************
# Functions
# ****************************************************************************************


def default_provider_settings() -> list[ProviderSettings]:
    return [
        ProviderSettings(
            slug=provider.slug,
            label=provider.label,
            base_url=provider.base_url,
            api_key_env=provider.api_key_env,
            page_size=provider.page_size,
            timeout=provider.timeout,
        )
        for provider in PROVIDERS
    ]


def _apply_overrides(settings: ProviderSettings, entry: dict) -> ProviderSettings:
    overrides = {}
    if 'enabled' in entry:
        overrides['enabled'] = bool(entry['enabled'])
    if entry.get('base_url'):
        overrides['base_url'] = str(entry['base_url'])
    try:
        if entry.get('page_size') is not None:
            overrides['page_size'] = max(1, int(entry['page_size']))
        if entry.get('timeout') is not None:
            overrides['timeout'] = float(entry['timeout'])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f'Invalid provider setting for {settings.slug}: {exc}') from exc
    return replace(settings, **overrides)


def load_provider_config(path: str = DEFAULT_PROVIDERS_FILE) -> list[ProviderSettings]:
    settings = default_provider_settings()
    if not path or not os.path.exists(path):
        return settings
    with open(path, 'r', encoding='utf-8') as handle:
        try:
            payload = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f'Could not parse provider config {path}: {exc}') from exc
    if not isinstance(payload, dict):
        raise ConfigError('provider config must be a mapping')
    entries = payload.get('providers', [])
    if not isinstance(entries, list):
        raise ConfigError('config.providers must be a list')

    by_slug = {item.slug: item for item in settings}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        slug = str(entry.get('id') or '').strip().lower()
        if slug not in by_slug:
            log.warning('Ignoring unknown provider in %s: %s', path, slug or '(missing id)')
            continue
        by_slug[slug] = _apply_overrides(by_slug[slug], entry)
    log.info('Loaded provider settings from %s.', path)
    return [by_slug[item.slug] for item in settings]


def source_tag(source_name: str) -> str:
    return SOURCE_TAGS.get((source_name or '').strip().lower(), 'unknown')


def _make_article(
    provider: str,
    title: str,
    url: str,
    description: str,
    published_at: str,
    content: str = '',
    image_url: str = '',
    author: str = '',
    language: str = 'en',
) -> NormalizedArticle | None:
    title = strip_html(title)
    url = (url or '').strip()
    if not title or not url:
        return None
    description = strip_html(description) or NO_DESCRIPTION
    label = PROVIDER_BY_SLUG[provider].label
    return NormalizedArticle(
        id=f'{provider}-{stable_id(provider, url, title)}',
        title=title,
        description=description,
        url=url,
        published_at=(published_at or '').strip(),
        source_name=label,
        source=source_tag(label),
        content=strip_html(content) or description,
        image_url=image_url or '',
        author=author or '',
        language=language or 'en',
    )


def normalize_guardian(raw: dict) -> NormalizedArticle | None:
    fields = raw.get('fields') or {}
    body_text = fields.get('bodyText') or ''
    author = ''
    for tag in raw.get('tags') or []:
        if isinstance(tag, dict) and tag.get('type') == 'contributor':
            author = tag.get('webTitle') or ''
            break
    return _make_article(
        'guardian',
        title=raw.get('webTitle') or '',
        url=raw.get('webUrl') or '',
        description=fields.get('trailText') or body_text[:200],
        published_at=raw.get('webPublicationDate') or '',
        content=body_text or fields.get('trailText') or '',
        image_url=fields.get('thumbnail') or '',
        author=author,
    )


def normalize_gdelt(raw: dict) -> NormalizedArticle | None:
    url = raw.get('url') or raw.get('shareurl') or raw.get('articleurl') or raw.get('articleURL') or ''
    return _make_article(
        'gdelt',
        title=raw.get('title') or raw.get('seotitle') or raw.get('seoTitle') or '',
        url=url,
        description=(
            raw.get('seodescription')
            or raw.get('seoDescription')
            or raw.get('snippet')
            or raw.get('description')
            or ''
        ),
        published_at=(
            raw.get('seendate')
            or raw.get('seenDate')
            or raw.get('date')
            or raw.get('publishedAt')
            or raw.get('published')
            or ''
        ),
        content=raw.get('snippet') or raw.get('body') or '',
        image_url=raw.get('socialimage') or raw.get('imageurl') or raw.get('image') or '',
        author=raw.get('domain') or extract_hostname(url),
        language='en',
    )


def normalize_currents(raw: dict) -> NormalizedArticle | None:
    return _make_article(
        'currents',
        title=raw.get('title') or '',
        url=raw.get('url') or '',
        description=raw.get('description') or '',
        published_at=raw.get('published') or '',
        image_url=raw.get('image') if raw.get('image') not in (None, 'None') else '',
        author=raw.get('author') or '',
        language=raw.get('language') or 'en',
    )


NORMALIZERS = {
    'guardian': normalize_guardian,
    'gdelt': normalize_gdelt,
    'currents': normalize_currents,
}


def normalize_articles(rows, provider: str) -> list[NormalizedArticle]:
    if not isinstance(rows, list):
        log.warning('Expected a list of %s articles, got %s.', provider, type(rows).__name__)
        return []
    normalizer = NORMALIZERS.get(provider)
    if normalizer is None:
        log.warning('Unknown provider for normalization: %s', provider)
        return []
    articles = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        article = normalizer(row)
        if article is not None:
            articles.append(article)
    log.debug('Normalized %d of %d %s row(s).', len(articles), len(rows), provider)
    return articles


def country_name(country: str) -> str:
    return COUNTRY_NAMES.get((country or '').strip().upper(), '')


def build_country_query(query: str, country: str) -> str:
    code = (country or '').strip().upper()
    name = country_name(code)
    if not name:
        return query
    variations = COUNTRY_VARIATIONS.get(code) or [name, code]
    country_terms = ' OR '.join(f'"{term}"' for term in variations)
    if query:
        return f'({query}) AND ({country_terms})'
    return country_terms


def _get_json(settings: ProviderSettings, url: str, params: dict) -> dict | list:
    try:
        response = requests.get(
            url,
            params=params,
            headers={'User-Agent': USER_AGENT},
            timeout=settings.timeout,
        )
        response.raise_for_status()
        return response.json()
    except requests.RequestException as exc:
        raise ProviderError(settings.label, str(exc)) from exc
    except ValueError as exc:
        raise ProviderError(settings.label, f'invalid JSON response ({exc})') from exc


def fetch_guardian_articles(news_query: NewsQuery, settings: ProviderSettings) -> list[NormalizedArticle]:
    api_key = settings.api_key()
    if not api_key:
        log.warning('Skipping %s: %s is not set.', settings.label, settings.api_key_env)
        return []
    params = {
        'api-key': api_key,
        'show-fields': 'trailText,bodyText,thumbnail',
        'show-tags': 'contributor',
        'page-size': settings.page_size,
        'order-by': 'newest',
    }
    category = news_query.effective_category
    if category:
        params['section'] = GUARDIAN_SECTIONS.get(category, category)
    search = build_country_query(news_query.search_text, news_query.country)
    if search:
        params['q'] = search

    log.debug('Guardian request q=%s section=%s', search or '(none)', params.get('section', '(none)'))
    payload = _get_json(settings, f'{settings.base_url}/search', params)
    body = payload.get('response', {}) if isinstance(payload, dict) else {}
    if body.get('status') != 'ok':
        raise ProviderError(settings.label, body.get('message') or 'unexpected response status')
    articles = normalize_articles(body.get('results') or [], 'guardian')
    log.info('Guardian returned %d article(s).', len(articles))
    return articles


def _gdelt_rows(payload) -> list:
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    if isinstance(payload.get('articles'), list):
        return payload['articles']
    for value in payload.values():
        if isinstance(value, list) and value and isinstance(value[0], dict):
            first = value[0]
            if first.get('url') or first.get('title') or first.get('shareurl'):
                return value
    return []


def fetch_gdelt_articles(news_query: NewsQuery, settings: ProviderSettings) -> list[NormalizedArticle]:
    gdelt_query = news_query.search_text or news_query.effective_category
    if not gdelt_query:
        log.warning('Skipping %s: no search query or category given.', settings.label)
        return []
    if news_query.country:
        gdelt_query = f'{gdelt_query} sourcecountry:{news_query.country.strip().upper()}'
    params = {
        'query': gdelt_query,
        'mode': 'artlist',
        'maxrecords': settings.page_size,
        'format': 'json',
        'sort': 'datedesc',
    }
    log.debug('GDELT request query=%s', gdelt_query)
    payload = _get_json(settings, settings.base_url, params)
    articles = normalize_articles(_gdelt_rows(payload), 'gdelt')
    log.info('GDELT returned %d article(s).', len(articles))
    return articles


def fetch_currents_articles(news_query: NewsQuery, settings: ProviderSettings) -> list[NormalizedArticle]:
    api_key = settings.api_key()
    if not api_key:
        log.warning('Skipping %s: %s is not set.', settings.label, settings.api_key_env)
        return []
    params = {
        'apiKey': api_key,
        'language': 'en',
        'page_size': settings.page_size,
    }
    if news_query.is_search:
        params['keywords'] = news_query.search_text
    if news_query.country:
        params['country'] = news_query.country.strip().lower()
    category = news_query.effective_category
    if category:
        params['category'] = CURRENTS_CATEGORIES.get(category, category)

    endpoint = 'search' if news_query.is_search else 'latest-news'
    log.debug('Currents request endpoint=%s params=%s', endpoint, {k: v for k, v in params.items() if k != 'apiKey'})
    payload = _get_json(settings, f'{settings.base_url}/{endpoint}', params)
    if not isinstance(payload, dict):
        raise ProviderError(settings.label, 'unexpected response shape')
    if payload.get('status') and payload.get('status') != 'ok':
        raise ProviderError(settings.label, payload.get('message') or 'unexpected response status')
    rows = payload.get('news') or payload.get('data') or []
    articles = normalize_articles(rows, 'currents')
    log.info('Currents returned %d article(s).', len(articles))
    return articles


FETCHERS = {
    'guardian': fetch_guardian_articles,
    'gdelt': fetch_gdelt_articles,
    'currents': fetch_currents_articles,
}


def fetch_all_providers(
    news_query: NewsQuery,
    providers: list[ProviderSettings] | None = None,
) -> tuple[dict[str, list[NormalizedArticle]], list[str]]:
    if providers is None:
        providers = default_provider_settings()
    enabled = [settings for settings in providers if settings.enabled and settings.slug in FETCHERS]
    results: dict[str, list[NormalizedArticle]] = {settings.slug: [] for settings in enabled}
    warnings: list[str] = []
    if not enabled:
        log.warning('No providers enabled.')
        return results, warnings

    with ThreadPoolExecutor(max_workers=len(enabled)) as executor:
        futures = {
            settings.slug: executor.submit(FETCHERS[settings.slug], news_query, settings)
            for settings in enabled
        }
        for settings in enabled:
            try:
                results[settings.slug] = futures[settings.slug].result()
            except Exception as exc:  # noqa: BLE001
                log.exception('%s fetch failed: %s', settings.label, exc)
                message = exc.message if isinstance(exc, ProviderError) else f'{settings.label} API: {exc}'
                warnings.append(message)
    return results, warnings


def build_sample_articles() -> dict[str, list[NormalizedArticle]]:
    now = datetime.now(timezone.utc)
    stories = [
        (
            'City Council Approves New Budget for Schools and Transit',
            'Council members voted 7-2 to approve the city budget, adding funding for schools and transit.',
            'Council approves city budget plan with school and transit funding',
            'The approved city budget plan increases school funding and expands transit service.',
        ),
        (
            'Central bank holds interest rates steady amid inflation worries',
            'Policymakers kept interest rates unchanged and signalled caution over persistent inflation.',
            'Central bank keeps interest rates steady as inflation lingers',
            'The central bank left interest rates on hold, citing inflation that remains above target.',
        ),
        (
            'Wildfire forces thousands to evacuate coastal towns',
            'Firefighters battled a fast-moving wildfire as evacuation orders spread along the coast.',
            'Thousands evacuate coastal towns as wildfire spreads',
            'Evacuation orders widened overnight as the wildfire spread toward coastal towns.',
        ),
        (
            'Tech giant unveils quantum computing chip',
            'The company said its new quantum chip reduces error rates in early experiments.',
            'Quantum computing chip unveiled by tech giant',
            'Researchers presented a quantum computing chip with lower error rates.',
        ),
    ]
    singles = [
        ('guardian', 'Local weather forecast for the weekend', 'Sunny skies expected with mild temperatures.'),
        ('gdelt', 'Museum reopens sculpture garden after restoration', 'Visitors can again tour the restored garden.'),
        ('currents', 'Marathon organisers announce route changes', 'Runners will follow a revised course downtown.'),
    ]
    hosts = {
        'guardian': 'https://www.theguardian.com',
        'gdelt': 'https://www.example-wire.com',
        'currents': 'https://www.example-daily.com',
    }
    pairs = [('guardian', 'gdelt'), ('gdelt', 'currents'), ('guardian', 'currents'), ('currents', 'guardian')]

    articles: dict[str, list[NormalizedArticle]] = {provider.slug: [] for provider in PROVIDERS}
    for idx, (story, providers) in enumerate(zip(stories, pairs)):
        first_title, first_desc, second_title, second_desc = story
        published = (now - timedelta(hours=idx * 6)).isoformat()
        for slug, title, description in (
            (providers[0], first_title, first_desc),
            (providers[1], second_title, second_desc),
        ):
            article = _make_article(
                slug,
                title=title,
                url=f'{hosts[slug]}/sample/story-{idx + 1}',
                description=description,
                published_at=published,
            )
            articles[slug].append(article)
    for idx, (slug, title, description) in enumerate(singles):
        article = _make_article(
            slug,
            title=title,
            url=f'{hosts[slug]}/sample/single-{idx + 1}',
            description=description,
            published_at=(now - timedelta(days=1, hours=idx)).isoformat(),
        )
        articles[slug].append(article)
    return articles
