from __future__ import annotations

import itertools
import logging
from collections import Counter

from .config import (
    CROSS_SOURCE_BOOST,
    DEFAULT_SIMILARITY_THRESHOLD,
    MERGE_SHARED_TITLE_WORDS,
    MERGE_THRESHOLD_FACTOR,
    MERGE_TITLE_BOOST,
)
from .models import ArticleGroup, NormalizedArticle
from .similarity import shared_title_words, similarity


log = logging.getLogger(__name__)


def source_key(article: NormalizedArticle) -> str:
    return (article.source or article.source_name or "unknown").lower().strip()


def _group_sources(group: ArticleGroup) -> set[str]:
    return {source_key(article) for article in group.articles}


def cluster_articles(articles: list[NormalizedArticle], threshold: float) -> list[ArticleGroup]:
    """Greedy single pass: each article joins its best qualifying group or starts one.

    Groups missing the article's source get their score multiplied by
    CROSS_SOURCE_BOOST and always win over groups that already hold the
    source. Results depend on input order; sorting by source keeps them
    reproducible.
    """
    groups: list[ArticleGroup] = []
    counter = itertools.count(1)
    ordered = sorted(articles, key=source_key)

    for article in ordered:
        article_source = source_key(article)
        best_group: ArticleGroup | None = None
        best_similarity = 0.0
        best_is_cross_source = False

        for group in groups:
            has_different_source = article_source not in _group_sources(group)
            max_similarity = max(similarity(article, member) for member in group.articles)
            effective = max_similarity * CROSS_SOURCE_BOOST if has_different_source else max_similarity
            if effective < threshold:
                continue
            if has_different_source:
                if effective > best_similarity or not best_is_cross_source:
                    best_group = group
                    best_similarity = effective
                    best_is_cross_source = True
            elif not best_is_cross_source and max_similarity > best_similarity:
                best_group = group
                best_similarity = max_similarity

        if best_group is not None:
            best_group.articles.append(article)
        else:
            groups.append(ArticleGroup(group_id=f"group-{next(counter)}", articles=[article]))

    log.debug("Clustering pass: %d article(s) into %d group(s).", len(ordered), len(groups))
    return groups


def _pair_similarity(anchor: ArticleGroup, other: ArticleGroup) -> float:
    max_similarity = 0.0
    title_boost = 0.0
    for first, second in itertools.product(anchor.articles, other.articles):
        max_similarity = max(max_similarity, similarity(first, second))
        if first.title and second.title:
            if len(shared_title_words(first.title, second.title)) >= MERGE_SHARED_TITLE_WORDS:
                title_boost = MERGE_TITLE_BOOST
    return max_similarity + title_boost


def merge_groups(groups: list[ArticleGroup], threshold: float) -> list[ArticleGroup]:
    merge_threshold = threshold * MERGE_THRESHOLD_FACTOR
    merged_ids: set[int] = set()
    output: list[ArticleGroup] = []
    merge_count = 0

    for i, anchor in enumerate(groups):
        if i in merged_ids:
            continue
        anchor_sources = _group_sources(anchor)
        merged = ArticleGroup(group_id=anchor.group_id, articles=list(anchor.articles))

        for j in range(i + 1, len(groups)):
            if j in merged_ids:
                continue
            other = groups[j]
            other_sources = _group_sources(other)
            if anchor_sources & other_sources:
                continue
            score = _pair_similarity(anchor, other)
            if score >= merge_threshold:
                log.debug(
                    "Merging %s into %s: similarity %.3f >= %.3f",
                    other.group_id,
                    anchor.group_id,
                    score,
                    merge_threshold,
                )
                merged.articles.extend(other.articles)
                anchor_sources |= other_sources
                merged_ids.add(j)
                merge_count += 1

        output.append(merged)
        merged_ids.add(i)

    log.debug("Merge pass: %d group(s) after %d merge(s).", len(output), merge_count)
    return output


def dedupe_group(group: ArticleGroup) -> ArticleGroup:
    by_source: dict[str, NormalizedArticle] = {}
    for article in group.articles:
        key = source_key(article)
        existing = by_source.get(key)
        if existing is None:
            by_source[key] = article
            continue
        existing_dt = existing.published_dt()
        incoming_dt = article.published_dt()
        if incoming_dt is None:
            continue
        if existing_dt is None or incoming_dt > existing_dt:
            by_source[key] = article
    return ArticleGroup(group_id=group.group_id, articles=list(by_source.values()))


def order_groups(groups: list[ArticleGroup]) -> list[ArticleGroup]:
    multi_source = [group for group in groups if group.is_multi_source()]
    single_source = [group for group in groups if not group.is_multi_source()]
    if not multi_source:
        log.info("No multi-source groups found; returning %d single-source group(s).", len(single_source))
    return multi_source + single_source


def group_similar_articles(
    articles: list[NormalizedArticle],
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> list[ArticleGroup]:
    if not articles:
        log.debug("No articles provided for grouping.")
        return []

    distribution = Counter(source_key(article) for article in articles)
    log.info(
        "Grouping %d article(s) at threshold %.2f; sources: %s",
        len(articles),
        similarity_threshold,
        dict(distribution),
    )
    groups = cluster_articles(articles, similarity_threshold)
    groups = merge_groups(groups, similarity_threshold)
    groups = [dedupe_group(group) for group in groups]
    ordered = order_groups(groups)
    log.info(
        "Grouping produced %d group(s), %d multi-source.",
        len(ordered),
        sum(1 for group in ordered if group.is_multi_source()),
    )
    return ordered
