from __future__ import annotations

import re
from collections import Counter

from .config import (
    MIN_TERM_LENGTH,
    RECENCY_BONUS,
    SAME_DOMAIN_BONUS,
    SHARED_TITLE_WORDS_BOOST,
    STOP_WORDS,
    TEXT_TERM_LIMIT,
    TEXT_WEIGHT,
    TIME_WEIGHT,
    TITLE_DOMINANCE_FLOOR,
    TITLE_TERM_LIMIT,
    TITLE_WEIGHT,
)
from .models import NormalizedArticle
from .utils import extract_hostname


SECONDS_PER_DAY = 60 * 60 * 24


def normalize_text(text: str) -> str:
    if not text:
        return ""
    lowered = text.lower()
    lowered = re.sub(r"[^\w\s]", " ", lowered, flags=re.ASCII)
    return re.sub(r"\s+", " ", lowered).strip()


def extract_key_terms(text: str, max_terms: int = 30) -> list[str]:
    """Most frequent non-stop-word terms, ties kept in first-seen order."""
    if not text or not text.strip():
        return []
    words = [
        word
        for word in normalize_text(text).split()
        if len(word) >= MIN_TERM_LENGTH and word not in STOP_WORDS
    ]
    return [word for word, _ in Counter(words).most_common(max_terms)]


def jaccard_similarity(set1: set[str], set2: set[str]) -> float:
    if not set1 and not set2:
        return 1.0
    if not set1 or not set2:
        return 0.0
    return len(set1 & set2) / len(set1 | set2)


def shared_title_words(title1: str, title2: str) -> set[str]:
    words1 = {word for word in normalize_text(title1).split() if len(word) >= MIN_TERM_LENGTH}
    words2 = {word for word in normalize_text(title2).split() if len(word) >= MIN_TERM_LENGTH}
    return words1 & words2


def _title_similarity(score: float, title1: str, title2: str) -> float:
    title_terms1 = set(extract_key_terms(normalize_text(title1), TITLE_TERM_LIMIT))
    title_terms2 = set(extract_key_terms(normalize_text(title2), TITLE_TERM_LIMIT))
    title_jaccard = jaccard_similarity(title_terms1, title_terms2)
    if title_jaccard > TITLE_DOMINANCE_FLOOR:
        score = max(score, title_jaccard * TITLE_WEIGHT + score * (1 - TITLE_WEIGHT))

    shared = len(shared_title_words(title1, title2))
    for min_shared, boost in SHARED_TITLE_WORDS_BOOST:
        if shared >= min_shared:
            score = min(1.0, score + boost)
    return score


def _time_bonus(article1: NormalizedArticle, article2: NormalizedArticle) -> float:
    published1 = article1.published_dt()
    published2 = article2.published_dt()
    if published1 is None or published2 is None:
        return 0.0
    days_apart = abs((published1 - published2).total_seconds()) / SECONDS_PER_DAY
    for max_days, bonus in RECENCY_BONUS:
        if days_apart <= max_days:
            return bonus
    return 0.0


def _domain_bonus(article1: NormalizedArticle, article2: NormalizedArticle) -> float:
    host1 = extract_hostname(article1.url)
    host2 = extract_hostname(article2.url)
    if host1 and host1 == host2:
        return SAME_DOMAIN_BONUS
    return 0.0


def similarity(article1: NormalizedArticle, article2: NormalizedArticle) -> float:
    """Score in [0, 1] that two articles cover the same story.

    Term overlap of title plus description dominates, shared title words
    raise the score, and publish-time proximity and a shared hostname act as
    small bonuses. Unusable dates or URLs only remove their bonus.
    """
    text1 = article1.canonical_text()
    text2 = article2.canonical_text()
    if not text1 or not text2:
        return 0.0

    terms1 = set(extract_key_terms(text1, TEXT_TERM_LIMIT))
    terms2 = set(extract_key_terms(text2, TEXT_TERM_LIMIT))
    text_similarity = jaccard_similarity(terms1, terms2)

    if article1.title and article2.title:
        text_similarity = _title_similarity(text_similarity, article1.title, article2.title)

    text_similarity = min(1.0, text_similarity + _domain_bonus(article1, article2))
    time_bonus = _time_bonus(article1, article2)
    return min(1.0, text_similarity * TEXT_WEIGHT + time_bonus * TIME_WEIGHT)
