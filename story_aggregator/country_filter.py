from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import COUNTRY_INDICATORS, COUNTRY_NAMES, COUNTRY_VARIATIONS, STRICT_COUNTRY_CATEGORIES
from .models import NormalizedArticle


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CountryMatch:
    matches: bool
    confidence: str
    reason: str


def _normalize_category(category: str | None) -> str:
    value = (category or "").strip().lower()
    if value == "sport":
        return "sports"
    return value


def _article_text(article: NormalizedArticle) -> str:
    return f" {article.title} {article.description} {article.content} ".lower()


def _generic_terms(code: str) -> list[str]:
    name = COUNTRY_NAMES[code]
    return [name.lower(), *(term.lower() for term in COUNTRY_VARIATIONS.get(code, []))]


def _has_generic_term(text: str, code: str) -> bool:
    return any(f" {term} " in text or f" {term}," in text for term in _generic_terms(code))


def article_matches_country(
    article: NormalizedArticle,
    country_code: str,
    category: str | None = None,
) -> CountryMatch:
    code = (country_code or "").strip().upper()
    if code not in COUNTRY_NAMES:
        return CountryMatch(True, "low", "Unknown country code")

    text = _article_text(article)
    indicators = COUNTRY_INDICATORS.get(code)
    if indicators is None:
        found = _has_generic_term(text, code)
        return CountryMatch(found, "medium" if found else "low", "Contains country term" if found else "No country match")

    category = _normalize_category(category)
    active = indicators.get(category) if category in STRICT_COUNTRY_CATEGORIES else None
    if not isinstance(active, dict):
        active = {"positive": indicators.get("positive", []), "negative": indicators.get("negative", [])}

    positive = sum(1 for term in active["positive"] if term in text)
    negative = sum(1 for term in active["negative"] if term in text)
    strict = category in STRICT_COUNTRY_CATEGORIES

    if strict:
        if negative > 0 and positive == 0:
            return CountryMatch(False, "high", f"Contains {negative} negative indicator(s) for {category}")
        if positive == 0 and negative == 0:
            if _has_generic_term(text, code):
                return CountryMatch(True, "medium", "Contains country name in content")
            return CountryMatch(False, "medium", f"No country-specific indicators for {category}")
    elif negative > positive and negative >= 2:
        return CountryMatch(False, "medium", "More negative than positive indicators")

    if positive > 0:
        return CountryMatch(True, "high" if positive >= 2 else "medium", f"Contains {positive} positive indicator(s)")
    if not strict and _has_generic_term(text, code):
        return CountryMatch(True, "low", "Contains country name in content")
    if strict:
        return CountryMatch(False, "low", f"No country indicators found for {category} article")
    return CountryMatch(True, "low", "No clear country indicators - allowing as global content")


def filter_articles_by_country(
    articles: list[NormalizedArticle],
    country_code: str | None,
    category: str | None = None,
    include_international: bool = False,
) -> list[NormalizedArticle]:
    if not country_code:
        return list(articles)
    strict = _normalize_category(category) in STRICT_COUNTRY_CATEGORIES
    kept: list[NormalizedArticle] = []
    for article in articles:
        match = article_matches_country(article, country_code, category)
        if match.matches:
            kept.append(article)
        elif match.confidence == "low" and (include_international or not strict):
            kept.append(article)
    log.info(
        "Country filter kept %d of %d article(s) for %s (category=%s, strict=%s).",
        len(kept),
        len(articles),
        country_code.upper(),
        category or "none",
        strict,
    )
    return kept
