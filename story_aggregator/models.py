from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .utils import parse_timestamp


@dataclass
class NormalizedArticle:
    title: str
    description: str
    url: str
    published_at: str
    source_name: str
    source: str = "unknown"
    id: str = ""
    content: str = ""
    image_url: str = ""
    author: str = ""
    language: str = "en"

    def canonical_text(self) -> str:
        return f"{self.title or ''} {self.description or ''}".strip()

    def published_dt(self) -> datetime | None:
        return parse_timestamp(self.published_at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "publishedAt": self.published_at,
            "sourceName": self.source_name,
            "source": self.source,
            "imageUrl": self.image_url,
            "author": self.author,
        }


@dataclass
class ArticleGroup:
    group_id: str
    articles: list[NormalizedArticle] = field(default_factory=list)

    def sources(self) -> list[str]:
        seen: dict[str, None] = {}
        for article in self.articles:
            seen.setdefault((article.source or "unknown").lower().strip(), None)
        return list(seen)

    def source_count(self) -> int:
        return len(self.sources())

    def is_multi_source(self) -> bool:
        return self.source_count() >= 2

    def latest_published(self) -> datetime | None:
        dates = [dt for dt in (article.published_dt() for article in self.articles) if dt is not None]
        return max(dates) if dates else None


@dataclass
class SummarizedGroup:
    group_id: str
    group_title: str
    summary: str
    articles: list[NormalizedArticle]
    source_count: int
    sources: list[str]

    def to_dict(self) -> dict:
        return {
            "groupId": self.group_id,
            "groupTitle": self.group_title,
            "summary": self.summary,
            "aiSummary": self.summary,
            "articles": [article.to_dict() for article in self.articles],
            "sourceCount": self.source_count,
            "sources": self.sources,
        }


@dataclass
class Pagination:
    current_page: int
    total_pages: int
    total_groups: int
    groups_per_page: int

    def to_dict(self) -> dict:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "totalGroups": self.total_groups,
            "groupsPerPage": self.groups_per_page,
        }


@dataclass
class AggregateResult:
    query: str
    country: str
    category: str
    grouped_articles: list[SummarizedGroup] = field(default_factory=list)
    raw_articles: list[NormalizedArticle] = field(default_factory=list)
    pagination: Pagination | None = None
    warnings: list[str] = field(default_factory=list)
    generated_at: str = ""

    def to_dict(self) -> dict:
        payload: dict = {
            "query": self.query,
            "country": self.country or None,
            "category": self.category or None,
            "groupedArticles": [group.to_dict() for group in self.grouped_articles],
            "rawArticles": [article.to_dict() for article in self.raw_articles],
        }
        if self.pagination is not None:
            payload["pagination"] = self.pagination.to_dict()
        if self.warnings:
            payload["warnings"] = list(self.warnings)
        if self.generated_at:
            payload["generatedAt"] = self.generated_at
        return payload
