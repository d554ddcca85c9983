# app/services/query_builder.py
"""
Article retrieval query composition.

Every filter is optional; present filters are ANDed together. Results always
eager-load category, source and author and are paginated with a fixed page size.
"""

import math
from dataclasses import dataclass, field
from datetime import date as Day
from datetime import datetime, time, timedelta
from typing import Any, Literal

from sqlalchemy.orm import Query, Session, joinedload

from app import models

DEFAULT_PAGE_SIZE = 10

# "default": insertion order (id ASC). "recent": newest published first.
Ordering = Literal["default", "recent"]


@dataclass
class ArticleFilters:
    """Recognized retrieval filters. Empty strings and empty lists mean "no filter"."""

    keyword: str | None = None
    date: Day | None = None
    category: str | None = None
    source: str | None = None
    preferred_category_ids: list[int] = field(default_factory=list)
    preferred_source_ids: list[int] = field(default_factory=list)
    preferred_author_ids: list[int] = field(default_factory=list)
    page: int = 1

    def __post_init__(self):
        self.keyword = self.keyword or None
        self.category = self.category or None
        self.source = self.source or None
        self.preferred_category_ids = list(self.preferred_category_ids or [])
        self.preferred_source_ids = list(self.preferred_source_ids or [])
        self.preferred_author_ids = list(self.preferred_author_ids or [])
        self.page = max(int(self.page or 1), 1)

    @classmethod
    def from_preference(cls, preference: models.UserPreference, page: int = 1) -> "ArticleFilters":
        return cls(
            preferred_category_ids=preference.preferred_categories,
            preferred_source_ids=preference.preferred_sources,
            preferred_author_ids=preference.preferred_authors,
            page=page,
        )

    def canonical(self) -> dict[str, Any]:
        """
        Applied filters only, with typed JSON-ready values.

        ID lists are sorted and de-duplicated, so equivalent filter sets
        produce identical output regardless of input order.
        """
        applied: dict[str, Any] = {"page": self.page}
        if self.keyword is not None:
            applied["keyword"] = self.keyword
        if self.date is not None:
            applied["date"] = self.date.isoformat()
        if self.category is not None:
            applied["category"] = self.category
        if self.source is not None:
            applied["source"] = self.source
        if self.preferred_category_ids:
            applied["preferred_category_ids"] = sorted(set(self.preferred_category_ids))
        if self.preferred_source_ids:
            applied["preferred_source_ids"] = sorted(set(self.preferred_source_ids))
        if self.preferred_author_ids:
            applied["preferred_author_ids"] = sorted(set(self.preferred_author_ids))
        return applied


@dataclass
class Page:
    """One page of query results."""

    items: list[models.Article]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1)


class ArticleQueryBuilder:
    """Builds filtered article queries."""

    def __init__(self, db: Session, page_size: int = DEFAULT_PAGE_SIZE):
        self.db = db
        self.page_size = page_size

    def build(self, filters: ArticleFilters, order: Ordering = "default") -> Query:
        """Compose all applied filters into one query."""
        query = self.db.query(models.Article).options(
            joinedload(models.Article.category),
            joinedload(models.Article.source),
            joinedload(models.Article.author),
        )

        if filters.keyword:
            query = query.filter(models.Article.title.contains(filters.keyword, autoescape=True))

        if filters.date:
            day_start = datetime.combine(filters.date, time.min)
            query = query.filter(
                models.Article.published_at >= day_start,
                models.Article.published_at < day_start + timedelta(days=1),
            )

        if filters.category:
            query = query.filter(
                models.Article.category.has(models.Category.name == filters.category)
            )

        if filters.source:
            query = query.filter(
                models.Article.source.has(models.Source.name == filters.source)
            )

        if filters.preferred_category_ids:
            query = query.filter(models.Article.category_id.in_(filters.preferred_category_ids))

        if filters.preferred_source_ids:
            query = query.filter(models.Article.source_id.in_(filters.preferred_source_ids))

        if filters.preferred_author_ids:
            query = query.filter(models.Article.author_id.in_(filters.preferred_author_ids))

        if order == "recent":
            query = query.order_by(models.Article.published_at.desc(), models.Article.id.desc())
        else:
            query = query.order_by(models.Article.id.asc())

        return query

    def paginate(self, query: Query, page: int) -> Page:
        """Fetch one page. Pages past the end are empty, not errors."""
        page = max(page, 1)
        total = query.order_by(None).count()
        items = query.offset((page - 1) * self.page_size).limit(self.page_size).all()
        return Page(items=items, total=total, page=page, per_page=self.page_size)

    def fetch(self, filters: ArticleFilters, order: Ordering = "default") -> Page:
        """build() then paginate() using the page carried by the filters."""
        return self.paginate(self.build(filters, order), filters.page)
