# app/services/articles.py
"""
Article retrieval: filtered listing and single-article lookup, both cached.

Cached values are JSON-ready dicts (ArticlePage / ArticleResponse dumps), so a
hit never touches the session.
"""

import logging
from typing import Any

from sqlalchemy.orm import Session, joinedload

from app import models
from app.exceptions import ArticleNotFoundError
from app.schemas.articles import ArticlePage, ArticleResponse
from app.services.cache import CacheLayer, article_key, article_list_key, get_cache
from app.services.query_builder import DEFAULT_PAGE_SIZE, ArticleFilters, ArticleQueryBuilder, Page

logger = logging.getLogger(__name__)


def serialize_page(page: Page) -> dict[str, Any]:
    return ArticlePage(
        items=[ArticleResponse.model_validate(article) for article in page.items],
        total=page.total,
        page=page.page,
        per_page=page.per_page,
        last_page=page.last_page,
    ).model_dump(mode="json")


class ArticleService:
    """List and fetch articles through the cache."""

    def __init__(self, db: Session, cache: CacheLayer | None = None, page_size: int = DEFAULT_PAGE_SIZE):
        self.db = db
        self.cache = cache if cache is not None else get_cache()
        self.query_builder = ArticleQueryBuilder(db, page_size=page_size)

    def list_articles(self, filters: ArticleFilters) -> dict[str, Any]:
        """One page of articles matching every applied filter, in insertion order."""
        key = article_list_key(filters.canonical())
        return self.cache.get_or_compute(key, lambda: serialize_page(self.query_builder.fetch(filters)))

    def get_article(self, article_id: int) -> dict[str, Any]:
        """
        Single article with category, source and author.

        Raises:
            ArticleNotFoundError: No article has this ID (misses are not cached)
        """
        if not 1 <= article_id <= models.MAX_INT:
            raise ArticleNotFoundError(article_id)
        return self.cache.get_or_compute(article_key(article_id), lambda: self._load_article(article_id))

    def _load_article(self, article_id: int) -> dict[str, Any]:
        article = (
            self.db.query(models.Article)
            .options(
                joinedload(models.Article.category),
                joinedload(models.Article.source),
                joinedload(models.Article.author),
            )
            .filter(models.Article.id == article_id)
            .first()
        )
        if article is None:
            logger.info(f"Article {article_id} not found", extra={"article_id": article_id})
            raise ArticleNotFoundError(article_id)
        return ArticleResponse.model_validate(article).model_dump(mode="json")
