# app/routers/articles.py
"""
Article endpoints.

GET /api/articles       - Filtered, paginated listing (articles.view)
GET /api/articles/{id}  - Single article (articles.view)
"""

import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app import models
from app.auth import require_permission
from app.config import get_settings
from app.database import get_db
from app.exceptions import ValidationFailure
from app.schemas.articles import ArticlePage, ArticleResponse
from app.schemas.common import ApiResponse
from app.services.articles import ArticleService
from app.services.query_builder import ArticleFilters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["articles"])


def _parse_day(value: str | None) -> date | None:
    """Strict YYYY-MM-DD. Empty means no filter."""
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationFailure({"date": ["The date field must match the format Y-m-d."]})


@router.get("/articles", response_model=ApiResponse[ArticlePage])
def list_articles(
    keyword: str | None = Query(None, max_length=255, description="Substring match on title"),
    published_on: str | None = Query(None, alias="date", description="Publish day, YYYY-MM-DD (UTC)"),
    category: str | None = Query(None, max_length=255, description="Exact category name"),
    source: str | None = Query(None, max_length=255, description="Exact source name"),
    page: int = Query(1, ge=1, le=models.MAX_INT),
    db: Session = Depends(get_db),
    _: models.User = Depends(require_permission(models.Permission.ARTICLES_VIEW)),
) -> dict:
    """
    List articles matching every supplied filter.

    Results are in insertion order, 10 per page, and cached for an hour.
    """
    filters = ArticleFilters(
        keyword=keyword,
        date=_parse_day(published_on),
        category=category,
        source=source,
        page=page,
    )
    service = ArticleService(db, page_size=get_settings().PAGE_SIZE)
    return {"success": True, "message": "Articles fetched successfully", "data": service.list_articles(filters)}


@router.get("/articles/{article_id}", response_model=ApiResponse[ArticleResponse])
def get_article(
    article_id: int,
    db: Session = Depends(get_db),
    _: models.User = Depends(require_permission(models.Permission.ARTICLES_VIEW)),
) -> dict:
    service = ArticleService(db)
    return {"success": True, "message": "Article fetched successfully", "data": service.get_article(article_id)}
