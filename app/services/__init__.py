# app/services/__init__.py
"""
Business logic services.
"""

from app.services.articles import ArticleService
from app.services.cache import CacheLayer, get_cache
from app.services.deduper import Deduper, StoreResult
from app.services.ingestion import IngestionService
from app.services.preferences import PreferenceService
from app.services.query_builder import ArticleFilters, ArticleQueryBuilder, Page

__all__ = [
    "IngestionService",
    "Deduper",
    "StoreResult",
    "ArticleService",
    "PreferenceService",
    "ArticleFilters",
    "ArticleQueryBuilder",
    "Page",
    "CacheLayer",
    "get_cache",
]
