# app/services/api_fetchers/__init__.py
"""
News provider fetching and normalization for the ingestion pipeline.

Providers are declared as data (ProviderConfig + FieldMap). A single Fetcher
retrieves any provider's JSON and a single normalize() maps it onto
CanonicalArticle records.

Supported providers:
- NewsAPI.org (top headlines)
- The Guardian (content search)
- New York Times (top stories)
"""

from app.services.api_fetchers.base import CanonicalArticle, FieldMap, ProviderConfig
from app.services.api_fetchers.fetcher import Fetcher, FetchResult
from app.services.api_fetchers.normalizer import normalize
from app.services.api_fetchers.providers import PROVIDERS, get_provider

__all__ = [
    "CanonicalArticle",
    "FieldMap",
    "ProviderConfig",
    "Fetcher",
    "FetchResult",
    "normalize",
    "PROVIDERS",
    "get_provider",
]
