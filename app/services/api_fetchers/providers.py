# app/services/api_fetchers/providers.py
"""
Registered news providers.

NewsAPI.org:      https://newsapi.org/docs/endpoints/top-headlines
The Guardian:     https://open-platform.theguardian.com/documentation/search
New York Times:   https://developer.nytimes.com/docs/top-stories-product/1/overview
"""

from app.exceptions import UnknownProviderError
from app.services.api_fetchers.base import FieldMap, ProviderConfig

NEWSAPI = ProviderConfig(
    name="NewsAPI",
    base_url="https://newsapi.org/v2/top-headlines",
    params={"country": "us"},
    api_key_param="apiKey",
    api_key_setting="NEWSAPI_API_KEY",
    field_map=FieldMap(
        title_key="title",
        desc_key="description",
        content_key="content",
        author_key="author",
        category_key="category",
        date_key="publishedAt",
        data_path="articles",
    ),
)

# Search results only carry the headline, so it stands in for description and content
GUARDIAN = ProviderConfig(
    name="The Guardian",
    base_url="https://content.guardianapis.com/search",
    api_key_param="api-key",
    api_key_setting="GUARDIAN_API_KEY",
    field_map=FieldMap(
        title_key="webTitle",
        desc_key="webTitle",
        content_key="webTitle",
        author_key=None,
        category_key="pillarName",
        date_key="webPublicationDate",
        data_path="response.results",
    ),
)

NYTIMES = ProviderConfig(
    name="New York Times",
    base_url="https://api.nytimes.com/svc/topstories/v2/home.json",
    api_key_param="api-key",
    api_key_setting="NYTIMES_API_KEY",
    field_map=FieldMap(
        title_key="title",
        desc_key="abstract",
        content_key="abstract",
        author_key="byline",
        category_key="section",
        date_key="published_date",
        data_path="results",
    ),
)

PROVIDERS: tuple[ProviderConfig, ...] = (NEWSAPI, GUARDIAN, NYTIMES)


def get_provider(name: str) -> ProviderConfig:
    """Look up a provider by name (case-insensitive)."""
    for provider in PROVIDERS:
        if provider.name.lower() == name.strip().lower():
            return provider
    raise UnknownProviderError(name)
