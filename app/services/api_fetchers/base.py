# app/services/api_fetchers/base.py
"""
Base types for provider ingestion.

A provider is described entirely by data: where to fetch (endpoint plus
credentials) and where each canonical field lives in its JSON (a FieldMap).
One generic normalizer consumes every FieldMap, so supporting a new provider
means adding a ProviderConfig row, not new code.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

# Defaults applied when a mapped key is absent or its value is null
DEFAULT_TITLE = "No Title"
DEFAULT_DESCRIPTION = ""
DEFAULT_CONTENT = ""
DEFAULT_AUTHOR = "Unknown"
DEFAULT_CATEGORY = "General"


@dataclass(frozen=True)
class FieldMap:
    """
    Location of each canonical field inside one raw provider article.

    Any key may be None, in which case the normalizer uses the default.
    data_path is a dot path to the list of raw articles in the response
    (e.g. "articles" or "response.results").
    """

    title_key: str | None
    desc_key: str | None
    content_key: str | None
    author_key: str | None
    category_key: str | None
    date_key: str | None
    data_path: str


@dataclass(frozen=True)
class ProviderConfig:
    """Declarative description of one news provider."""

    name: str  # Also the Source name articles are stored under
    base_url: str
    api_key_param: str  # Query parameter that carries the credential
    api_key_setting: str  # Settings attribute holding the credential
    field_map: FieldMap
    params: dict[str, str] = field(default_factory=dict)

    def api_key(self, settings: Any) -> str | None:
        """Return the configured credential, or None when the provider is not configured."""
        value = getattr(settings, self.api_key_setting, None)
        return value or None

    def endpoint(self, api_key: str) -> str:
        """Full request URL including static query params and the credential."""
        return str(httpx.URL(self.base_url, params={**self.params, self.api_key_param: api_key}))

    def redact(self, url: str) -> str:
        """URL safe for logs: the credential value is masked."""
        parsed = httpx.URL(url)
        if self.api_key_param not in parsed.params:
            return url
        return str(parsed.copy_set_param(self.api_key_param, "***"))


@dataclass(frozen=True)
class CanonicalArticle:
    """A provider article mapped onto the canonical schema."""

    title: str
    description: str
    content: str
    author: str
    category: str
    published_at: datetime  # Naive UTC
    published_at_estimated: bool = False  # True when ingestion time stood in for a missing date
