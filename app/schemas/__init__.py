# app/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.
"""

from app.schemas.admin import (
    IngestProviderResult,
    IngestRunRequest,
    IngestRunResponse,
)
from app.schemas.articles import (
    ArticlePage,
    ArticleResponse,
    NamedEntity,
)
from app.schemas.common import (
    ApiResponse,
    ErrorResponse,
)
from app.schemas.preferences import (
    PreferenceResponse,
    PreferenceUpdate,
)

__all__ = [
    # Admin
    "IngestProviderResult",
    "IngestRunRequest",
    "IngestRunResponse",
    # Articles
    "ArticlePage",
    "ArticleResponse",
    "NamedEntity",
    # Envelopes
    "ApiResponse",
    "ErrorResponse",
    # Preferences
    "PreferenceResponse",
    "PreferenceUpdate",
]
