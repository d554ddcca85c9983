# app/exceptions.py
"""
Error taxonomy for ingestion and retrieval.

Retrieval errors carry an HTTP status and a structured `errors` payload that
the API renders as {"success": false, "message": ..., "errors": ...}.
Ingestion errors are caught per provider and never end a run.
"""

from typing import Any


class NewsApiError(Exception):
    """Base class for all application errors."""

    status_code: int = 500

    def __init__(self, message: str, errors: Any = None, status_code: int | None = None):
        self.message = message
        self.errors = errors if errors is not None else {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "message": self.message,
            "errors": self.errors,
        }


# -----------------------------------------------------------------------------
# Retrieval path
# -----------------------------------------------------------------------------


class ValidationFailure(NewsApiError):
    """Malformed filter or preference input. `errors` maps field -> messages."""

    status_code = 422

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation error"):
        super().__init__(message, errors)


class ArticleNotFoundError(NewsApiError):
    """Requested article ID does not exist."""

    status_code = 404

    def __init__(self, article_id: int):
        self.article_id = article_id
        super().__init__("Article not found")


class AuthenticationError(NewsApiError):
    """No identity could be established for the request."""

    status_code = 401

    def __init__(self, message: str = "Unauthenticated"):
        super().__init__(message)


class AuthorizationFailure(NewsApiError):
    """Permission check failed. Raised before any resource lookup."""

    status_code = 403

    def __init__(self, permission: str):
        self.permission = permission
        super().__init__("Unauthorized")


# -----------------------------------------------------------------------------
# Ingestion path
# -----------------------------------------------------------------------------


class UnknownProviderError(NewsApiError):
    """No provider configuration with the requested name."""

    status_code = 422

    def __init__(self, name: str):
        self.name = name
        message = f"Unknown news provider: {name}"
        super().__init__(message, {"providers": [message]})


class StoreError(NewsApiError):
    """Unexpected persistence failure during an ingestion upsert."""

    def __init__(self, source_name: str, cause: Exception):
        self.source_name = source_name
        self.cause = cause
        super().__init__(f"Failed to store articles for {source_name}")
