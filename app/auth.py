# app/auth.py
"""
Shared authentication dependencies.

Admin endpoints compare X-API-Key against ADMIN_API_KEY. Consumer endpoints
resolve X-API-Key to a User by the SHA-256 hash of the key, then check the
permission the route requires before any other work happens.
"""

import hashlib
import secrets

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session, selectinload

from app import models
from app.config import get_settings
from app.database import get_db
from app.exceptions import AuthenticationError, AuthorizationFailure


def require_admin_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> None:
    """Validate admin API key. Fails closed if ADMIN_API_KEY is not set."""
    expected_key = get_settings().ADMIN_API_KEY

    if not expected_key:
        raise HTTPException(
            status_code=500,
            detail="Server misconfiguration: admin authentication not configured",
        )

    if not x_api_key or not secrets.compare_digest(x_api_key, expected_key):
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing API key",
        )


def generate_api_key() -> str:
    """New random consumer key. Only its hash is stored."""
    return secrets.token_urlsafe(32)


def hash_api_key(api_key: str) -> str:
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


def get_current_user(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    db: Session = Depends(get_db),
) -> models.User:
    """Resolve the calling user from X-API-Key."""
    if not x_api_key:
        raise AuthenticationError()

    user = (
        db.query(models.User)
        .options(selectinload(models.User.permissions))
        .filter(models.User.api_key_hash == hash_api_key(x_api_key))
        .first()
    )
    if user is None:
        raise AuthenticationError()
    return user


def require_permission(permission: models.Permission):
    """
    Dependency factory: the current user, provided they hold `permission`.

    Usage:
        user: models.User = Depends(require_permission(models.Permission.ARTICLES_VIEW))
    """

    def dependency(user: models.User = Depends(get_current_user)) -> models.User:
        if not user.has_permission(permission.value):
            raise AuthorizationFailure(permission.value)
        return user

    return dependency
