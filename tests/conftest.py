# tests/conftest.py
"""
Pytest configuration and fixtures.

Every test gets a fresh schema on the shared in-memory SQLite engine and an
empty response cache.
"""

import os
from datetime import datetime

import pytest

# Set test environment
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")

from app import models  # noqa: E402
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.services.cache import get_cache  # noqa: E402


@pytest.fixture(autouse=True)
def schema():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clear_cache():
    get_cache().clear()
    yield
    get_cache().clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    """Create test client."""
    from fastapi.testclient import TestClient

    from app.main import app

    return TestClient(app)


@pytest.fixture
def make_user(db):
    """
    Factory: create a user with the given permissions.

    Returns (user, api_key). Defaults to every permission.
    """
    from app.cli.users import ALL_PERMISSIONS, create_user

    counter = {"n": 0}

    def _make(permissions=None, email=None):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        perms = ALL_PERMISSIONS if permissions is None else permissions
        return create_user(db, f"User {counter['n']}", email, perms)

    return _make


@pytest.fixture
def make_article(db):
    """Factory: insert an article with named category/source/author (created on demand)."""
    counter = {"n": 0}

    def _get_or_create(model, name):
        entity = db.query(model).filter(model.name == name).first()
        if entity is None:
            entity = model(name=name)
            db.add(entity)
            db.flush()
        return entity

    def _make(
        title="Article",
        category="General",
        source="NewsAPI",
        author="Unknown",
        published_at=None,
    ):
        counter["n"] += 1
        article = models.Article(
            article_identifier=f"{counter['n']:032x}",
            title=title,
            description=f"{title} description",
            content=f"{title} content",
            category=_get_or_create(models.Category, category),
            source=_get_or_create(models.Source, source),
            author=_get_or_create(models.Author, author),
            published_at=published_at or datetime(2024, 1, 1, 12, 0, 0),
        )
        db.add(article)
        db.commit()
        db.refresh(article)
        return article

    return _make
