# app/models.py
"""
News aggregation database models.

Tables:
- Category: Article categories, created lazily by name during ingestion
- Source: Providers / publishers, created lazily by name during ingestion
- Author: Bylines, created lazily by name during ingestion
- Article: Normalized articles, unique by content fingerprint
- User: API consumers (identity for the API-key auth provider)
- UserPermission: Permission names granted to a user
- UserPreference: One row per user with preferred category/source/author IDs
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base

# Upper bound of an INTEGER column; larger IDs or page numbers cannot match a row
MAX_INT = 2**31 - 1


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class Permission(str, Enum):
    """Permission names checked before retrieval operations run."""
    ARTICLES_VIEW = "articles.view"
    PREFERENCES_CREATE = "preferences.create"
    PREFERENCES_VIEW = "preferences.view"


# -----------------------------------------------------------------------------
# Named entities
# -----------------------------------------------------------------------------

class Category(Base):
    """Article category. Name is immutable once created."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    articles = relationship("Article", back_populates="category", passive_deletes=True)


class Source(Base):
    """News provider the article was ingested from."""
    __tablename__ = "sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    articles = relationship("Article", back_populates="source", passive_deletes=True)


class Author(Base):
    """Article byline."""
    __tablename__ = "authors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    articles = relationship("Article", back_populates="author", passive_deletes=True)


# -----------------------------------------------------------------------------
# Article
# -----------------------------------------------------------------------------

class Article(Base):
    """
    Normalized article.

    article_identifier is an MD5 fingerprint of (title, source_id, published_at)
    and is the conflict target for ingestion upserts. created_at is written on
    first insert only; every re-ingestion refreshes the mutable fields and
    updated_at.
    """
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_identifier = Column(String(32), unique=True, nullable=False)

    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=True)
    source_id = Column(Integer, ForeignKey("sources.id", ondelete="CASCADE"), nullable=True)
    author_id = Column(Integer, ForeignKey("authors.id", ondelete="CASCADE"), nullable=True)

    published_at = Column(DateTime, nullable=False)
    # True when the provider gave no parseable date and ingestion time was used
    published_at_estimated = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="articles")
    source = relationship("Source", back_populates="articles")
    author = relationship("Author", back_populates="articles")

    __table_args__ = (
        Index("ix_articles_published_at", "published_at"),
        Index("ix_articles_category_id", "category_id"),
        Index("ix_articles_source_id", "source_id"),
        Index("ix_articles_author_id", "author_id"),
    )


# -----------------------------------------------------------------------------
# Users and preferences
# -----------------------------------------------------------------------------

class User(Base):
    """API consumer. Only a hash of the issued API key is stored."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    api_key_hash = Column(String(64), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    permissions = relationship("UserPermission", back_populates="user", cascade="all, delete-orphan")
    preference = relationship("UserPreference", back_populates="user", uselist=False, cascade="all, delete-orphan")

    def has_permission(self, name: str) -> bool:
        return any(p.name == name for p in self.permissions)


class UserPermission(Base):
    """A permission name granted to a user."""
    __tablename__ = "user_permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(64), nullable=False)

    user = relationship("User", back_populates="permissions")

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_user_permission"),
    )


class UserPreference(Base):
    """
    Saved personalization for a user.

    Each list holds entity IDs; an empty list means no filter on that dimension.
    """
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    preferred_categories = Column(JSON, default=list, nullable=False)
    preferred_sources = Column(JSON, default=list, nullable=False)
    preferred_authors = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="preference")
