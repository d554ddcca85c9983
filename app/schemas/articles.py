# app/schemas/articles.py
"""
Schemas for article endpoints.

GET /api/articles       - Filtered, paginated listing
GET /api/articles/{id}  - Single article
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NamedEntity(BaseModel):
    """Category, source or author reference."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ArticleResponse(BaseModel):
    """An article with its category, source and author."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    article_identifier: str = Field(..., description="MD5 fingerprint of title, source and publish time")
    title: str
    description: str | None = None
    content: str | None = None
    published_at: datetime = Field(..., description="Publish time (UTC)")
    published_at_estimated: bool = Field(False, description="True when the provider gave no usable date")
    category: NamedEntity | None = None
    source: NamedEntity | None = None
    author: NamedEntity | None = None
    created_at: datetime
    updated_at: datetime


class ArticlePage(BaseModel):
    """One page of articles."""

    items: list[ArticleResponse] = Field(default_factory=list)
    total: int = Field(..., description="Matching articles across all pages")
    page: int
    per_page: int
    last_page: int
