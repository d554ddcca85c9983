# app/config.py
"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate all environment variables at startup.
Fail fast with clear error messages if required config is missing.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="PostgreSQL connection URL (sqlite:// is accepted for local runs and tests)",
    )

    # Authentication
    ADMIN_API_KEY: str | None = Field(
        default=None,
        description="API key for admin endpoints (ingestion trigger)",
    )

    # News providers
    NEWSAPI_API_KEY: str | None = Field(
        default=None,
        description="NewsAPI.org API key",
    )
    GUARDIAN_API_KEY: str | None = Field(
        default=None,
        description="The Guardian Open Platform API key",
    )
    NYTIMES_API_KEY: str | None = Field(
        default=None,
        description="New York Times Top Stories API key",
    )

    # Fetching
    FETCH_MAX_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        description="Attempts per provider request before giving up",
    )
    FETCH_RETRY_DELAY_MS: int = Field(
        default=100,
        ge=0,
        description="Fixed delay between fetch attempts in milliseconds",
    )
    FETCH_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout for a single provider request",
    )

    # Retrieval
    CACHE_TTL_SECONDS: int = Field(
        default=3600,
        ge=1,
        description="TTL for cached article lists, details and personalized feeds",
    )
    CACHE_MAX_ENTRIES: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of cached responses held in memory",
    )
    PAGE_SIZE: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Articles per page for listings and personalized feeds",
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level",
    )
    LOG_JSON: bool = Field(
        default=True,
        description="Emit single-line JSON logs (disable for human-readable local output)",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Hosted Postgres often provides postgresql:// but SQLAlchemy needs postgresql+psycopg2://"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings. Call at startup to validate config."""
    return Settings()
