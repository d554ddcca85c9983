# app/services/api_fetchers/normalizer.py
"""
Field-map driven normalization of provider payloads.

normalize() is pure: it never touches the network or the database and never
raises for bad input. A payload that is empty, malformed, or missing the
data_path yields an empty list.
"""

import logging
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

from app.services.api_fetchers.base import (
    DEFAULT_AUTHOR,
    DEFAULT_CATEGORY,
    DEFAULT_CONTENT,
    DEFAULT_DESCRIPTION,
    DEFAULT_TITLE,
    CanonicalArticle,
    FieldMap,
)

logger = logging.getLogger(__name__)

# Column limit for Category/Author/Source names
MAX_NAME_LENGTH = 255

# Non-ISO formats seen in provider payloads
DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M:%S",
)


def resolve_path(payload: Any, path: str | None) -> Any:
    """
    Walk a dot path through nested dicts and lists.

    Numeric segments index into lists. Returns None when any segment is missing.
    An empty path returns the payload itself.
    """
    if not path:
        return payload

    current = payload
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                return None
            current = current[segment]
        elif isinstance(current, list) and segment.lstrip("-").isdigit():
            index = int(segment)
            if not -len(current) <= index < len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


def parse_date(value: Any) -> datetime | None:
    """
    Parse a provider timestamp into naive UTC.

    Accepts ISO-8601 (including a trailing "Z"), a few common SQL-style
    formats, RFC 2822 strings and epoch seconds. Returns None when unparseable.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _to_naive_utc(value)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, UTC).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return _to_naive_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    try:
        return _to_naive_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        return None


def _read_text(raw: dict[str, Any], key: str | None, default: str) -> str:
    """Read a mapped field as text, falling back to `default` for absent keys and nulls."""
    if key is None:
        return default

    value = raw.get(key)
    if value is None:
        return default

    # Some providers send lists (e.g. several bylines or categories): keep the first
    if isinstance(value, list):
        first = next((v for v in value if v is not None), None)
        if first is None:
            return default
        value = first

    if isinstance(value, dict):
        value = value.get("name")
        if value is None:
            return default

    return value if isinstance(value, str) else str(value)


def _read_name(raw: dict[str, Any], key: str | None, default: str) -> str:
    """Entity names are stripped and must fit the name column."""
    name = _read_text(raw, key, default).strip()
    return name[:MAX_NAME_LENGTH] if name else default


def normalize_article(raw: dict[str, Any], field_map: FieldMap, now: datetime) -> CanonicalArticle:
    """Map one raw article dict onto the canonical schema."""
    published_at = None
    if field_map.date_key is not None:
        published_at = parse_date(raw.get(field_map.date_key))

    return CanonicalArticle(
        title=_read_text(raw, field_map.title_key, DEFAULT_TITLE),
        description=_read_text(raw, field_map.desc_key, DEFAULT_DESCRIPTION),
        content=_read_text(raw, field_map.content_key, DEFAULT_CONTENT),
        author=_read_name(raw, field_map.author_key, DEFAULT_AUTHOR),
        category=_read_name(raw, field_map.category_key, DEFAULT_CATEGORY),
        published_at=published_at or now,
        published_at_estimated=published_at is None,
    )


def normalize(payload: Any, field_map: FieldMap, *, now: datetime | None = None) -> list[CanonicalArticle]:
    """
    Extract and normalize every article in a provider payload.

    Args:
        payload: Decoded JSON response body
        field_map: Where each canonical field lives for this provider
        now: Ingestion time used for missing or unparseable dates (default: utcnow)

    Returns:
        Canonical articles in payload order
    """
    now = now or datetime.utcnow()

    raw_articles = resolve_path(payload, field_map.data_path)
    if not isinstance(raw_articles, list):
        if payload:
            logger.warning(f"No article list at data_path '{field_map.data_path}'")
        return []

    articles: list[CanonicalArticle] = []
    for index, raw in enumerate(raw_articles):
        if not isinstance(raw, dict):
            logger.debug(f"Skipping non-object article at index {index}")
            continue
        articles.append(normalize_article(raw, field_map, now))

    return articles
