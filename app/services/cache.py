# app/services/cache.py
"""
In-process response cache for article listings, article detail and
personalized feeds.

Entries are JSON-ready payloads held in a cachetools TTLCache. Keys:
- articles:list:<sha256 of canonical filter JSON>
- articles:detail:<article id>
- preferences:feed:<user id>:page:<page>
"""

import hashlib
import json
import logging
import threading
from collections.abc import Callable
from typing import Any

from cachetools import TTLCache

from app.config import get_settings

logger = logging.getLogger(__name__)

ARTICLE_LIST_PREFIX = "articles:list:"
ARTICLE_DETAIL_PREFIX = "articles:detail:"
FEED_PREFIX = "preferences:feed:"


# -----------------------------------------------------------------------------
# Key derivation
# -----------------------------------------------------------------------------


def canonical_json(data: dict[str, Any]) -> str:
    """Deterministic JSON: sorted keys, no whitespace."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)


def article_list_key(applied_filters: dict[str, Any]) -> str:
    """Key for one page of a filtered listing. Takes ArticleFilters.canonical() output."""
    digest = hashlib.sha256(canonical_json(applied_filters).encode("utf-8")).hexdigest()
    return f"{ARTICLE_LIST_PREFIX}{digest}"


def article_key(article_id: int) -> str:
    return f"{ARTICLE_DETAIL_PREFIX}{article_id}"


def feed_prefix(user_id: int) -> str:
    """Prefix shared by every cached page of one user's feed."""
    return f"{FEED_PREFIX}{user_id}:"


def personalized_feed_key(user_id: int, page: int) -> str:
    return f"{feed_prefix(user_id)}page:{page}"


# -----------------------------------------------------------------------------
# Cache
# -----------------------------------------------------------------------------


class CacheLayer:
    """
    Thread-safe TTL cache with get-or-compute.

    Each invalidation bumps a generation counter. get_or_compute() only stores
    its result when no invalidation happened while it was computing, so a slow
    query that read pre-invalidation data cannot repopulate a fresh key.
    """

    def __init__(self, maxsize: int = 1000, ttl_seconds: int = 3600):
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.RLock()
        self._generation = 0

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._cache.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._cache[key] = value

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        """
        Return the cached value for `key`, computing and storing it on a miss.

        `compute` runs outside the lock. Exceptions from it propagate and
        nothing is cached.
        """
        with self._lock:
            if key in self._cache:
                logger.debug(f"Cache hit: {key}", extra={"event": "cache_hit", "cache_key": key})
                return self._cache[key]
            generation = self._generation

        value = compute()

        with self._lock:
            if self._generation == generation:
                self._cache[key] = value
            else:
                logger.debug(
                    f"Not caching {key}: invalidated during compute",
                    extra={"event": "cache_skip", "cache_key": key},
                )
        return value

    def invalidate(self, key: str) -> bool:
        """Evict one key. Returns True if it was cached."""
        with self._lock:
            self._generation += 1
            return self._cache.pop(key, None) is not None

    def invalidate_prefix(self, prefix: str) -> int:
        """Evict every key starting with `prefix`. Returns the number evicted."""
        with self._lock:
            self._generation += 1
            keys = [key for key in self._cache.keys() if key.startswith(prefix)]
            for key in keys:
                self._cache.pop(key, None)
        if keys:
            logger.info(
                f"Invalidated {len(keys)} cache entries with prefix {prefix}",
                extra={"event": "cache_invalidate", "cache_key": prefix},
            )
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache


_cache: CacheLayer | None = None


def get_cache() -> CacheLayer:
    """Process-wide cache sized from settings."""
    global _cache
    if _cache is None:
        settings = get_settings()
        _cache = CacheLayer(maxsize=settings.CACHE_MAX_ENTRIES, ttl_seconds=settings.CACHE_TTL_SECONDS)
    return _cache
