"""
Unit tests for the response cache.
"""

import time

import pytest

from app.services.cache import (
    CacheLayer,
    article_key,
    article_list_key,
    feed_prefix,
    personalized_feed_key,
)


class TestKeys:
    def test_list_key_independent_of_filter_order(self):
        a = article_list_key({"page": 1, "category": "Tech", "source": "BBC"})
        b = article_list_key({"source": "BBC", "category": "Tech", "page": 1})

        assert a == b
        assert a.startswith("articles:list:")

    def test_list_key_distinguishes_values_and_types(self):
        assert article_list_key({"page": 1}) != article_list_key({"page": 2})
        assert article_list_key({"page": 1, "keyword": "1"}) != article_list_key({"page": 1, "keyword": 1})

    def test_scoped_keys(self):
        assert article_key(7) == "articles:detail:7"
        assert personalized_feed_key(3, 2) == "preferences:feed:3:page:2"
        assert personalized_feed_key(3, 2).startswith(feed_prefix(3))
        assert not personalized_feed_key(31, 1).startswith(feed_prefix(3))


class TestCacheLayer:
    def test_miss_computes_and_hit_reuses(self):
        cache = CacheLayer()
        calls = {"n": 0}

        def compute():
            calls["n"] += 1
            return {"value": calls["n"]}

        assert cache.get_or_compute("k", compute) == {"value": 1}
        assert cache.get_or_compute("k", compute) == {"value": 1}
        assert calls["n"] == 1

    def test_none_results_are_cached(self):
        cache = CacheLayer()
        calls = {"n": 0}

        def compute():
            calls["n"] += 1
            return None

        cache.get_or_compute("k", compute)
        cache.get_or_compute("k", compute)

        assert calls["n"] == 1

    def test_exceptions_are_not_cached(self):
        cache = CacheLayer()

        def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            cache.get_or_compute("k", fail)
        assert "k" not in cache

    def test_entries_expire(self):
        cache = CacheLayer(ttl_seconds=1)
        cache.set("k", 1)

        time.sleep(1.1)

        assert cache.get("k") is None

    def test_invalidate(self):
        cache = CacheLayer()
        cache.set("k", 1)

        assert cache.invalidate("k") is True
        assert cache.invalidate("k") is False
        assert cache.get("k") is None

    def test_invalidate_prefix_only_touches_matching_keys(self):
        cache = CacheLayer()
        cache.set(personalized_feed_key(1, 1), "a")
        cache.set(personalized_feed_key(1, 2), "b")
        cache.set(personalized_feed_key(12, 1), "c")
        cache.set(article_key(1), "d")

        evicted = cache.invalidate_prefix(feed_prefix(1))

        assert evicted == 2
        assert personalized_feed_key(12, 1) in cache
        assert article_key(1) in cache

    def test_compute_overlapping_invalidation_is_not_stored(self):
        """A value computed from pre-invalidation data is returned but not cached."""
        cache = CacheLayer()

        def compute():
            cache.invalidate_prefix("preferences:feed:1:")
            return "stale"

        assert cache.get_or_compute("preferences:feed:1:page:1", compute) == "stale"
        assert "preferences:feed:1:page:1" not in cache
