"""
Unit tests for the provider table.
"""

from types import SimpleNamespace

import httpx
import pytest

from app.exceptions import UnknownProviderError
from app.services.api_fetchers.providers import GUARDIAN, NEWSAPI, NYTIMES, PROVIDERS, get_provider


class TestProviderTable:
    def test_all_providers_registered(self):
        assert [p.name for p in PROVIDERS] == ["NewsAPI", "The Guardian", "New York Times"]

    def test_get_provider_case_insensitive(self):
        assert get_provider("newsapi") is NEWSAPI
        assert get_provider("  THE GUARDIAN ") is GUARDIAN

    def test_get_provider_unknown(self):
        with pytest.raises(UnknownProviderError) as exc_info:
            get_provider("BBC")
        assert "BBC" in exc_info.value.message


class TestProviderConfig:
    def test_newsapi_endpoint(self):
        url = httpx.URL(NEWSAPI.endpoint("secret"))

        assert url.host == "newsapi.org"
        assert url.path == "/v2/top-headlines"
        assert url.params["country"] == "us"
        assert url.params["apiKey"] == "secret"

    def test_guardian_and_nytimes_use_api_key_param(self):
        assert httpx.URL(GUARDIAN.endpoint("g")).params["api-key"] == "g"
        assert httpx.URL(NYTIMES.endpoint("n")).params["api-key"] == "n"

    def test_redact_masks_credential(self):
        url = NEWSAPI.endpoint("secret")

        redacted = NEWSAPI.redact(url)

        assert "secret" not in redacted
        assert httpx.URL(redacted).params["country"] == "us"

    def test_api_key_from_settings(self):
        settings = SimpleNamespace(NEWSAPI_API_KEY="abc", GUARDIAN_API_KEY="", NYTIMES_API_KEY=None)

        assert NEWSAPI.api_key(settings) == "abc"
        assert GUARDIAN.api_key(settings) is None
        assert NYTIMES.api_key(settings) is None
