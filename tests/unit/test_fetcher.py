"""
Unit tests for the provider Fetcher.

Uses httpx.MockTransport so no network calls are made.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.services.api_fetchers.fetcher import Fetcher, FetchFailureReason

URL = "https://newsapi.org/v2/top-headlines?country=us&apiKey=secret"
LOG_URL = "https://newsapi.org/v2/top-headlines?country=us&apiKey=***"


def make_fetcher(handler, max_attempts=3):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Fetcher(max_attempts=max_attempts, retry_delay_seconds=0, client=client)


class TestFetcher:
    """Tests for Fetcher.fetch()."""

    @pytest.mark.asyncio
    async def test_success_returns_payload(self):
        def handler(request):
            return httpx.Response(200, json={"articles": [{"title": "X"}]})

        async with make_fetcher(handler) as fetcher:
            result = await fetcher.fetch(URL, log_url=LOG_URL)

        assert result.success is True
        assert result.payload == {"articles": [{"title": "X"}]}
        assert result.status_code == 200
        assert result.attempts == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            if calls["n"] < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"articles": []})

        async with make_fetcher(handler) as fetcher:
            result = await fetcher.fetch(URL)

        assert result.success is True
        assert result.attempts == 3
        assert calls["n"] == 3

    @pytest.mark.asyncio
    async def test_http_error_exhausts_attempts(self):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            return httpx.Response(500)

        async with make_fetcher(handler) as fetcher:
            result = await fetcher.fetch(URL, log_url=LOG_URL)

        assert result.success is False
        assert result.failure_reason == FetchFailureReason.HTTP_STATUS
        assert result.status_code == 500
        assert result.attempts == 3
        assert calls["n"] == 3

    @pytest.mark.asyncio
    async def test_transport_error_is_returned_not_raised(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_fetcher(handler, max_attempts=2) as fetcher:
            result = await fetcher.fetch(URL)

        assert result.success is False
        assert result.failure_reason == FetchFailureReason.TRANSPORT
        assert result.attempts == 2
        assert "ConnectError" in result.error

    @pytest.mark.asyncio
    async def test_invalid_json_not_retried(self):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            return httpx.Response(200, content=b"<html>not json</html>")

        async with make_fetcher(handler) as fetcher:
            result = await fetcher.fetch(URL)

        assert result.success is False
        assert result.failure_reason == FetchFailureReason.INVALID_JSON
        assert calls["n"] == 1

    @pytest.mark.asyncio
    async def test_failure_log_uses_redacted_url(self, caplog):
        def handler(request):
            return httpx.Response(401)

        async with make_fetcher(handler, max_attempts=1) as fetcher:
            with caplog.at_level("ERROR", logger="app.services.api_fetchers.fetcher"):
                await fetcher.fetch(URL, log_url=LOG_URL)

        messages = " ".join(r.getMessage() for r in caplog.records if r.name == "app.services.api_fetchers.fetcher")
        assert "apiKey=***" in messages
        assert "secret" not in messages

    @pytest.mark.asyncio
    async def test_retry_warnings_use_redacted_url(self, caplog):
        def handler(request):
            return httpx.Response(503)

        async with make_fetcher(handler, max_attempts=2) as fetcher:
            with caplog.at_level("WARNING", logger="app.services.api_fetchers.fetcher"):
                await fetcher.fetch(URL, log_url=LOG_URL)

        warnings = [r.getMessage() for r in caplog.records if r.levelname == "WARNING"]
        assert len(warnings) == 1
        assert "secret" not in warnings[0]

    @pytest.mark.asyncio
    async def test_fixed_delay_between_attempts(self):
        def handler(request):
            return httpx.Response(500)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with Fetcher(max_attempts=3, retry_delay_seconds=0.05, client=client) as fetcher:
            result = await fetcher.fetch(URL)

        assert result.attempts == 3
        assert result.duration_ms >= 90

    @pytest.mark.asyncio
    async def test_patched_client_get(self):
        """The client can be patched directly, as other fetcher tests do."""
        fetcher = Fetcher(retry_delay_seconds=0)
        response = httpx.Response(200, json={"results": []}, request=httpx.Request("GET", URL))

        with patch.object(fetcher.client, "get", new_callable=AsyncMock, return_value=response) as mock_get:
            result = await fetcher.fetch(URL)

        mock_get.assert_awaited_once_with(URL)
        assert result.payload == {"results": []}
        await fetcher.close()
