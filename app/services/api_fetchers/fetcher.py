# app/services/api_fetchers/fetcher.py
"""
HTTP retrieval for provider endpoints.

Every provider request is a plain GET returning JSON. Transport errors and
non-2xx responses are retried with a fixed delay; once attempts are exhausted
the failure is logged and returned as a FetchResult instead of raised, so the
ingestion run can move on to the next provider.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

logger = logging.getLogger(__name__)


class FetchFailureReason(str, Enum):
    """Categorized failure reasons for observability."""

    HTTP_STATUS = "http_status"
    TRANSPORT = "transport"
    INVALID_JSON = "invalid_json"


@dataclass
class FetchResult:
    """Outcome of one provider fetch, successful or not."""

    success: bool
    payload: Any = None
    failure_reason: FetchFailureReason | None = None
    error: str | None = None
    status_code: int | None = None
    attempts: int = 0
    duration_ms: int = 0


class Fetcher:
    """Fetch provider JSON with bounded retries."""

    DEFAULT_MAX_ATTEMPTS = 3
    DEFAULT_RETRY_DELAY_SECONDS = 0.1
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            max_attempts: Attempts per request, including the first
            retry_delay_seconds: Fixed wait between attempts
            timeout: Per-request HTTP timeout in seconds
            client: Optional preconfigured client (tests inject a MockTransport)
        """
        self.max_attempts = max_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    async def fetch(self, url: str, log_url: str | None = None) -> FetchResult:
        """
        GET `url` and decode its JSON body.

        Args:
            url: Request URL (may contain credentials)
            log_url: Credential-free form of the URL for log messages

        Returns:
            FetchResult with the decoded payload, or the failure details
        """
        log_url = log_url or url
        start_time = time.time()
        attempts = 0

        @retry(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_delay_seconds),
            retry=retry_if_exception_type(httpx.HTTPError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async def _get() -> httpx.Response:
            nonlocal attempts
            attempts += 1
            response = await self.client.get(url)
            if not response.is_success:
                raise httpx.HTTPStatusError(
                    f"{response.status_code} response from {log_url}",
                    request=response.request,
                    response=response,
                )
            return response

        try:
            response = await _get()
        except httpx.HTTPStatusError as e:
            return self._failure(
                log_url,
                FetchFailureReason.HTTP_STATUS,
                f"HTTP {e.response.status_code}",
                attempts,
                start_time,
                status_code=e.response.status_code,
            )
        except httpx.HTTPError as e:
            return self._failure(
                log_url,
                FetchFailureReason.TRANSPORT,
                f"{type(e).__name__}: {e}",
                attempts,
                start_time,
            )

        try:
            payload = response.json()
        except ValueError as e:
            return self._failure(
                log_url,
                FetchFailureReason.INVALID_JSON,
                f"Response body is not JSON: {e}",
                attempts,
                start_time,
                status_code=response.status_code,
            )

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Fetched {log_url} in {duration_ms}ms ({attempts} attempt(s))",
            extra={"event": "fetch_complete", "url": log_url, "attempts": attempts, "duration_ms": duration_ms},
        )
        return FetchResult(
            success=True,
            payload=payload,
            status_code=response.status_code,
            attempts=attempts,
            duration_ms=duration_ms,
        )

    @staticmethod
    def _failure(
        log_url: str,
        reason: FetchFailureReason,
        error: str,
        attempts: int,
        start_time: float,
        status_code: int | None = None,
    ) -> FetchResult:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.error(
            f"Failed to fetch articles from {log_url}: {error}",
            extra={
                "event": "fetch_failed",
                "url": log_url,
                "attempts": attempts,
                "status_code": status_code,
                "duration_ms": duration_ms,
            },
        )
        return FetchResult(
            success=False,
            failure_reason=reason,
            error=error,
            status_code=status_code,
            attempts=attempts,
            duration_ms=duration_ms,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "Fetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
