# app/services/ingestion.py
"""
Ingestion service: fetch each provider, normalize its payload, upsert the result.

Provider fetches run concurrently. Each provider's normalize + store then runs
in its own session and transaction, so a provider that fails to fetch or store
never affects the others.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import SessionLocal
from app.exceptions import StoreError
from app.logging_config import log_stage, new_trace_id, trace_id_var
from app.services.api_fetchers import PROVIDERS, Fetcher, FetchResult, ProviderConfig, get_provider, normalize
from app.services.deduper import Deduper

logger = logging.getLogger(__name__)


class IngestionService:
    """Runs the fetch -> normalize -> store pipeline for news providers."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        fetcher_factory: Callable[[], Fetcher] | None = None,
        settings: Any = None,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self.fetcher_factory = fetcher_factory or self._default_fetcher
        self.deduper = Deduper()

    def _default_fetcher(self) -> Fetcher:
        return Fetcher(
            max_attempts=self.settings.FETCH_MAX_ATTEMPTS,
            retry_delay_seconds=self.settings.FETCH_RETRY_DELAY_MS / 1000,
            timeout=self.settings.FETCH_TIMEOUT_SECONDS,
        )

    def _select_providers(self, provider_names: Iterable[str] | None) -> list[ProviderConfig]:
        """Resolve requested names (UnknownProviderError for typos), or all providers."""
        if not provider_names:
            return list(PROVIDERS)
        selected: list[ProviderConfig] = []
        for name in provider_names:
            provider = get_provider(name)
            if provider not in selected:
                selected.append(provider)
        return selected

    # -------------------------------------------------------------------------
    # Fetch stage
    # -------------------------------------------------------------------------

    async def _fetch_all(
        self,
        targets: list[tuple[ProviderConfig, str]],
        concurrent: bool = True,
    ) -> list[FetchResult]:
        """Fetch every (provider, api_key) target. Results are in target order."""
        async with self.fetcher_factory() as fetcher:

            async def _fetch(provider: ProviderConfig, api_key: str) -> FetchResult:
                url = provider.endpoint(api_key)
                return await fetcher.fetch(url, log_url=provider.redact(url))

            if concurrent:
                return list(await asyncio.gather(*(_fetch(p, key) for p, key in targets)))

            results = []
            for provider, api_key in targets:
                results.append(await _fetch(provider, api_key))
            return results

    # -------------------------------------------------------------------------
    # Normalize + store stage
    # -------------------------------------------------------------------------

    def ingest_payload(
        self,
        provider: ProviderConfig,
        payload: Any,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Normalize and store one provider payload in its own session.

        Raises:
            StoreError: The batch could not be written (already rolled back)
        """
        now = now or datetime.utcnow()
        articles = normalize(payload, provider.field_map, now=now)

        db = self.session_factory()
        try:
            stored = self.deduper.store(db, articles, provider.name, now=now)
        finally:
            db.close()

        return {
            "provider": provider.name,
            "status": "completed",
            "fetched": len(articles),
            "inserted": stored.inserted,
            "updated": stored.updated,
            "error": None,
        }

    def ingest_all(
        self,
        provider_names: Iterable[str] | None = None,
        concurrent: bool = True,
        trace_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Ingest articles from all configured providers (or the named ones).

        Args:
            provider_names: Restrict the run to these providers
            concurrent: Fetch providers in parallel (default) or one after another
            trace_id: Correlation ID for logs (generated when omitted)

        Returns:
            Dict with overall status, per-provider breakdown, and error messages
        """
        started_at = datetime.utcnow()
        if trace_id is None:
            trace_id = new_trace_id()
        else:
            trace_id_var.set(trace_id)

        providers = self._select_providers(provider_names)

        result: dict[str, Any] = {
            "status": "completed",
            "trace_id": trace_id,
            "started_at": started_at,
            "finished_at": None,
            "duration_ms": 0,
            "providers_attempted": 0,
            "providers_succeeded": 0,
            "total_fetched": 0,
            "total_inserted": 0,
            "total_updated": 0,
            "provider_results": [],
            "errors": [],
        }

        targets: list[tuple[ProviderConfig, str]] = []
        for provider in providers:
            api_key = provider.api_key(self.settings)
            if not api_key:
                logger.warning(
                    f"Skipping {provider.name}: {provider.api_key_setting} is not set",
                    extra={"event": "provider_skipped", "provider": provider.name},
                )
                result["provider_results"].append(self._provider_result(provider, "skipped"))
                continue
            targets.append((provider, api_key))

        fetch_results = asyncio.run(self._fetch_all(targets, concurrent=concurrent)) if targets else []

        for (provider, _), fetched in zip(targets, fetch_results):
            result["providers_attempted"] += 1

            if not fetched.success:
                error = f"{provider.name}: fetch failed ({fetched.error})"
                result["provider_results"].append(self._provider_result(provider, "failed", error))
                result["errors"].append(error)
                continue

            try:
                with log_stage(f"ingest:{provider.name}", trace_id=trace_id):
                    provider_result = self.ingest_payload(provider, fetched.payload, now=started_at)
            except StoreError as e:
                error = f"{provider.name}: {e.message}"
                result["provider_results"].append(self._provider_result(provider, "failed", error))
                result["errors"].append(error)
                continue
            except Exception as e:
                logger.error(
                    f"Unexpected ingestion failure for {provider.name}: {e}",
                    extra={"event": "ingest_failed", "provider": provider.name},
                )
                error = f"{provider.name}: {type(e).__name__}: {e}"
                result["provider_results"].append(self._provider_result(provider, "failed", error))
                result["errors"].append(error)
                continue

            result["provider_results"].append(provider_result)
            result["providers_succeeded"] += 1
            result["total_fetched"] += provider_result["fetched"]
            result["total_inserted"] += provider_result["inserted"]
            result["total_updated"] += provider_result["updated"]

        finished_at = datetime.utcnow()
        result["finished_at"] = finished_at
        result["duration_ms"] = int((finished_at - started_at).total_seconds() * 1000)

        if result["errors"] and result["providers_succeeded"] == 0:
            result["status"] = "failed"
        elif result["errors"]:
            result["status"] = "partial"

        logger.info(
            f"Ingestion {result['status']}: {result['providers_succeeded']}/{result['providers_attempted']} providers, "
            f"{result['total_inserted']} new, {result['total_updated']} updated",
            extra={
                "event": "ingest_complete",
                "duration_ms": result["duration_ms"],
                "items_processed": result["total_inserted"] + result["total_updated"],
                "inserted": result["total_inserted"],
                "updated": result["total_updated"],
            },
        )
        return result

    @staticmethod
    def _provider_result(provider: ProviderConfig, status: str, error: str | None = None) -> dict[str, Any]:
        return {
            "provider": provider.name,
            "status": status,
            "fetched": 0,
            "inserted": 0,
            "updated": 0,
            "error": error,
        }
