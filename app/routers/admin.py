# app/routers/admin.py
"""
Admin endpoints.

POST /api/ingest/run - Trigger ingestion from all (or selected) providers
"""

import logging

from fastapi import APIRouter, Depends

from app.auth import require_admin_key
from app.schemas.admin import IngestProviderResult, IngestRunRequest, IngestRunResponse
from app.services.ingestion import IngestionService

admin_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["admin"])


@router.post("/ingest/run", response_model=IngestRunResponse)
def run_ingest(
    request: IngestRunRequest = IngestRunRequest(),
    _: None = Depends(require_admin_key),
) -> IngestRunResponse:
    """
    Trigger ingestion from configured providers.

    Fetches each provider's endpoint, normalizes the articles, and upserts
    them. A provider that fails is reported and never stops the others.
    """
    service = IngestionService()
    result = service.ingest_all(
        provider_names=request.providers,
        concurrent=request.concurrent,
    )
    admin_logger.info(f"Ingest run via API finished with status {result['status']}")

    return IngestRunResponse(
        status=result["status"],
        trace_id=result["trace_id"],
        started_at=result["started_at"],
        finished_at=result["finished_at"],
        duration_ms=result["duration_ms"],
        providers_attempted=result["providers_attempted"],
        providers_succeeded=result["providers_succeeded"],
        total_fetched=result["total_fetched"],
        total_inserted=result["total_inserted"],
        total_updated=result["total_updated"],
        provider_results=[IngestProviderResult(**pr) for pr in result["provider_results"]],
        errors=result["errors"],
    )
