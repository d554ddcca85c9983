# app/schemas/admin.py
"""
Schemas for admin endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, Field

# -----------------------------------------------------------------------------
# Ingest
# -----------------------------------------------------------------------------


class IngestRunRequest(BaseModel):
    """Request to trigger ingestion."""

    providers: list[str] | None = Field(None, description="Provider names to ingest (default: all configured)")
    concurrent: bool = Field(True, description="Fetch providers in parallel")


class IngestProviderResult(BaseModel):
    """Result for a single provider."""

    provider: str
    status: str = Field(..., description="completed|failed|skipped")
    fetched: int = 0
    inserted: int = 0
    updated: int = 0
    error: str | None = None


class IngestRunResponse(BaseModel):
    """Response from ingestion run."""

    status: str = Field(..., description="completed|partial|failed")
    trace_id: str
    started_at: datetime
    finished_at: datetime
    duration_ms: int

    # Results
    providers_attempted: int
    providers_succeeded: int
    total_fetched: int
    total_inserted: int
    total_updated: int
    provider_results: list[IngestProviderResult] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
