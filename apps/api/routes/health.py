"""Health check endpoint."""

import os
from datetime import datetime, timezone

from fastapi import APIRouter

from apps.api.schemas.health import HealthResponse
from apps.api.services.repo import ping

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Health check. Returns ok, version (GIT_SHA or dev), DB reachability and current time (ISO)."""
    version = os.getenv("GIT_SHA", "dev").strip() or "dev"
    database = ping()
    return HealthResponse(
        ok=database,
        version=version,
        database=database,
        time=datetime.now(timezone.utc).isoformat(),
    )
