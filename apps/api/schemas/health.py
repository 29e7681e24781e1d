"""Health check response schemas."""

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    """Health check response. ok is false when the database is unreachable."""

    model_config = ConfigDict(extra="forbid")

    ok: bool
    version: str
    database: bool
    time: str
