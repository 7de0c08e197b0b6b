"""Health check response schema."""
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class HealthResponse(BaseModel):
    """Response for health probes."""

    success: bool
    service: str = ""
    status: Literal["healthy", "unhealthy"]
    meilisearch: dict[str, Any] | None = None
    error: str | None = None
    timestamp: str = Field(default_factory=utc_timestamp)
