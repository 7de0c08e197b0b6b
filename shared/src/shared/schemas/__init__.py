"""Common DTOs and schemas."""
from shared.schemas.health import HealthResponse, utc_timestamp

__all__ = ["HealthResponse", "utc_timestamp"]
