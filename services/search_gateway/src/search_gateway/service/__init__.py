from search_gateway.service.search_service import (
    FallbackSearchService,
    HealthStatus,
    LocalHit,
    LocalOutcome,
    NoLocalResult,
    SearchResult,
)

__all__ = [
    "FallbackSearchService",
    "HealthStatus",
    "LocalHit",
    "LocalOutcome",
    "NoLocalResult",
    "SearchResult",
]
