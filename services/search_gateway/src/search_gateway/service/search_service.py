"""Fallback search: tenant index first, global catalog when the tenant has nothing to offer.

A tenant index that is missing, failing or empty is never an error for the
caller. New stores get served from the global catalog without any setup, so the
local step reports its outcome as a value instead of raising. Only a failure of
the global index reaches the caller.
"""
from dataclasses import dataclass
from typing import Any, Literal

import structlog

from search_gateway.engine.base import EngineSearchResult, SearchEngine
from search_gateway.metrics import LOCAL_FALLBACKS, SEARCHES_SERVED

logger = structlog.get_logger()

Source = Literal["local", "global"]


@dataclass(frozen=True)
class SearchResult:
    source: Source
    index_name: str
    hits: list[dict[str, Any]]
    total: int
    query: str
    limit: int
    offset: int
    processing_time_ms: int


@dataclass(frozen=True)
class LocalHit:
    result: SearchResult


@dataclass(frozen=True)
class NoLocalResult:
    reason: Literal["empty", "error"]
    error_detail: str | None = None


LocalOutcome = LocalHit | NoLocalResult


@dataclass(frozen=True)
class HealthStatus:
    status: Literal["healthy", "unhealthy"]
    meilisearch: dict[str, Any] | None = None
    error: str | None = None

    @property
    def is_healthy(self) -> bool:
        return self.status == "healthy"


def total_hits(result: EngineSearchResult) -> int:
    """Engine estimate when it reports one, else the number of hits returned."""
    return result.estimated_total_hits or len(result.hits)


class FallbackSearchService:
    def __init__(
        self,
        engine: SearchEngine,
        local_index_prefix: str = "productos_colmado_",
        global_index: str = "colmado_inventory",
    ) -> None:
        self.engine = engine
        self.local_index_prefix = local_index_prefix
        self.global_index = global_index

    def local_index_name(self, tenant_id: str) -> str:
        return f"{self.local_index_prefix}{tenant_id}"

    def _result(
        self,
        source: Source,
        index_name: str,
        raw: EngineSearchResult,
        query: str,
        limit: int,
        offset: int,
    ) -> SearchResult:
        return SearchResult(
            source=source,
            index_name=index_name,
            hits=raw.hits,
            total=total_hits(raw),
            query=query,
            limit=limit,
            offset=offset,
            processing_time_ms=raw.processing_time_ms,
        )

    async def search_local(
        self, query: str, tenant_id: str, limit: int = 20, offset: int = 0
    ) -> LocalOutcome:
        """Search the tenant index. Never raises on engine failure."""
        index_name = self.local_index_name(tenant_id)
        try:
            raw = await self.engine.search(index_name, query, limit, offset)
        except Exception as e:
            logger.warning(
                "local_search_failed_falling_back_to_global",
                index_name=index_name,
                error=str(e),
            )
            LOCAL_FALLBACKS.labels(reason="error").inc()
            return NoLocalResult(reason="error", error_detail=str(e))

        logger.info(
            "local_search_completed", index_name=index_name, total_hits=total_hits(raw)
        )
        if raw.hits:
            return LocalHit(self._result("local", index_name, raw, query, limit, offset))

        logger.info("local_search_empty_falling_back_to_global", index_name=index_name)
        LOCAL_FALLBACKS.labels(reason="empty").inc()
        return NoLocalResult(reason="empty")

    async def search_global(
        self, query: str, limit: int = 20, offset: int = 0
    ) -> SearchResult:
        raw = await self.engine.search(self.global_index, query, limit, offset)
        logger.info(
            "global_search_completed", index_name=self.global_index, total_hits=total_hits(raw)
        )
        return self._result("global", self.global_index, raw, query, limit, offset)

    async def resolve_search(
        self, query: str, tenant_id: str, limit: int = 20, offset: int = 0
    ) -> SearchResult:
        """Run the tenant search, then the global one if needed. Global failures propagate."""
        logger.info(
            "search_request",
            query=query,
            tenant_id=tenant_id,
            local_index_name=self.local_index_name(tenant_id),
            limit=limit,
            offset=offset,
        )
        outcome = await self.search_local(query, tenant_id, limit, offset)
        if isinstance(outcome, LocalHit):
            SEARCHES_SERVED.labels(source="local").inc()
            return outcome.result

        try:
            result = await self.search_global(query, limit, offset)
        except Exception as e:
            logger.error("search_failed", query=query, tenant_id=tenant_id, error=str(e))
            raise
        SEARCHES_SERVED.labels(source="global").inc()
        return result

    async def health_check(self) -> HealthStatus:
        try:
            health = await self.engine.health()
        except Exception as e:
            logger.error("meilisearch_health_check_failed", error=str(e))
            return HealthStatus(status="unhealthy", error=str(e) or type(e).__name__)
        logger.debug("meilisearch_health_check", status=health.get("status"))
        return HealthStatus(status="healthy", meilisearch=health)
