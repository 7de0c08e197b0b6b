"""Meilisearch REST client: one pooled connection and one credential per process."""
from typing import Any

import httpx
import structlog

from shared.http_client import create_http_client

from search_gateway.config import GatewaySettings
from search_gateway.engine.base import EngineSearchResult, SearchEngine
from search_gateway.errors import SearchEngineError, StartupError

logger = structlog.get_logger()


def _error_from_response(resp: httpx.Response, index_name: str | None) -> SearchEngineError:
    """Meilisearch errors look like {"message", "code", "type", "link"}."""
    message = f"Meilisearch responded with HTTP {resp.status_code}"
    code = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or message
        code = body.get("code")
    return SearchEngineError(
        message, index_name=index_name, status_code=resp.status_code, code=code
    )


class MeilisearchClient(SearchEngine):
    def __init__(
        self,
        host: str | None,
        api_key: str | None,
        timeout_ms: int = 5000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            logger.error("meilisearch_api_key_missing")
            raise StartupError("MEILISEARCH_API_KEY is required")
        if not host or not host.strip():
            logger.error("meilisearch_host_missing")
            raise StartupError("MEILISEARCH_HOST is required")
        self._host = host.rstrip("/")
        self._timeout = timeout_ms / 1000
        self._client = create_http_client(
            self._host,
            timeout=self._timeout,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )
        logger.info("meilisearch_client_configured", host=self._host, timeout_ms=timeout_ms)

    @classmethod
    def from_settings(cls, settings: GatewaySettings) -> "MeilisearchClient":
        return cls(
            settings.meilisearch_host,
            settings.meilisearch_api_key,
            timeout_ms=settings.request_timeout,
        )

    async def _request(
        self, method: str, path: str, *, json: Any = None, index_name: str | None = None
    ) -> Any:
        try:
            resp = await self._client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise SearchEngineError(
                f"Meilisearch request timed out after {self._timeout:g}s",
                index_name=index_name,
            ) from e
        except httpx.HTTPError as e:
            raise SearchEngineError(
                f"Meilisearch unreachable: {e}", index_name=index_name
            ) from e
        if resp.is_error:
            raise _error_from_response(resp, index_name)
        try:
            return resp.json()
        except ValueError as e:
            raise SearchEngineError(
                "Meilisearch returned a non-JSON body",
                index_name=index_name,
                status_code=resp.status_code,
            ) from e

    async def search(
        self, index_name: str, query: str, limit: int = 20, offset: int = 0
    ) -> EngineSearchResult:
        data = await self._request(
            "POST",
            f"/indexes/{index_name}/search",
            json={"q": query, "limit": limit, "offset": offset},
            index_name=index_name,
        )
        if not isinstance(data, dict) or not isinstance(data.get("hits"), list):
            raise SearchEngineError(
                "Meilisearch search response has no hits array", index_name=index_name
            )
        return EngineSearchResult(
            hits=data["hits"],
            estimated_total_hits=data.get("estimatedTotalHits"),
            processing_time_ms=int(data.get("processingTimeMs") or 0),
        )

    async def health(self) -> dict[str, Any]:
        data = await self._request("GET", "/health")
        if not isinstance(data, dict):
            raise SearchEngineError("Meilisearch health response is not an object")
        return data

    async def aclose(self) -> None:
        await self._client.aclose()
