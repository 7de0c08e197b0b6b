"""Shared fixtures: an in-memory search engine and a wired test client."""
from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from search_gateway.config import GatewaySettings
from search_gateway.engine.base import EngineSearchResult, SearchEngine
from search_gateway.errors import SearchEngineError
from search_gateway.main import create_app

TENANT = "colmado_william"
LOCAL_INDEX = "productos_colmado_colmado_william"
GLOBAL_INDEX = "colmado_inventory"


class FakeEngine(SearchEngine):
    """Substring search over in-memory indexes; unknown indexes behave like Meilisearch 404s."""

    def __init__(
        self,
        indexes: dict[str, list[dict[str, Any]]] | None = None,
        failing: dict[str, Exception] | None = None,
        estimated_totals: dict[str, int | None] | None = None,
        health_payload: dict[str, Any] | None = None,
        health_error: Exception | None = None,
    ) -> None:
        self.indexes = indexes or {}
        self.failing = failing or {}
        self.estimated_totals = estimated_totals or {}
        self.health_payload = health_payload or {"status": "available"}
        self.health_error = health_error
        self.calls: list[tuple[str, str, int, int]] = []
        self.closed = False

    async def search(
        self, index_name: str, query: str, limit: int = 20, offset: int = 0
    ) -> EngineSearchResult:
        self.calls.append((index_name, query, limit, offset))
        if index_name in self.failing:
            raise self.failing[index_name]
        if index_name not in self.indexes:
            raise SearchEngineError(
                f"Index `{index_name}` not found.",
                index_name=index_name,
                status_code=404,
                code="index_not_found",
            )
        matches = [
            doc for doc in self.indexes[index_name] if query.lower() in doc["name"].lower()
        ]
        estimated = self.estimated_totals.get(index_name, len(matches))
        return EngineSearchResult(
            hits=matches[offset : offset + limit],
            estimated_total_hits=estimated,
            processing_time_ms=1,
        )

    async def health(self) -> dict[str, Any]:
        if self.health_error is not None:
            raise self.health_error
        return self.health_payload

    async def aclose(self) -> None:
        self.closed = True


ARROZ = {"id": "p-1", "name": "Arroz Selecto 5lb", "price": 250}
DETERGENTE = {"id": "g-7", "name": "Detergente Ace 1kg", "price": 145}
ACEITE = {"id": "g-8", "name": "Aceite Crisol 1L", "price": 310}


@pytest.fixture
def settings() -> GatewaySettings:
    return GatewaySettings(
        meilisearch_host="http://meili.test",
        meilisearch_api_key="test-key",
        json_logs=False,
    )


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine(
        indexes={
            LOCAL_INDEX: [ARROZ],
            GLOBAL_INDEX: [DETERGENTE, ACEITE, dict(ARROZ, id="g-1")],
        }
    )


@pytest.fixture
def make_client(settings: GatewaySettings) -> Iterator:
    clients: list[TestClient] = []

    def _make(engine: SearchEngine, **overrides: Any) -> TestClient:
        app = create_app(settings.model_copy(update=overrides), engine=engine)
        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, engine: FakeEngine) -> TestClient:
    return make_client(engine)
