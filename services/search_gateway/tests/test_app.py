"""Tests for configuration, application lifespan and disconnect handling."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from search_gateway.api.routes import run_until_disconnected
from search_gateway.config import GatewaySettings
from search_gateway.engine import MeilisearchClient
from search_gateway.errors import ClientDisconnectedError, SearchEngineError, StartupError
from search_gateway.main import create_app
from search_gateway.service import FallbackSearchService

from conftest import FakeEngine

ENV_KEYS = (
    "PORT",
    "MEILISEARCH_HOST",
    "MEILISEARCH_API_KEY",
    "GLOBAL_INDEX",
    "LOCAL_INDEX_PREFIX",
    "LOG_LEVEL",
    "REQUEST_TIMEOUT",
    "ENVIRONMENT",
    "NODE_ENV",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> pytest.MonkeyPatch:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_settings_defaults(clean_env) -> None:
    settings = GatewaySettings()
    assert settings.port == 3000
    assert settings.global_index == "colmado_inventory"
    assert settings.local_index_prefix == "productos_colmado_"
    assert settings.log_level == "info"
    assert settings.request_timeout == 5000
    assert settings.meilisearch_api_key is None
    assert settings.is_production is False


def test_settings_from_environment(clean_env) -> None:
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("MEILISEARCH_HOST", "http://meili:7700")
    clean_env.setenv("MEILISEARCH_API_KEY", "master")
    clean_env.setenv("GLOBAL_INDEX", "catalogo")
    clean_env.setenv("LOCAL_INDEX_PREFIX", "tienda_")
    clean_env.setenv("REQUEST_TIMEOUT", "1200")
    clean_env.setenv("NODE_ENV", "production")
    settings = GatewaySettings()
    assert settings.port == 8080
    assert settings.meilisearch_host == "http://meili:7700"
    assert settings.meilisearch_api_key == "master"
    assert settings.global_index == "catalogo"
    assert settings.local_index_prefix == "tienda_"
    assert settings.request_timeout == 1200
    assert settings.is_production is True


def test_startup_fails_without_api_key(clean_env) -> None:
    settings = GatewaySettings(meilisearch_host="http://meili.test")
    app = create_app(settings)
    with pytest.raises(StartupError):
        with TestClient(app):
            pass


def test_lifespan_builds_meilisearch_client_and_closes_it(clean_env) -> None:
    settings = GatewaySettings(
        meilisearch_host="http://meili.test", meilisearch_api_key="test-key"
    )
    app = create_app(settings)
    with TestClient(app):
        assert isinstance(app.state.engine, MeilisearchClient)
        service = app.state.search_service
        assert isinstance(service, FallbackSearchService)
        assert service.global_index == "colmado_inventory"
    assert app.state.engine is None


def test_injected_engine_is_left_open(settings: GatewaySettings) -> None:
    engine = FakeEngine()
    app = create_app(settings, engine=engine)
    with TestClient(app):
        assert app.state.search_service.engine is engine
    assert engine.closed is False


@pytest.mark.asyncio
async def test_disconnect_cancels_in_flight_search() -> None:
    cancelled = asyncio.Event()

    async def slow_search() -> str:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return "done"

    request = MagicMock()
    request.is_disconnected = AsyncMock(return_value=True)
    with pytest.raises(ClientDisconnectedError):
        await run_until_disconnected(request, slow_search(), poll_interval=0.01)
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_connected_client_gets_result() -> None:
    async def search() -> str:
        await asyncio.sleep(0.05)
        return "done"

    request = MagicMock()
    request.is_disconnected = AsyncMock(return_value=False)
    assert await run_until_disconnected(request, search(), poll_interval=0.01) == "done"
    request.is_disconnected.assert_awaited()


@pytest.mark.asyncio
async def test_search_errors_pass_through_disconnect_watch() -> None:
    async def failing() -> str:
        raise SearchEngineError("global down")

    request = MagicMock()
    request.is_disconnected = AsyncMock(return_value=False)
    with pytest.raises(SearchEngineError, match="global down"):
        await run_until_disconnected(request, failing(), poll_interval=0.01)


def test_search_works_with_disconnect_watch_disabled(make_client) -> None:
    engine = FakeEngine(indexes={"productos_colmado_x": [{"id": "1", "name": "Pan"}]})
    client = make_client(engine, cancel_on_disconnect=False)
    r = client.post("/api/v1/search", json={"query": "pan", "slug": "x"})
    assert r.json()["data"]["source"] == "local"
