"""Search gateway entrypoint."""
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from shared.logging import configure_logging
from shared.middleware import RequestIdMiddleware, SecurityHeadersMiddleware

from search_gateway import __version__
from search_gateway.api import ErrorBoundaryMiddleware, register_exception_handlers, router
from search_gateway.config import GatewaySettings
from search_gateway.engine import MeilisearchClient, SearchEngine
from search_gateway.errors import GatewayError, SearchEngineError
from search_gateway.service import FallbackSearchService

_settings: GatewaySettings | None = None


def get_settings() -> GatewaySettings:
    global _settings
    if _settings is None:
        _settings = GatewaySettings()
    return _settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: GatewaySettings = app.state.settings
    log = structlog.get_logger()
    # A pre-set engine (tests, embedding) is left for its owner to close.
    engine: SearchEngine | None = getattr(app.state, "engine", None)
    owns_engine = engine is None
    if engine is None:
        engine = MeilisearchClient.from_settings(settings)
    app.state.engine = engine
    app.state.search_service = FallbackSearchService(
        engine,
        local_index_prefix=settings.local_index_prefix,
        global_index=settings.global_index,
    )
    log.info(
        "search_gateway_started",
        port=settings.port,
        environment=settings.environment,
        meilisearch_host=settings.meilisearch_host,
        global_index=settings.global_index,
        local_index_prefix=settings.local_index_prefix,
    )
    try:
        yield
    finally:
        if owns_engine:
            await engine.aclose()
            app.state.engine = None
        log.info("search_gateway_stopped")


def create_app(
    settings: GatewaySettings | None = None, engine: SearchEngine | None = None
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(json_logs=settings.json_logs, level=settings.log_level)
    app = FastAPI(title="NeoColmado Search Gateway", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    # last added runs first: request id, CORS, security headers, error boundary
    app.add_middleware(ErrorBoundaryMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(router)
    register_exception_handlers(app, SearchEngineError, GatewayError)

    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "search_gateway.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    run()
