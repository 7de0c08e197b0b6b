"""FastAPI routes for the search gateway."""
import asyncio
import contextlib
from collections.abc import Awaitable
from dataclasses import asdict
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, Request, Response

from shared.schemas import HealthResponse

from search_gateway import __version__
from search_gateway.api.schemas import (
    ErrorResponse,
    SearchRequest,
    SearchResponse,
    SearchResultData,
    ValidationErrorResponse,
)
from search_gateway.api.validation import read_search_request
from search_gateway.config import GatewaySettings
from search_gateway.errors import ClientDisconnectedError
from search_gateway.service import FallbackSearchService

SERVICE_NAME = "search-service"

T = TypeVar("T")

router = APIRouter(tags=["search"])
logger = structlog.get_logger()


async def run_until_disconnected(
    request: Request, awaitable: Awaitable[T], poll_interval: float
) -> T:
    """Await the work, cancelling it if the HTTP client disconnects first."""
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                raise ClientDisconnectedError("client disconnected before search completed")
    finally:
        if not task.done():
            task.cancel()


@router.get("/")
async def banner() -> dict:
    return {
        "service": "NeoColmado Search Gateway",
        "version": __version__,
        "status": "running",
        "endpoints": {
            "search": "POST /api/v1/search",
            "health": "GET /health",
        },
    }


@router.post(
    "/api/v1/search",
    response_model=SearchResponse,
    responses={
        400: {"model": ValidationErrorResponse},
        500: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                media_type: {"schema": SearchRequest.model_json_schema(by_alias=True)}
                for media_type in ("application/json", "application/x-www-form-urlencoded")
            },
        }
    },
)
async def search(
    request: Request, body: SearchRequest = Depends(read_search_request)
) -> SearchResponse:
    service: FallbackSearchService = request.app.state.search_service
    settings: GatewaySettings = request.app.state.settings
    logger.info(
        "processing_search_request",
        query=body.query,
        slug=body.tenant_id,
        limit=body.limit,
        offset=body.offset,
    )
    work = service.resolve_search(body.query, body.tenant_id, body.limit, body.offset)
    if settings.cancel_on_disconnect:
        result = await run_until_disconnected(
            request, work, settings.disconnect_poll_interval
        )
    else:
        result = await work
    return SearchResponse(data=SearchResultData(**asdict(result)))


@router.get(
    "/api/v1/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    responses={503: {"model": HealthResponse}},
)
@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    responses={503: {"model": HealthResponse}},
)
async def health(request: Request, response: Response) -> HealthResponse:
    service: FallbackSearchService = request.app.state.search_service
    status = await service.health_check()
    if not status.is_healthy:
        response.status_code = 503
    return HealthResponse(
        success=status.is_healthy,
        service=SERVICE_NAME,
        status=status.status,
        meilisearch=status.meilisearch,
        error=status.error,
    )
