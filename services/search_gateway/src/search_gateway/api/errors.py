"""Exception handlers: every error leaves the gateway as a {success: false, ...} envelope."""
import traceback
from typing import Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from search_gateway.api.schemas import (
    ErrorDetail,
    ErrorResponse,
    ValidationErrorResponse,
)
from search_gateway.api.validation import format_validation_errors
from search_gateway.errors import ClientDisconnectedError

logger = structlog.get_logger()

CLIENT_CLOSED_REQUEST = 499


def _json(status_code: int, payload) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=payload.model_dump(exclude_none=True)
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = format_validation_errors(exc.errors())
    logger.info(
        "request_validation_failed",
        path=request.url.path,
        fields=[e.field for e in errors],
    )
    return _json(400, ValidationErrorResponse(errors=errors))


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404:
        logger.warning("route_not_found", method=request.method, path=request.url.path)
        detail = ErrorDetail(message="Route not found", path=request.url.path)
    else:
        detail = ErrorDetail(message=str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=detail).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


async def client_disconnected_handler(
    request: Request, exc: ClientDisconnectedError
) -> JSONResponse:
    logger.info(
        "search_cancelled_client_disconnected", method=request.method, path=request.url.path
    )
    return _json(CLIENT_CLOSED_REQUEST, ErrorResponse(error=ErrorDetail(message=str(exc))))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request_error",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    if request.app.state.settings.is_production:
        detail = ErrorDetail(message="Internal server error")
    else:
        detail = ErrorDetail(
            message=str(exc) or type(exc).__name__,
            stack="".join(traceback.format_exception(exc)),
        )
    return _json(500, ErrorResponse(error=detail))


class ErrorBoundaryMiddleware(BaseHTTPMiddleware):
    """Render unexpected exceptions as the 500 envelope inside the middleware stack.

    Responses produced here still pass through the request-id, CORS and
    security-header middleware, and the log line keeps its request_id.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_exception_handler(request, exc)


def register_exception_handlers(app: FastAPI, *domain_errors: type[Exception]) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ClientDisconnectedError, client_disconnected_handler)
    for error in domain_errors:
        app.add_exception_handler(error, unhandled_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
