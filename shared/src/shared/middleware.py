"""Starlette middleware shared by the gateway: request correlation and security headers."""
import uuid
from typing import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from shared.logging import clear_request_context, set_request_context

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}


def get_request_id_from_headers(request: Request) -> str | None:
    """The orchestrator forwards its own X-Request-ID; reuse it when present."""
    return request.headers.get("X-Request-ID") or request.headers.get("x-request-id")


def get_trace_id_from_headers(request: Request) -> str | None:
    return request.headers.get("X-Trace-ID") or request.headers.get("x-trace-id")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind request_id/trace_id for every log line of a request and echo them back.

    Emits one ``incoming_request`` event (method, path, client ip) before the
    request reaches the routes, so a failed search can be traced from the
    caller's X-Request-ID to the engine calls it triggered.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id_from_headers(request) or str(uuid.uuid4())
        trace_id = get_trace_id_from_headers(request) or request_id
        set_request_context(request_id=request_id, trace_id=trace_id)
        try:
            structlog.get_logger().info(
                "incoming_request",
                method=request.method,
                path=request.url.path,
                ip=request.client.host if request.client else None,
            )
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Trace-ID"] = trace_id
            return response
        finally:
            clear_request_context()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Helmet-style hardening headers on every response; headers a route already set win."""

    def __init__(self, app, headers: dict[str, str] | None = None) -> None:
        super().__init__(app)
        self.headers = SECURITY_HEADERS if headers is None else headers

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response
