from search_gateway.api.errors import ErrorBoundaryMiddleware, register_exception_handlers
from search_gateway.api.routes import router

__all__ = ["ErrorBoundaryMiddleware", "register_exception_handlers", "router"]
