"""Gateway error taxonomy."""


class GatewayError(Exception):
    """Base class for errors raised by the search gateway."""


class StartupError(GatewayError):
    """Required configuration is missing; the service cannot start."""


class SearchEngineError(GatewayError):
    """A call to the search engine failed (transport, timeout, non-2xx or bad payload)."""

    def __init__(
        self,
        message: str,
        *,
        index_name: str | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.index_name = index_name
        self.status_code = status_code
        self.code = code


class ClientDisconnectedError(GatewayError):
    """The HTTP caller went away before the search finished."""
