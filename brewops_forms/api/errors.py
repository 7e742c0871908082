"""Errors raised by the BrewOps API client."""


class ApiError(Exception):
    """Base class for every failure talking to the backend."""

    pass


class TransportError(ApiError):
    """Raised when the request never produced an HTTP response."""

    pass


class ServerError(ApiError):
    """Raised when the backend reports a failure.

    Covers non-2xx responses and 2xx responses whose envelope says
    ``success: false``.
    """

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message or f"Request failed with status {status_code}")


class ResponseParseError(ApiError):
    """Raised when a successful response body cannot be decoded."""

    pass
