"""Errors raised while reading the HTTP data source."""
from typing import Optional


class HTTPDataSourceError(Exception):
    """Base exception for every fatal read failure."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(self.message)


class ValidationError(HTTPDataSourceError):
    """Raised when the method override is not a supported verb."""


class ConfigurationError(HTTPDataSourceError):
    """Raised when the TLS material is incomplete or cannot be loaded."""


class RequestBuildError(HTTPDataSourceError):
    """Raised when the verb, URL and body cannot form a request."""


class TransportError(HTTPDataSourceError):
    """Raised on network failures, cancellation included."""


class ResponseStatusError(HTTPDataSourceError):
    """Raised when the response status is outside the accepted set."""

    def __init__(self, status_code: int, body: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body
        if body is None:
            message = f"HTTP request error. Response code: {status_code}"
        else:
            message = f"HTTP request error. Response code: {status_code},  Error Response body: {body}"
        super().__init__(message)


class ResponseReadError(HTTPDataSourceError):
    """Raised when an accepted response body cannot be read."""


# Context termination, wrapped into TransportError by the invoker

class Cancelled(Exception):
    pass


class DeadlineExceeded(Cancelled):
    pass
