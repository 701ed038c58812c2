"""Structured exceptions for PBX3 API failures."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class APIError(Exception):
    """Base exception for every failure surfaced by the client."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NetworkError(APIError):
    """No response was received (DNS, TLS, connection refused, timeout)."""

    pass


class RequestBodyError(APIError):
    """Request body could not be serialized to JSON; nothing was sent."""

    pass


class HTTPError(APIError):
    """Non-2xx response.

    Carries the raw response text and its JSON decoding (or None) so callers
    can pull field-level messages out of the body.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        raw_body: str = "",
        parsed_body: Any = None,
        method: str | None = None,
        path: str | None = None,
        response: "httpx.Response | None" = None,
    ):
        super().__init__(message, status_code=status_code)
        self.raw_body = raw_body
        self.parsed_body = parsed_body
        self.method = method
        self.path = path
        self.response = response


class ClientError(HTTPError):
    """4xx client errors."""

    pass


class BadRequestError(ClientError):
    """400 Bad Request."""

    pass


class AuthExpiredError(ClientError):
    """401 Unauthorized.

    Raised after the session has already been invalidated and the login
    redirect requested.
    """

    pass


class ForbiddenError(ClientError):
    """403 Forbidden."""

    pass


class NotFoundError(ClientError):
    """404 Not Found."""

    pass


class ConflictError(ClientError):
    """409 Conflict."""

    pass


class ValidationError(ClientError):
    """422 Unprocessable Entity (validation errors)."""

    pass


class RateLimitError(ClientError):
    """429 Too Many Requests."""

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(HTTPError):
    """5xx server errors."""

    pass
