"""Response decoding and status-to-exception mapping."""

import json
from typing import Any

import httpx

from pbx3_client.errors.exceptions import (
    AuthExpiredError,
    BadRequestError,
    ClientError,
    ConflictError,
    ForbiddenError,
    HTTPError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ValidationError,
)

_EXCEPTION_MAP: dict[int, type[HTTPError]] = {
    400: BadRequestError,
    401: AuthExpiredError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
    429: RateLimitError,
}


def parse_json_or_none(text: str) -> Any:
    """Decode ``text`` as JSON, or return None when it is not JSON."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def decode_json_or_text(text: str) -> Any:
    """Decode a successful response body.

    An empty body decodes to None. A body that is not valid JSON is returned
    unchanged as text rather than raising.
    """
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def exception_class_for(status_code: int) -> type[HTTPError]:
    """Pick the HTTPError subclass for a status code."""
    if status_code in _EXCEPTION_MAP:
        return _EXCEPTION_MAP[status_code]
    if 400 <= status_code < 500:
        return ClientError
    if 500 <= status_code < 600:
        return ServerError
    return HTTPError


def raise_for_status(
    response: httpx.Response,
    method: str,
    path: str,
    text: str | None = None,
) -> None:
    """Raise the matching HTTPError for a non-success response.

    Args:
        response: HTTP response object
        method: HTTP method of the request, used in the message
        path: Path as the caller passed it, used in the message
        text: Already-read response text; read from ``response`` if omitted

    Raises:
        HTTPError subclass based on status code
    """
    if response.is_success:
        return

    status_code = response.status_code
    raw_body = response.text if text is None else text
    message = f"API {method} {path}: {status_code} {response.reason_phrase}".rstrip()
    exc_class = exception_class_for(status_code)

    kwargs: dict[str, Any] = {
        "status_code": status_code,
        "raw_body": raw_body,
        "parsed_body": parse_json_or_none(raw_body),
        "method": method,
        "path": path,
        "response": response,
    }

    if exc_class is RateLimitError:
        retry_after = None
        if "retry-after" in response.headers:
            try:
                retry_after = int(response.headers["retry-after"])
            except (ValueError, TypeError):
                retry_after = None
        raise RateLimitError(message, retry_after=retry_after, **kwargs)

    raise exc_class(message, **kwargs)
