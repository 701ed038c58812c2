"""Error handling for the PBX3 API client."""

from pbx3_client.errors.exceptions import (
    APIError,
    AuthExpiredError,
    BadRequestError,
    ClientError,
    ConflictError,
    ForbiddenError,
    HTTPError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestBodyError,
    ServerError,
    ValidationError,
)
from pbx3_client.errors.fields import field_errors, first_error_message
from pbx3_client.errors.handler import decode_json_or_text, parse_json_or_none, raise_for_status

__all__ = [
    "APIError",
    "AuthExpiredError",
    "BadRequestError",
    "ClientError",
    "ConflictError",
    "ForbiddenError",
    "HTTPError",
    "NetworkError",
    "NotFoundError",
    "RateLimitError",
    "RequestBodyError",
    "ServerError",
    "ValidationError",
    "decode_json_or_text",
    "field_errors",
    "first_error_message",
    "parse_json_or_none",
    "raise_for_status",
]
