"""Helpers for turning HTTP failures into form messages.

The PBX3 API reports validation problems as a JSON object keyed by field name,
each value a list of messages, e.g. ``{"pkey": ["Must be 3-5 digits"]}``.
"""

from typing import Any


def field_errors(error: BaseException | None) -> dict[str, list[Any]] | None:
    """Return the field-keyed validation messages carried by ``error``.

    Only entries whose value is a non-empty list are kept. Returns None when
    the error has no parsed object body or no such entries.
    """
    body = getattr(error, "parsed_body", None)
    if not isinstance(body, dict):
        return None
    entries = {key: value for key, value in body.items() if isinstance(value, list) and value}
    return entries or None


def _body_message(error: BaseException | None) -> str | None:
    body = getattr(error, "parsed_body", None)
    if isinstance(body, dict):
        for key in ("message", "Error"):
            value = body.get(key)
            if value is not None:
                return value
    return None


def first_error_message(error: BaseException | None, fallback: str = "") -> str:
    """Pick one message suitable for a toast or form banner.

    For 404 responses a body message is preferred, then the exception message,
    then ``"Not found"``. Otherwise the first string field error wins, followed
    by the body's ``message``/``Error`` key, the exception message and finally
    ``fallback``.
    """
    if getattr(error, "status_code", None) == 404:
        msg = _body_message(error) or getattr(error, "message", None)
        if msg and isinstance(msg, str):
            return msg
        return "Not found"

    errors = field_errors(error)
    if errors:
        for messages in errors.values():
            for message in messages:
                if isinstance(message, str):
                    return message

    msg = _body_message(error)
    if msg is not None:
        return msg
    if error is None:
        return fallback
    message = getattr(error, "message", None)
    return str(error) if message is None else message
