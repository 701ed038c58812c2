"""Normalize the shapes PBX3 list endpoints come back in."""

from typing import Any


def normalize_list(response: Any, resource_key: str | None = None) -> list:
    """Return the records of a list response as a list.

    Handles a bare list, ``{"data": [...]}``, ``{resource_key: [...]}`` and
    objects keyed by row number (``{"0": {...}, "1": {...}}``). Anything else
    yields an empty list.
    """
    if isinstance(response, list):
        return response
    if isinstance(response, dict):
        if isinstance(response.get("data"), list):
            return response["data"]
        if resource_key and isinstance(response.get(resource_key), list):
            return response[resource_key]
        if all(isinstance(key, str) and key.isdecimal() for key in response):
            return list(response.values())
    return []
