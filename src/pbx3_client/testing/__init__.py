"""Test doubles for code built on the PBX3 client.

Example:
    ```python
    import httpx
    from pbx3_client import ApiClient
    from pbx3_client.testing import RecordingSession, json_handler


    async def test_lists_tenants():
        session = RecordingSession("https://pbx.test/api", "tok")
        transport = httpx.MockTransport(json_handler({"tenants": [{"pkey": "default"}]}))
        async with ApiClient(session, transport=transport) as api:
            assert await api.get("tenants") == {"tenants": [{"pkey": "default"}]}
    ```
"""

import json
from collections.abc import Callable
from typing import Any

import httpx

from pbx3_client.session import SessionStore


class RecordingSession(SessionStore):
    """SessionStore that counts invalidations and login redirects."""

    def __init__(self, base_url: str = "https://pbx.test/api", token: str | None = "test-token"):
        super().__init__(base_url, token)
        self.invalidations = 0
        self.redirects = 0

    def invalidate(self) -> None:
        self.invalidations += 1
        super().invalidate()

    def on_login_redirect(self) -> None:
        self.redirects += 1


def json_handler(
    payload: Any = None,
    status_code: int = 200,
    *,
    requests: list[httpx.Request] | None = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """MockTransport handler answering every request with ``payload`` as JSON.

    When ``requests`` is given, each request is appended to it. A ``None``
    payload produces an empty body.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        body = b"" if payload is None else json.dumps(payload).encode("utf-8")
        return httpx.Response(status_code, content=body, headers={"content-type": "application/json"})

    return handler


__all__ = ["RecordingSession", "json_handler"]
