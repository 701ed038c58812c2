"""PBX3 API client.

Issues authenticated JSON requests against the PBX3 administration API and
normalizes the results:

- ``Accept: application/json`` on every call, ``Authorization: Bearer <token>``
  whenever the session has a token
- JSON bodies for POST/PUT, form-encoded query strings for GET
- successful bodies decode to JSON, falling back to raw text; empty bodies
  decode to None
- non-2xx responses raise an HTTPError subclass; a 401 also ends the session
  and asks the application to show its login screen

Example:
    ```python
    from pbx3_client import SessionStore, get_api_client

    session = SessionStore(login_redirect=show_login)
    session.set_credentials("https://pbx.example.com:44300/api", token)

    async with get_api_client(session) as api:
        tenants = await api.get("tenants", {"page": 2})
        await api.put("tenants/default", {"description": "Main office"})
    ```
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from pbx3_client.errors.exceptions import NetworkError, RequestBodyError
from pbx3_client.errors.handler import decode_json_or_text, raise_for_status
from pbx3_client.session import SessionProvider, StaticSession
from pbx3_client.transport.retry import create_transport

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

QueryValue = str | int | float | bool
_ABSOLUTE_PREFIXES = ("http://", "https://")


def build_url(base_url: str, path: str) -> str:
    """Join ``base_url`` and ``path`` with exactly one slash.

    Paths that are already absolute URLs (pagination links, for example) are
    returned unchanged.
    """
    if path.startswith(_ABSOLUTE_PREFIXES):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def build_headers(token: str | None, has_body: bool = False) -> dict[str, str]:
    """Headers sent with every request."""
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    if has_body:
        headers["Content-Type"] = "application/json"
    return headers


def _encode_body(method: str, path: str, body: Any) -> bytes | None:
    if body is None:
        return None
    try:
        return json.dumps(body, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise RequestBodyError(f"API {method} {path}: request body is not JSON serializable: {e}") from e


class ApiClient:
    """Async client for the PBX3 administration API.

    Credentials are read from ``session`` on every call, so a client built
    before login keeps working once the session is populated.

    Args:
        session: Provider of the base endpoint and bearer token.
        transport: httpx transport to send requests through. Defaults to
            ``create_transport(max_retries)``.
        timeout: Request timeout in seconds.
        max_retries: Retries for idempotent reads on gateway errors. Ignored
            when ``transport`` is given.
        verify: Verify TLS certificates. Ignored when ``transport`` is given.
    """

    def __init__(
        self,
        session: SessionProvider,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 0,
        verify: bool = True,
    ) -> None:
        self.session = session
        self._http = httpx.AsyncClient(
            transport=transport or create_transport(max_retries=max_retries, verify=verify),
            timeout=timeout,
        )

    async def __aenter__(self) -> "ApiClient":
        await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._http.__aexit__(exc_type, exc_val, exc_tb)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get(self, path: str, query: Mapping[str, QueryValue] | None = None) -> Any:
        """GET ``path``; a non-empty ``query`` is appended as a query string."""
        response = await self._send("GET", path, query=query)
        return decode_json_or_text(response.text)

    async def post(self, path: str, body: Any = None) -> Any:
        response = await self._send("POST", path, body=body)
        return decode_json_or_text(response.text)

    async def put(self, path: str, body: Any = None) -> Any:
        response = await self._send("PUT", path, body=body)
        return decode_json_or_text(response.text)

    async def delete(self, path: str) -> Any:
        response = await self._send("DELETE", path)
        return decode_json_or_text(response.text)

    async def get_blob(self, path: str) -> bytes:
        """GET ``path`` and return the raw payload (recordings, exports)."""
        response = await self._send("GET", path)
        return response.content

    async def _send(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        query: Mapping[str, QueryValue] | None = None,
    ) -> httpx.Response:
        content = _encode_body(method, path, body)
        url = build_url(self.session.get_base_endpoint(), path)
        headers = build_headers(self.session.get_token(), has_body=content is not None)

        logger.debug(f"{method} {url}")
        try:
            response = await self._http.request(
                method,
                url,
                params=dict(query) if query else None,
                content=content,
                headers=headers,
            )
        except httpx.RequestError as e:
            raise NetworkError(f"API {method} {path}: {e.__class__.__name__}: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        if response.is_success:
            return response

        if response.status_code == 401:
            logger.warning(f"{method} {path} returned 401; ending session")
            self.session.invalidate()
            self.session.on_login_redirect()

        raise_for_status(response, method, path)
        return response


def get_api_client(session: SessionProvider, **kwargs: Any) -> ApiClient:
    """Client bound to a live session; every call sees the latest credentials."""
    return ApiClient(session, **kwargs)


def create_api_client(base_url: str, token: str | None, **kwargs: Any) -> ApiClient:
    """Client with fixed credentials, independent of any shared session."""
    return ApiClient(StaticSession(base_url, token), **kwargs)
