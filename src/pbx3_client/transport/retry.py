"""Optional retry layer for PBX3 read requests.

PBX3 appliances are frequently reached through a reverse proxy that answers
502/503/504 while the API backend restarts. ``IdempotentRetry`` retries reads
(GET, HEAD, OPTIONS) on those statuses and on connection failures with capped
exponential backoff. Writes are never retried.

Retries are off by default; ``create_transport(max_retries=0)`` returns a
plain ``httpx.AsyncHTTPTransport``.

Example:
    ```python
    from pbx3_client import ApiClient
    from pbx3_client.transport import create_transport

    api = ApiClient(session, transport=create_transport(max_retries=3))
    ```
"""

import asyncio
import logging

import httpx

logger = logging.getLogger(__name__)


class IdempotentRetry(httpx.AsyncBaseTransport):
    """Retry transport for idempotent reads.

    Args:
        wrapped_transport: The underlying transport to wrap
        max_retries: Maximum number of retry attempts (default: 3)
        backoff_factor: Multiplier for exponential backoff (default: 0.5)
        max_backoff: Upper bound for any single delay in seconds (default: 10)
        retry_status_codes: Status codes that trigger retries (default: 502, 503, 504)
    """

    RETRY_METHODS: frozenset[str] = frozenset(["GET", "HEAD", "OPTIONS"])

    DEFAULT_RETRY_STATUS_CODES: frozenset[int] = frozenset([502, 503, 504])

    def __init__(
        self,
        *,
        wrapped_transport: httpx.AsyncBaseTransport,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        max_backoff: float = 10.0,
        retry_status_codes: frozenset[int] | None = None,
    ) -> None:
        self._wrapped_transport = wrapped_transport
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.max_backoff = max_backoff
        self.retry_status_codes = retry_status_codes or self.DEFAULT_RETRY_STATUS_CODES

    async def __aenter__(self):
        await self._wrapped_transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return await self._wrapped_transport.__aexit__(exc_type, exc_val, exc_tb)

    async def aclose(self) -> None:
        await self._wrapped_transport.aclose()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        retryable = request.method in self.RETRY_METHODS

        while True:
            try:
                response = await self._wrapped_transport.handle_async_request(request)
            except httpx.TransportError as e:
                if not retryable or attempt >= self.max_retries:
                    raise
                attempt += 1
                delay = self._backoff(attempt)
                logger.warning(
                    f"{request.method} {request.url} failed with {e!r}, "
                    f"retrying in {delay}s (attempt {attempt}/{self.max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            if not retryable or attempt >= self.max_retries or response.status_code not in self.retry_status_codes:
                return response

            attempt += 1
            delay = self._retry_after(response)
            if delay is None:
                delay = self._backoff(attempt)
            logger.warning(
                f"{request.method} {request.url} returned {response.status_code}, "
                f"retrying in {delay}s (attempt {attempt}/{self.max_retries})"
            )
            await response.aclose()
            await asyncio.sleep(delay)

    def _retry_after(self, response: httpx.Response) -> float | None:
        """Delay from a delay-seconds ``Retry-After`` header, capped at max_backoff."""
        value = response.headers.get("Retry-After")
        if not value:
            return None
        try:
            seconds = int(value)
        except ValueError:
            return None
        if seconds < 0:
            return None
        return float(min(seconds, self.max_backoff))

    def _backoff(self, attempt: int) -> float:
        """backoff_factor * 2 ** (attempt - 1), capped at max_backoff."""
        return min(self.backoff_factor * (2 ** (attempt - 1)), self.max_backoff)


def create_transport(
    max_retries: int = 0,
    *,
    verify: bool = True,
    **retry_kwargs,
) -> httpx.AsyncBaseTransport:
    """Build the transport used by ``ApiClient``.

    Args:
        max_retries: Retries for idempotent reads; 0 disables the retry layer.
        verify: Verify TLS certificates. PBX3 appliances often ship with
            self-signed certificates, so this can be turned off per site.
        **retry_kwargs: Passed through to ``IdempotentRetry``.
    """
    base = httpx.AsyncHTTPTransport(verify=verify)
    if max_retries <= 0:
        return base
    return IdempotentRetry(wrapped_transport=base, max_retries=max_retries, **retry_kwargs)
