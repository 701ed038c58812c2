"""Transport layers for the PBX3 API client."""

from pbx3_client.transport.retry import IdempotentRetry, create_transport

__all__ = ["IdempotentRetry", "create_transport"]
