"""PBX3 Client - async client layer for the PBX3 administration API.

This library provides:
- An authenticated JSON transport client with session-expiry handling
- A single-flight cache of per-resource field mutability metadata
- Typed failures carrying the raw and parsed error body
- Helpers for field-level error messages and list responses

Example:
    ```python
    from pbx3_client import SchemaCache, SessionStore, get_api_client

    session = SessionStore.from_env(login_redirect=show_login)
    api = get_api_client(session)
    schemas = SchemaCache(api, session=session)

    await schemas.ensure_loaded()
    extensions = await api.get("extensions")
    ```
"""

from pbx3_client.client import ApiClient, build_url, create_api_client, get_api_client
from pbx3_client.lists import normalize_list
from pbx3_client.schema import ResourceSchema, SchemaCache
from pbx3_client.session import SessionProvider, SessionStore, StaticSession

__version__ = "0.1.0"

__all__ = [
    "ApiClient",
    "ResourceSchema",
    "SchemaCache",
    "SessionProvider",
    "SessionStore",
    "StaticSession",
    "__version__",
    "build_url",
    "create_api_client",
    "get_api_client",
    "normalize_list",
]
