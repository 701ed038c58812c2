"""Configuration of PBX3 credentials.

Example:
    ```python
    from pbx3_client.auth import CredentialResolver

    base_url, token = CredentialResolver().resolve_session()
    ```
"""

from pbx3_client.auth.credentials import BASE_URL_ENV, TOKEN_ENV, TOKEN_FILE_ENV, CredentialResolver
from pbx3_client.auth.exceptions import (
    CredentialError,
    CredentialFileError,
    CredentialNotFoundError,
)

__all__ = [
    "BASE_URL_ENV",
    "TOKEN_ENV",
    "TOKEN_FILE_ENV",
    "CredentialError",
    "CredentialFileError",
    "CredentialNotFoundError",
    "CredentialResolver",
]
