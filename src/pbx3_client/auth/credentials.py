"""Configuration lookup for the PBX3 endpoint and bearer token.

Values are resolved in priority order:
1. Explicitly provided value
2. Environment variable (``.env`` files are loaded into the environment first)
3. Default value

Example:
    ```python
    from pbx3_client.auth import CredentialResolver

    resolver = CredentialResolver()
    base_url = resolver.resolve(env_var_name="PBX3_BASE_URL", required=True)
    token = resolver.resolve(env_var_name="PBX3_TOKEN") or resolver.resolve_from_file(
        env_var_name="PBX3_TOKEN_FILE"
    )
    ```

Token values are never logged; only the source they came from is.
"""

import logging
import os
from pathlib import Path
from threading import Lock

from dotenv import load_dotenv

from pbx3_client.auth.exceptions import CredentialFileError, CredentialNotFoundError

logger = logging.getLogger(__name__)

BASE_URL_ENV = "PBX3_BASE_URL"
TOKEN_ENV = "PBX3_TOKEN"
TOKEN_FILE_ENV = "PBX3_TOKEN_FILE"


class CredentialResolver:
    """Resolve settings from explicit values, the environment and ``.env``.

    Args:
        dotenv_path: Path to a .env file. If None, python-dotenv searches
            parent directories.
        load_dotenv: Whether to load a .env file at all.
    """

    def __init__(self, dotenv_path: str | None = None, load_dotenv: bool = True):
        self._dotenv_loaded = False
        self._dotenv_lock = Lock()
        self._dotenv_path = dotenv_path
        if load_dotenv:
            self._ensure_dotenv_loaded()

    def _ensure_dotenv_loaded(self) -> None:
        with self._dotenv_lock:
            if self._dotenv_loaded:
                return
            try:
                load_dotenv(dotenv_path=self._dotenv_path)
                logger.debug("Loaded .env file for PBX3 settings")
            except OSError as e:
                logger.warning(f"Failed to load .env file: {e}")
            self._dotenv_loaded = True

    def resolve(
        self,
        *,
        value: str | None = None,
        env_var_name: str | None = None,
        default: str | None = None,
        required: bool = False,
        secret: bool = True,
    ) -> str | None:
        """Resolve a single setting.

        Args:
            value: Explicit value; wins over every other source.
            env_var_name: Environment variable to consult.
            default: Fallback when nothing else is set.
            required: Raise CredentialNotFoundError instead of returning None.
            secret: Mask the value in debug logs.

        Returns:
            The resolved value, or None.
        """
        result = None
        source = None

        if value is not None:
            result, source = value, "explicit parameter"
        elif env_var_name and env_var_name in os.environ:
            result, source = os.environ[env_var_name], f"environment variable '{env_var_name}'"
        elif default is not None:
            result, source = default, "default value"

        if result is not None:
            shown = "***" if secret else result
            logger.debug(f"Resolved setting from {source}: {shown}")

        if required and result is None:
            error_msg = "Required setting not found"
            if env_var_name:
                error_msg += f" (checked env var: {env_var_name})"
            raise CredentialNotFoundError(error_msg, env_var_name=env_var_name)

        return result

    def resolve_from_file(
        self,
        *,
        file_path: str | Path | None = None,
        env_var_name: str | None = None,
        required: bool = False,
    ) -> str | None:
        """Read a token from a file.

        The path may be given directly or through ``env_var_name``; ``~`` and
        ``$VAR`` are expanded and surrounding whitespace is stripped from the
        contents.

        Raises:
            CredentialFileError: If required and the file cannot be read.
        """
        path_to_use = str(file_path) if file_path is not None else None
        if path_to_use is None and env_var_name:
            path_to_use = self.resolve(env_var_name=env_var_name, secret=False)

        if path_to_use is None:
            if required:
                error_msg = "No token file configured"
                if env_var_name:
                    error_msg += f" (env var '{env_var_name}' not set)"
                raise CredentialFileError(error_msg)
            return None

        path_obj = Path(os.path.expanduser(os.path.expandvars(path_to_use)))
        try:
            content = path_obj.read_text().strip()
        except OSError as e:
            error_msg = f"Cannot read token file {path_obj}: {e}"
            if required:
                raise CredentialFileError(error_msg) from e
            logger.warning(error_msg)
            return None

        logger.debug(f"Resolved token from file: {path_obj} (***)")
        return content

    def resolve_session(
        self,
        *,
        base_url: str | None = None,
        token: str | None = None,
    ) -> tuple[str, str | None]:
        """Resolve the base endpoint and bearer token for a new session.

        The token comes from ``PBX3_TOKEN`` or, failing that, from the file
        named by ``PBX3_TOKEN_FILE``. A missing base URL resolves to ``""``.
        """
        resolved_base = self.resolve(value=base_url, env_var_name=BASE_URL_ENV, default="", secret=False)
        resolved_token = self.resolve(value=token, env_var_name=TOKEN_ENV)
        if resolved_token is None:
            resolved_token = self.resolve_from_file(env_var_name=TOKEN_FILE_ENV)
        return resolved_base or "", resolved_token or None
