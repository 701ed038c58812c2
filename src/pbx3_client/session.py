"""Session state shared by the transport client and the schema cache.

The session holds the API base endpoint and bearer token for the tenant the
user logged into. It is written by login/logout code and by the client's 401
handler, and read on every request.
"""

import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from pbx3_client.auth.credentials import CredentialResolver

logger = logging.getLogger(__name__)

SessionListener = Callable[["SessionStore"], None]


@runtime_checkable
class SessionProvider(Protocol):
    """Narrow interface the transport client needs from a session."""

    def get_base_endpoint(self) -> str: ...

    def get_token(self) -> str | None: ...

    def invalidate(self) -> None: ...

    def on_login_redirect(self) -> None: ...


class SessionStore:
    """In-memory session with change notification.

    Args:
        base_url: API base URL, e.g. ``https://pbx.example.com:44300/api``.
        token: Bearer token, or None when logged out.
        login_redirect: Called when a request comes back 401 and the
            application should return to its login screen.

    Example:
        ```python
        session = SessionStore(login_redirect=router.go_to_login)
        session.set_credentials("https://pbx.example.com/api", token)
        ```
    """

    def __init__(
        self,
        base_url: str = "",
        token: str | None = None,
        *,
        login_redirect: Callable[[], None] | None = None,
    ):
        self._base_url = base_url or ""
        self._token = token or None
        self._user: Any = None
        self._login_redirect = login_redirect
        self._listeners: list[SessionListener] = []

    @classmethod
    def from_env(
        cls,
        resolver: CredentialResolver | None = None,
        *,
        login_redirect: Callable[[], None] | None = None,
    ) -> "SessionStore":
        """Build a session from ``PBX3_BASE_URL`` / ``PBX3_TOKEN`` settings."""
        resolver = resolver or CredentialResolver()
        base_url, token = resolver.resolve_session()
        return cls(base_url, token, login_redirect=login_redirect)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def user(self) -> Any:
        return self._user

    @property
    def is_logged_in(self) -> bool:
        return bool(self._token)

    def get_base_endpoint(self) -> str:
        return self._base_url

    def get_token(self) -> str | None:
        return self._token

    def set_credentials(self, base_url: str | None, token: str | None) -> None:
        """Start a new session with the given endpoint and token."""
        self._base_url = base_url or ""
        self._token = token or None
        logger.debug(f"Session credentials set for {self._base_url or '<no endpoint>'}")
        self._notify()

    def set_user(self, user: Any) -> None:
        self._user = user

    def invalidate(self) -> None:
        """Clear endpoint, token and user. Safe to call repeatedly."""
        self._base_url = ""
        self._token = None
        self._user = None
        self._notify()

    clear_credentials = invalidate

    def on_login_redirect(self) -> None:
        if self._login_redirect is None:
            logger.info("Session ended; login required")
            return
        self._login_redirect()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register ``listener`` for credential changes.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


class StaticSession:
    """Fixed credentials for clients built outside the shared session."""

    def __init__(self, base_url: str, token: str | None = None, login_redirect: Callable[[], None] | None = None):
        self._base_url = base_url or ""
        self._token = token or None
        self._login_redirect = login_redirect

    def get_base_endpoint(self) -> str:
        return self._base_url

    def get_token(self) -> str | None:
        return self._token

    def invalidate(self) -> None:
        self._base_url = ""
        self._token = None

    def on_login_redirect(self) -> None:
        if self._login_redirect is not None:
            self._login_redirect()
