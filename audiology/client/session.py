"""Session-expiry detection and the redirect to sign-in."""

import logging
from collections.abc import Callable
from typing import Protocol

from audiology.core import config

logger = logging.getLogger(__name__)

_EXPIRY_MARKERS = ('expired', 'invalid', 'unauthorized')


class Navigator(Protocol):
    @property
    def current_path(self) -> str: ...

    def replace(self, path: str) -> None: ...


def is_session_expired_error(error: BaseException | str | None) -> bool:
    """True when the error text mentions a session that expired or was rejected.

    This matches on message wording, so it breaks if the server rewords its
    401 details. TODO: switch to a structured error code once the API returns one.
    """
    if error is None:
        return False

    message = getattr(error, 'message', None) or str(error) or ''
    lowered = message.lower()
    return 'session' in lowered and any(marker in lowered for marker in _EXPIRY_MARKERS)


class RedirectSlot:
    """Holds the path to resume at after the user signs in again."""

    def __init__(self):
        self._path: str | None = None

    def set_redirect_path(self, path: str | None) -> None:
        self._path = path

    @property
    def redirect_path(self) -> str | None:
        return self._path

    def consume_redirect_path(self) -> str | None:
        path, self._path = self._path, None
        return path


class SessionExpiryHandler:
    def __init__(
        self,
        set_redirect_path: Callable[[str], None],
        navigator: Navigator,
        auth_path: str | None = None,
    ):
        self._set_redirect_path = set_redirect_path
        self._navigator = navigator
        self.auth_path = auth_path or config.AUTH_ENTRY_PATH

    def handle_session_expired(self) -> None:
        pathname = self._navigator.current_path
        logger.info('[SessionHandler] Session expired, saving current path: %s', pathname)
        self._set_redirect_path(pathname)
        self._navigator.replace(self.auth_path)

    def handle_error(self, error: BaseException | None) -> bool:
        """Redirect when ``error`` is a session expiry. Returns whether it did."""
        if not is_session_expired_error(error):
            return False
        self.handle_session_expired()
        return True
