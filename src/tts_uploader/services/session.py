"""Session bootstrap and the shared CSRF retry rule."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from tts_uploader.adapters.asset_platform_client import AssetPlatformClient
from tts_uploader.adapters.cookie_store import CredentialStore
from tts_uploader.domain.errors import AssetPlatformError, PlatformHttpError
from tts_uploader.domain.session import SessionContext

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_csrf_retry(
    session: SessionContext,
    func: "Callable[[], Awaitable[T]]",
    *,
    action: str,
) -> T:
    """Run a platform call, retrying once if the CSRF token was rotated.

    A 403 carrying a fresh token updates the session before the retry. Any
    other error, or a second 403, is raised to the caller.
    """
    retried = False
    while True:
        try:
            return await func()
        except PlatformHttpError as exc:
            if not exc.is_csrf_rotation or retried:
                raise
            session.set_csrf(str(exc.csrf_token))
            retried = True
            _logger.info("CSRF token rotated during %s, retrying", action)


@dataclass
class SessionService:
    """Loads credentials and resolves the authenticated identity."""

    session: SessionContext
    client: AssetPlatformClient
    credential_store: CredentialStore

    def load_cookie(self) -> bool:
        """Load the auth cookie into the session context."""
        cookie = self.credential_store.load_cookie()
        self.session.set_cookie(cookie or "")
        if not self.session.has_cookie():
            _logger.error(
                "Platform cookie not loaded; authenticated calls will fail"
            )
            return False
        return True

    async def fetch_authenticated_user_id(self) -> int | None:
        """Fetch and cache the authenticated user id.

        Failures are logged and reported as ``None``.
        """
        if not self.session.has_cookie():
            _logger.error("Cannot fetch authenticated user id: cookie not available")
            return None
        try:
            payload = await call_with_csrf_retry(
                self.session,
                lambda: self.client.get_authenticated_user(self.session),
                action="authenticated user lookup",
            )
        except PlatformHttpError as exc:
            if exc.status_code == 401:
                _logger.error("Cookie is invalid or expired, update the cookie file")
            _logger.error(
                "Authenticated user lookup failed (status=%s): %s",
                exc.status_code,
                exc.message,
            )
            return None
        except AssetPlatformError as exc:
            _logger.error("Authenticated user lookup failed: %s", exc)
            return None

        raw_id = payload.get("id")
        if raw_id is None:
            _logger.error("Authenticated user response has no id: %s", payload)
            return None
        try:
            user_id = int(str(raw_id))
        except ValueError:
            _logger.error(
                "Authenticated user response has a non-numeric id: %r", raw_id
            )
            return None
        self.session.set_user_id(user_id)
        _logger.info("Authenticated user id=%s name=%s", user_id, payload.get("name"))
        return user_id

    async def ensure_user_id(self) -> int | None:
        """Return the cached user id, fetching it when missing."""
        cached = self.session.get_user_id()
        if cached is not None:
            return cached
        return await self.fetch_authenticated_user_id()
