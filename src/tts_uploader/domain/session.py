"""Authenticated session state shared by all platform calls."""

from dataclasses import dataclass


@dataclass
class SessionContext:
    """Holds the auth cookie, CSRF token, and authenticated user id.

    A single instance is shared by every request. The CSRF token is
    overwritten whenever the platform rotates it; concurrent writers are
    allowed to race and the last one wins.
    """

    cookie: str = ""
    csrf_token: str = ""
    user_id: int | None = None

    def get_cookie(self) -> str:
        return self.cookie

    def set_cookie(self, cookie: str) -> None:
        self.cookie = cookie.strip()

    def get_csrf(self) -> str:
        return self.csrf_token

    def set_csrf(self, token: str) -> None:
        self.csrf_token = token

    def get_user_id(self) -> int | None:
        return self.user_id

    def set_user_id(self, user_id: int | None) -> None:
        self.user_id = user_id

    def has_cookie(self) -> bool:
        """Return true when a non-empty cookie is loaded."""
        return bool(self.cookie)
