"""Credential store for the platform auth cookie."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

_logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Interface for loading the persisted auth cookie."""

    def load_cookie(self) -> str | None:
        """Return the cookie value, or None when unavailable."""


@dataclass
class FileCookieStore(CredentialStore):
    """Reads the auth cookie from a plain text file."""

    path: Path

    def load_cookie(self) -> str | None:
        """Read and trim the cookie file."""
        if not self.path.exists():
            _logger.warning("Cookie file %s not found", self.path)
            return None
        try:
            value = self.path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            _logger.error("Error reading cookie from %s: %s", self.path, exc)
            return None
        if not value:
            _logger.warning("Cookie file %s is empty", self.path)
            return None
        _logger.info("Loaded platform cookie from %s", self.path)
        return value
