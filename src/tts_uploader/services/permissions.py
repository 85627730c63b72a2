"""Grants a universe permission to use newly created assets."""

import logging
from dataclasses import dataclass

from tts_uploader.adapters.asset_platform_client import AssetPlatformClient
from tts_uploader.domain.errors import AssetPlatformError
from tts_uploader.domain.session import SessionContext
from tts_uploader.services.session import call_with_csrf_retry

_logger = logging.getLogger(__name__)


@dataclass
class PermissionGrantor:
    """Authorizes a universe to use an asset when the caller manages it."""

    session: SessionContext
    client: AssetPlatformClient
    universe_id: str | None = None
    enabled: bool = False

    @property
    def is_active(self) -> bool:
        return self.enabled and bool(self.universe_id)

    async def can_manage(self, universe_id: str) -> bool:
        """Return whether the authenticated user can manage the universe."""
        try:
            payload = await call_with_csrf_retry(
                self.session,
                lambda: self.client.get_universe_permissions(self.session, universe_id),
                action=f"permission check for universe {universe_id}",
            )
        except AssetPlatformError as exc:
            _logger.error(
                "Error checking manage permissions for universe %s: %s",
                universe_id,
                exc,
            )
            return False
        entries = payload.get("data")
        if not isinstance(entries, list) or not entries:
            _logger.warning(
                "Could not determine manage permissions for universe %s: %s",
                universe_id,
                payload,
            )
            return False
        first = entries[0]
        can_manage = isinstance(first, dict) and first.get("canManage") is True
        _logger.info("Universe %s canManage=%s", universe_id, can_manage)
        return can_manage

    async def grant(self, asset_id: int) -> bool:
        """Grant 'Use' on the asset to the configured universe."""
        if not self.is_active:
            return False
        universe_id = str(self.universe_id)
        if not await self.can_manage(universe_id):
            _logger.warning(
                "No manage permission for universe %s, skipping grant of asset %s",
                universe_id,
                asset_id,
            )
            return False
        try:
            await call_with_csrf_retry(
                self.session,
                lambda: self.client.grant_asset_permission(
                    self.session, asset_id, universe_id
                ),
                action=f"permission grant for asset {asset_id}",
            )
        except AssetPlatformError as exc:
            _logger.error(
                "Error granting asset %s to universe %s: %s",
                asset_id,
                universe_id,
                exc,
            )
            return False
        _logger.info(
            "Granted asset %s use permission to universe %s", asset_id, universe_id
        )
        return True
