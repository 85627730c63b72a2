"""Upload, completion, permission and moderation flow for one asset."""

import asyncio
import logging
from dataclasses import dataclass

from tts_uploader.domain.assets import (
    OperationHandle,
    OperationStatus,
    UploadOutcome,
    UploadRequest,
)
from tts_uploader.domain.errors import AssetPlatformError, PollingInconsistencyError
from tts_uploader.domain.stages import PipelineStage
from tts_uploader.services.moderation import (
    ModerationAction,
    ModerationDecision,
    resolve_after_polling,
    resolve_moderation,
)
from tts_uploader.services.permissions import PermissionGrantor
from tts_uploader.services.polling import OperationPoller
from tts_uploader.services.uploader import AssetUploader

_logger = logging.getLogger(__name__)

ASSET_ID_UNAVAILABLE = "Could not obtain asset id from platform operation."


@dataclass
class AssetUploadService:
    """Runs an upload to a terminal outcome without raising platform errors."""

    uploader: AssetUploader
    poller: OperationPoller
    grantor: PermissionGrantor
    bypass_moderation_wait: bool = False

    async def upload(self, request: UploadRequest) -> UploadOutcome:
        """Submit the request and follow it until moderation settles."""
        try:
            handle = await self.uploader.submit(request)
        except AssetPlatformError as exc:
            _logger.error("Asset upload failed: %s", exc)
            return UploadOutcome(
                success=False,
                operation_id=None,
                note="Upload failed",
                error=str(exc),
            )
        return await self.follow(handle)

    async def follow(self, handle: OperationHandle) -> UploadOutcome:
        """Wait for the asset id, then grant permissions and resolve moderation."""
        _logger.info("TTS request stage=%s", PipelineStage.AWAITING_COMPLETION)
        try:
            status = await self.poller.await_completion(handle)
        except AssetPlatformError as exc:
            return UploadOutcome(
                success=False,
                operation_id=handle.operation_id,
                note="Upload failed",
                error=str(exc),
            )
        if status is None or status.asset_id is None:
            return UploadOutcome(
                success=False,
                operation_id=handle.operation_id,
                note="Asset id unavailable",
                error=ASSET_ID_UNAVAILABLE,
            )

        _logger.info(
            "Asset %s (op %s) initial moderation state: %s",
            status.asset_id,
            handle.operation_id,
            status.moderation_state,
        )
        grant_task: asyncio.Task[bool] | None = None
        if self.grantor.is_active:
            _logger.info("TTS request stage=%s", PipelineStage.GRANTING_PERMISSION)
            grant_task = asyncio.create_task(self._grant_permissions(status.asset_id))
        _logger.info("TTS request stage=%s", PipelineStage.RESOLVING_MODERATION)
        try:
            return await self._resolve_moderation(handle, status)
        finally:
            if grant_task is not None:
                await grant_task

    async def _resolve_moderation(
        self, handle: OperationHandle, status: OperationStatus
    ) -> UploadOutcome:
        asset_id = status.asset_id
        decision = resolve_moderation(
            status.moderation_state, self.bypass_moderation_wait
        )
        if decision.action is ModerationAction.KEEP_POLLING:
            _logger.info(
                "Asset %s is '%s', polling for final moderation",
                asset_id,
                status.moderation_state,
            )
            try:
                final = await self.poller.await_moderation(handle, status)
            except PollingInconsistencyError as exc:
                _logger.error(
                    "Operation %s reported asset %s after %s",
                    handle.operation_id,
                    exc.other_asset_id,
                    exc.first_asset_id,
                )
                return UploadOutcome(
                    success=False,
                    operation_id=handle.operation_id,
                    note="Polling inconsistency",
                    error=str(exc),
                )
            except AssetPlatformError as exc:
                return UploadOutcome(
                    success=False,
                    operation_id=handle.operation_id,
                    asset_id=asset_id,
                    note="Moderation polling failed",
                    error=str(exc),
                )
            decision = resolve_after_polling(final.moderation_state)
        return _outcome(decision, handle, asset_id)

    async def _grant_permissions(self, asset_id: int) -> bool:
        try:
            return await self.grantor.grant(asset_id)
        except Exception:
            _logger.exception("Permission grant for asset %s failed", asset_id)
            return False


def _outcome(
    decision: ModerationDecision, handle: OperationHandle, asset_id: int | None
) -> UploadOutcome:
    return UploadOutcome(
        success=decision.action is ModerationAction.SUCCEED,
        operation_id=handle.operation_id,
        asset_id=asset_id,
        note=decision.note,
        error=decision.error,
    )
