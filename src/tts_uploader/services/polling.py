"""Operation status polling in two phases."""

import asyncio
import logging
from dataclasses import dataclass

from tts_uploader.adapters.asset_platform_client import AssetPlatformClient
from tts_uploader.domain.assets import (
    OperationHandle,
    OperationStatus,
    is_terminal_state,
)
from tts_uploader.domain.errors import (
    AssetPlatformError,
    MalformedResponseError,
    MissingCredentialsError,
    PlatformHttpError,
    PollingInconsistencyError,
)
from tts_uploader.domain.session import SessionContext
from tts_uploader.domain.timing import SleepFunc
from tts_uploader.services.session import call_with_csrf_retry

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollingPhase:
    """Attempt cap and fixed delay for one polling phase."""

    name: str
    max_attempts: int
    interval_seconds: float


COMPLETION_PHASE = PollingPhase(name="completion", max_attempts=25, interval_seconds=2)
MODERATION_PHASE = PollingPhase(name="moderation", max_attempts=70, interval_seconds=5)


@dataclass
class OperationPoller:
    """Polls an asset operation until it completes and is moderated."""

    session: SessionContext
    client: AssetPlatformClient
    sleep: SleepFunc = asyncio.sleep
    completion_phase: PollingPhase = COMPLETION_PHASE
    moderation_phase: PollingPhase = MODERATION_PHASE

    async def fetch_status(self, handle: OperationHandle) -> OperationStatus | None:
        """Query the operation once.

        Request failures and unreadable responses are logged and reported
        as ``None`` so the caller spends an attempt instead of aborting. A
        missing cookie is raised.
        """
        try:
            payload = await call_with_csrf_retry(
                self.session,
                lambda: self.client.get_operation(self.session, handle.operation_id),
                action=f"operation poll {handle.operation_id}",
            )
        except MissingCredentialsError:
            raise
        except PlatformHttpError as exc:
            _logger.warning(
                "Failed to get operation %s (status=%s): %s",
                handle.operation_id,
                exc.status_code,
                exc.message,
            )
            return None
        except AssetPlatformError as exc:
            _logger.warning("Failed to get operation %s: %s", handle.operation_id, exc)
            return None
        try:
            status = OperationStatus.from_payload(payload)
        except MalformedResponseError as exc:
            _logger.warning(
                "Unreadable response for operation %s: %s", handle.operation_id, exc
            )
            return None
        if not status.done:
            _logger.debug("Operation %s still processing", handle.operation_id)
        return status

    async def await_completion(self, handle: OperationHandle) -> OperationStatus | None:
        """Wait until the operation is done and has an asset id.

        Returns ``None`` when the phase runs out of attempts.
        """
        phase = self.completion_phase
        for attempt in range(1, phase.max_attempts + 1):
            _logger.info(
                "Polling operation %s for completion (attempt %s/%s)",
                handle.operation_id,
                attempt,
                phase.max_attempts,
            )
            status = await self.fetch_status(handle)
            if status is not None and status.has_asset:
                _logger.info(
                    "Operation %s done, asset_id=%s",
                    handle.operation_id,
                    status.asset_id,
                )
                return status
            if status is not None and status.done:
                _logger.warning(
                    "Operation %s is done but has no asset id", handle.operation_id
                )
            if attempt < phase.max_attempts:
                await self.sleep(phase.interval_seconds)
        return None

    async def await_moderation(
        self, handle: OperationHandle, initial: OperationStatus
    ) -> OperationStatus:
        """Poll until moderation reaches a terminal state or attempts run out.

        Returns the last status observed for the asset, which is ``initial``
        if no later poll succeeded.
        """
        if initial.asset_id is None:
            raise ValueError("moderation polling requires a completed operation")
        phase = self.moderation_phase
        latest = initial
        for attempt in range(1, phase.max_attempts + 1):
            _logger.info(
                "Polling moderation for asset %s (attempt %s/%s)",
                initial.asset_id,
                attempt,
                phase.max_attempts,
            )
            status = await self.fetch_status(handle)
            if status is not None and status.has_asset:
                if status.asset_id != initial.asset_id:
                    raise PollingInconsistencyError(
                        handle.operation_id,
                        initial.asset_id,
                        int(status.asset_id or 0),
                    )
                latest = status
                _logger.info(
                    "Asset %s moderation state: %s",
                    initial.asset_id,
                    status.moderation_state,
                )
                if is_terminal_state(status.moderation_state):
                    return latest
            if attempt < phase.max_attempts:
                await self.sleep(phase.interval_seconds)
        return latest
