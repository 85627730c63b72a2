"""Asset submission with CSRF and rate-limit recovery."""

import asyncio
import logging
from dataclasses import dataclass

from tts_uploader.adapters.asset_platform_client import AssetPlatformClient
from tts_uploader.domain.assets import OperationHandle, UploadRequest
from tts_uploader.domain.errors import (
    MalformedResponseError,
    MissingCredentialsError,
    PlatformHttpError,
    QuotaExhaustedError,
)
from tts_uploader.domain.session import SessionContext
from tts_uploader.domain.timing import SleepFunc

_logger = logging.getLogger(__name__)

RATE_LIMIT_BACKOFF_SECONDS = 10.0


@dataclass
class AssetUploader:
    """Submits an upload request and returns the operation handle.

    The CSRF rotation retry and the plain 429 retry each get one extra
    attempt. Quota exhaustion is permanent and never retried.
    """

    session: SessionContext
    client: AssetPlatformClient
    sleep: SleepFunc = asyncio.sleep
    rate_limit_backoff_seconds: float = RATE_LIMIT_BACKOFF_SECONDS

    async def submit(self, request: UploadRequest) -> OperationHandle:
        """Create the asset and return its operation handle."""
        if not self.session.has_cookie():
            raise MissingCredentialsError("Platform cookie not available for upload.")
        user_id = self.session.get_user_id()
        if user_id is None:
            raise MissingCredentialsError(
                "Authenticated user id not available for upload."
            )

        csrf_retried = False
        throttle_retried = False
        while True:
            try:
                payload = await self.client.create_asset(self.session, request, user_id)
                break
            except PlatformHttpError as exc:
                _logger.warning(
                    "Asset create failed (status=%s, code=%s): %s",
                    exc.status_code,
                    exc.code,
                    exc.message,
                )
                if exc.is_csrf_rotation and not csrf_retried:
                    self.session.set_csrf(str(exc.csrf_token))
                    csrf_retried = True
                    _logger.info("CSRF token rotated on asset create, resubmitting")
                    continue
                if exc.is_resource_exhausted:
                    raise QuotaExhaustedError(
                        "Upload limit reached (RESOURCE_EXHAUSTED)."
                    ) from exc
                if exc.is_rate_limited and not throttle_retried:
                    throttle_retried = True
                    _logger.warning(
                        "Rate limited on asset create, waiting %ss",
                        self.rate_limit_backoff_seconds,
                    )
                    await self.sleep(self.rate_limit_backoff_seconds)
                    continue
                raise

        handle = _operation_handle(payload)
        _logger.info("Upload initiated, operation_id=%s", handle.operation_id)
        return handle


def _operation_handle(payload: dict[str, object]) -> OperationHandle:
    """Extract the operation id from an asset create response."""
    operation_id = payload.get("operationId")
    if not operation_id:
        path = payload.get("path")
        if isinstance(path, str) and path:
            operation_id = path.rstrip("/").split("/")[-1]
    if not operation_id:
        raise MalformedResponseError(
            "Upload to platform initiated but no operationId received."
        )
    return OperationHandle(operation_id=str(operation_id))
