"""Errors raised while talking to the asset platform."""


class AssetPlatformError(Exception):
    """Base class for asset platform failures."""


class MissingCredentialsError(AssetPlatformError):
    """Raised before any request when the cookie or user id is missing."""


class PlatformTransportError(AssetPlatformError):
    """Raised when a request produced no HTTP response at all."""


class PlatformHttpError(AssetPlatformError):
    """Raised for non-2xx platform responses."""

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        csrf_token: str | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.csrf_token = csrf_token
        self.code = code

    @property
    def is_csrf_rotation(self) -> bool:
        """True when the platform rejected the call and issued a new token."""
        return self.status_code == 403 and bool(self.csrf_token)

    @property
    def is_resource_exhausted(self) -> bool:
        """True for account-level quota errors that must not be retried."""
        return bool(self.code) and "RESOURCE_EXHAUSTED" in str(self.code)

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


class QuotaExhaustedError(AssetPlatformError):
    """Raised when the account upload quota is used up."""


class MalformedResponseError(AssetPlatformError):
    """Raised when a successful response lacks a required field."""


class PollingInconsistencyError(AssetPlatformError):
    """Raised when one operation reports two different asset ids."""

    def __init__(self, operation_id: str, first_asset_id: int, other_asset_id: int):
        super().__init__(f"Polling inconsistency op {operation_id}.")
        self.operation_id = operation_id
        self.first_asset_id = first_asset_id
        self.other_asset_id = other_asset_id


class TranslationError(RuntimeError):
    """Raised when translation fails or returns no text."""


class SynthesisError(RuntimeError):
    """Raised when speech synthesis fails or yields no audio."""
