"""Domain models for audio asset uploads."""

from dataclasses import dataclass
from enum import StrEnum

from tts_uploader.domain.errors import MalformedResponseError

_DISPLAY_NAME_LIMIT = 47


class ModerationState(StrEnum):
    """Moderation verdicts the platform reports for a created asset."""

    REVIEWING = "Reviewing"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {ModerationState.APPROVED, ModerationState.REJECTED, ModerationState.FAILED}
)


def parse_moderation_state(raw: object) -> ModerationState | str | None:
    """Map a raw moderation value to a known state, keeping unknown strings."""
    if raw is None:
        return None
    value = str(raw)
    try:
        return ModerationState(value)
    except ValueError:
        return value


def is_terminal_state(state: ModerationState | str | None) -> bool:
    """Return true when the moderation state will not change anymore."""
    return isinstance(state, ModerationState) and state.is_terminal


@dataclass(frozen=True)
class UploadRequest:
    """Binary payload and metadata for a single asset submission."""

    file_bytes: bytes
    filename: str
    content_type: str
    display_name: str


@dataclass(frozen=True)
class OperationHandle:
    """Identifies a long-running asset creation job."""

    operation_id: str

    def __post_init__(self) -> None:
        if not self.operation_id:
            raise ValueError("operation_id must not be empty")


@dataclass(frozen=True)
class OperationStatus:
    """Snapshot of an operation as reported by the platform."""

    done: bool
    asset_id: int | None = None
    moderation_state: ModerationState | str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "OperationStatus":
        """Build a status from the raw operation response."""
        done = bool(payload.get("done"))
        response = payload.get("response") or {}
        if not isinstance(response, dict):
            response = {}
        asset_id = _parse_asset_id(response.get("assetId"))
        moderation = response.get("moderationResult") or {}
        raw_state = (
            moderation.get("moderationState") if isinstance(moderation, dict) else None
        )
        return cls(
            done=done,
            asset_id=asset_id,
            moderation_state=parse_moderation_state(raw_state),
        )

    @property
    def has_asset(self) -> bool:
        return self.done and self.asset_id is not None


@dataclass(frozen=True)
class UploadOutcome:
    """Terminal result of an upload and moderation run."""

    success: bool
    operation_id: str | None
    note: str
    asset_id: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class AudioFile:
    """Downloaded synthesized audio."""

    content: bytes
    content_type: str


def build_display_name(text: str) -> str:
    """Return an asset display name derived from the source text."""
    if len(text) > _DISPLAY_NAME_LIMIT:
        return f"{text[:_DISPLAY_NAME_LIMIT]}..."
    return text


def file_extension_for(content_type: str) -> str:
    """Pick a file extension for an audio content type."""
    if "mpeg" in content_type:
        return ".mp3"
    if "ogg" in content_type:
        return ".ogg"
    return ".wav"


def _parse_asset_id(raw: object) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(str(raw))
    except ValueError as exc:
        raise MalformedResponseError(
            f"Operation response has a non-numeric assetId: {raw!r}"
        ) from exc
