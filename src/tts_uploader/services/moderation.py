"""Moderation outcome decisions."""

from dataclasses import dataclass
from enum import StrEnum

from tts_uploader.domain.assets import ModerationState


class ModerationAction(StrEnum):
    """What to do after reading a moderation state."""

    SUCCEED = "succeed"
    FAIL = "fail"
    KEEP_POLLING = "keep_polling"


@dataclass(frozen=True)
class ModerationDecision:
    """Decision plus the user-facing note."""

    action: ModerationAction
    note: str
    error: str | None = None


def resolve_moderation(
    state: ModerationState | str | None, bypass_reviewing: bool
) -> ModerationDecision:
    """Decide the outcome of the first moderation read."""
    if state == ModerationState.APPROVED:
        return ModerationDecision(ModerationAction.SUCCEED, note="Approved")
    if state in (ModerationState.REJECTED, ModerationState.FAILED):
        return ModerationDecision(
            ModerationAction.FAIL,
            note=f"Asset {state}.",
            error=f"Asset {state}",
        )
    if state == ModerationState.REVIEWING and bypass_reviewing:
        return ModerationDecision(
            ModerationAction.SUCCEED, note="Reviewing, wait bypassed"
        )
    return ModerationDecision(
        ModerationAction.KEEP_POLLING, note=f"Asset moderation: {state or 'Unknown'}"
    )


def resolve_after_polling(state: ModerationState | str | None) -> ModerationDecision:
    """Decide the outcome once moderation polling has finished."""
    if state == ModerationState.APPROVED:
        return ModerationDecision(ModerationAction.SUCCEED, note="Approved")
    label = state or "Unknown"
    return ModerationDecision(
        ModerationAction.FAIL,
        note=f"Asset moderation: {label}",
        error=f"Asset not approved. Final Status: {label}",
    )
