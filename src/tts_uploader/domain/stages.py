"""Stages of a TTS request."""

from enum import StrEnum


class PipelineStage(StrEnum):
    """Stages a TTS request moves through."""

    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    TRANSLATING = "translating"
    SYNTHESIZING = "synthesizing"
    UPLOADING = "uploading"
    AWAITING_COMPLETION = "awaiting_completion"
    GRANTING_PERMISSION = "granting_permission"
    RESOLVING_MODERATION = "resolving_moderation"
    COMPLETED = "completed"
