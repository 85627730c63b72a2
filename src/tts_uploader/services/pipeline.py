"""Text to uploaded audio asset pipeline."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from tts_uploader.domain.assets import (
    AudioFile,
    UploadRequest,
    build_display_name,
    file_extension_for,
)
from tts_uploader.domain.errors import SynthesisError, TranslationError
from tts_uploader.domain.stages import PipelineStage
from tts_uploader.services.session import SessionService
from tts_uploader.services.uploads import AssetUploadService

_logger = logging.getLogger(__name__)

_DEFAULT_AUDIO_TYPE = "audio/wav"


class Translator(Protocol):
    """Interface for machine translation."""

    async def translate(self, text: str, target_locale: str) -> str:
        """Return ``text`` translated into ``target_locale``."""


class SpeechSynthesizer(Protocol):
    """Interface for text-to-speech inference."""

    async def synthesize(self, text: str, voice: str) -> str:
        """Return a URL where the synthesized audio can be fetched."""

    async def download_audio(self, url: str) -> AudioFile:
        """Download synthesized audio."""


@dataclass(frozen=True)
class TtsResult:
    """Structured result returned to the HTTP layer."""

    success: bool
    status_code: int
    message: str
    stage: PipelineStage
    asset_id: int | None = None
    operation_id: str | None = None
    status_note: str | None = None


@dataclass
class TtsPipelineService:
    """Translates text, synthesizes speech and uploads the audio asset."""

    session_service: SessionService
    translator: Translator
    synthesizer: SpeechSynthesizer
    upload_service: AssetUploadService
    target_locale: str = "ja"
    clock: Callable[[], float] = time.time

    async def run(self, text: str, voice: str) -> TtsResult:
        """Run one request to a terminal result."""
        stage = PipelineStage.AUTHENTICATING
        _logger.info("TTS request stage=%s", stage)
        user_id = await self.session_service.ensure_user_id()
        if user_id is None:
            return _failure(
                stage,
                "Failed to authenticate platform user. Check cookie and server logs.",
            )

        stage = PipelineStage.TRANSLATING
        _logger.info("TTS request stage=%s", stage)
        try:
            translated = await self._translate(text)
        except Exception:
            _logger.exception("Translation failed")
            return _failure(stage, "Translation service error")
        _logger.info("Translated %r to %r", text, translated)

        stage = PipelineStage.SYNTHESIZING
        _logger.info("TTS request stage=%s", stage)
        try:
            audio_url = await self._synthesize(translated, voice)
        except Exception:
            _logger.exception("Speech synthesis failed")
            return _failure(stage, "Speech synthesis service error")
        try:
            audio = await self.synthesizer.download_audio(audio_url)
        except Exception as exc:
            _logger.exception("Audio download failed", extra={"audio_url": audio_url})
            return _failure(stage, f"Failed to download audio from {audio_url}: {exc}")
        if not audio.content:
            return _failure(stage, "Downloaded audio file is empty.")

        stage = PipelineStage.UPLOADING
        _logger.info("TTS request stage=%s", stage)
        request = build_upload_request(audio, text, now=self.clock())
        outcome = await self.upload_service.upload(request)
        if not outcome.success:
            _logger.error(
                "Upload failed: %s (asset_id=%s, operation_id=%s)",
                outcome.error,
                outcome.asset_id,
                outcome.operation_id,
            )
            return TtsResult(
                success=False,
                status_code=500,
                message=outcome.error or "Failed to upload asset.",
                stage=stage,
                asset_id=outcome.asset_id,
                operation_id=outcome.operation_id,
                status_note=outcome.note,
            )

        _logger.info("Processed asset %s (%s)", outcome.asset_id, outcome.note)
        return TtsResult(
            success=True,
            status_code=200,
            message="Successfully processed asset.",
            stage=PipelineStage.COMPLETED,
            asset_id=outcome.asset_id,
            operation_id=outcome.operation_id,
            status_note=outcome.note,
        )

    async def _translate(self, text: str) -> str:
        translated = await self.translator.translate(text, self.target_locale)
        if not translated or not translated.strip():
            raise TranslationError("Translation returned no text")
        return translated.strip()

    async def _synthesize(self, text: str, voice: str) -> str:
        audio_url = await self.synthesizer.synthesize(text, voice)
        if not audio_url:
            raise SynthesisError("Synthesis response missing audio URL")
        return audio_url


def build_upload_request(
    audio: AudioFile, source_text: str, now: float
) -> UploadRequest:
    """Build the upload request for synthesized audio."""
    content_type = audio.content_type or _DEFAULT_AUDIO_TYPE
    filename = f"tts_audio_{int(now * 1000)}{file_extension_for(content_type)}"
    return UploadRequest(
        file_bytes=audio.content,
        filename=filename,
        content_type=content_type,
        display_name=build_display_name(source_text),
    )


def _failure(stage: PipelineStage, message: str) -> TtsResult:
    return TtsResult(success=False, status_code=500, message=message, stage=stage)
