"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from tts_uploader.adapters.asset_platform_client import AssetPlatformClient
from tts_uploader.adapters.cookie_store import CredentialStore
from tts_uploader.config import Settings
from tts_uploader.containers import AppContainer
from tts_uploader.domain.assets import AudioFile, UploadRequest
from tts_uploader.domain.errors import MissingCredentialsError
from tts_uploader.domain.session import SessionContext
from tts_uploader.services.permissions import PermissionGrantor
from tts_uploader.services.pipeline import (
    SpeechSynthesizer,
    Translator,
    TtsPipelineService,
)
from tts_uploader.services.polling import OperationPoller
from tts_uploader.services.session import SessionService
from tts_uploader.services.uploader import AssetUploader
from tts_uploader.services.uploads import AssetUploadService


def operation_payload(
    asset_id: int | None = 123,
    state: str | None = "Approved",
    done: bool = True,
) -> dict[str, object]:
    """Build an operation response as the platform returns it."""
    response: dict[str, object] = {}
    if asset_id is not None:
        response["assetId"] = str(asset_id)
    if state is not None:
        response["moderationResult"] = {"moderationState": state}
    payload: dict[str, object] = {"path": "operations/op-1", "done": done}
    if done:
        payload["response"] = response
    return payload


@dataclass
class RecordingSleep:
    """Sleep replacement that records delays and only yields control."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


@dataclass
class FakeAssetPlatformClient(AssetPlatformClient):
    """Scripted platform client.

    Each result list is consumed in order and its last entry repeats.
    Exception entries are raised instead of returned.
    """

    user_results: list[object] = field(
        default_factory=lambda: [{"id": 42, "name": "tester"}]
    )
    permission_results: list[object] = field(
        default_factory=lambda: [{"data": [{"canManage": True}]}]
    )
    grant_results: list[object] = field(default_factory=lambda: [None])
    create_results: list[object] = field(
        default_factory=lambda: [{"operationId": "op-1"}]
    )
    operation_results: list[object] = field(
        default_factory=lambda: [operation_payload()]
    )
    calls: list[tuple[str, str]] = field(default_factory=list)
    uploads: list[tuple[UploadRequest, int]] = field(default_factory=list)
    grants: list[tuple[int, str]] = field(default_factory=list)

    async def get_authenticated_user(
        self, session: SessionContext
    ) -> dict[str, object]:
        return self._respond("get_authenticated_user", session, self.user_results)

    async def get_universe_permissions(
        self, session: SessionContext, universe_id: str
    ) -> dict[str, object]:
        return self._respond(
            "get_universe_permissions", session, self.permission_results
        )

    async def grant_asset_permission(
        self, session: SessionContext, asset_id: int, universe_id: str
    ) -> None:
        self._respond("grant_asset_permission", session, self.grant_results)
        self.grants.append((asset_id, universe_id))

    async def create_asset(
        self, session: SessionContext, request: UploadRequest, user_id: int
    ) -> dict[str, object]:
        self.uploads.append((request, user_id))
        return self._respond("create_asset", session, self.create_results)

    async def get_operation(
        self, session: SessionContext, operation_id: str
    ) -> dict[str, object]:
        return self._respond("get_operation", session, self.operation_results)

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _respond(
        self, name: str, session: SessionContext, results: list[object]
    ) -> object:
        if not session.has_cookie():
            raise MissingCredentialsError("Platform cookie not available.")
        self.calls.append((name, session.get_csrf()))
        result = results.pop(0) if len(results) > 1 else results[0]
        if isinstance(result, Exception):
            raise result
        return result


@dataclass
class InMemoryCredentialStore(CredentialStore):
    """Credential store returning a fixed cookie."""

    cookie: str | None = "cookie-value"

    def load_cookie(self) -> str | None:
        return self.cookie


@dataclass
class FakeTranslator(Translator):
    """Fake translator returning a fixed translation."""

    result: str = "こんにちは"
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def translate(self, text: str, target_locale: str) -> str:
        self.calls.append((text, target_locale))
        return self.result


@dataclass
class FakeSpeechSynthesizer(SpeechSynthesizer):
    """Fake synthesizer returning static audio."""

    audio_url: str = "http://tts.test/file=out.wav"
    audio: AudioFile = field(
        default_factory=lambda: AudioFile(
            content=b"RIFF-audio", content_type="audio/wav"
        )
    )
    synthesized: list[tuple[str, str]] = field(default_factory=list)

    async def synthesize(self, text: str, voice: str) -> str:
        self.synthesized.append((text, voice))
        return self.audio_url

    async def download_audio(self, url: str) -> AudioFile:
        return self.audio


def make_session(user_id: int | None = 42) -> SessionContext:
    return SessionContext(cookie="cookie-value", user_id=user_id)


def make_upload_service(
    session: SessionContext,
    client: FakeAssetPlatformClient,
    sleep: RecordingSleep,
    *,
    bypass: bool = False,
    universe_id: str | None = None,
) -> AssetUploadService:
    return AssetUploadService(
        uploader=AssetUploader(session=session, client=client, sleep=sleep),
        poller=OperationPoller(session=session, client=client, sleep=sleep),
        grantor=PermissionGrantor(
            session=session,
            client=client,
            universe_id=universe_id,
            enabled=universe_id is not None,
        ),
        bypass_moderation_wait=bypass,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def platform_client() -> FakeAssetPlatformClient:
    return FakeAssetPlatformClient()


@pytest.fixture
def translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def synthesizer() -> FakeSpeechSynthesizer:
    return FakeSpeechSynthesizer()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def container(
    settings: Settings,
    platform_client: FakeAssetPlatformClient,
    translator: FakeTranslator,
    synthesizer: FakeSpeechSynthesizer,
    sleep: RecordingSleep,
) -> AppContainer:
    session = SessionContext(cookie="cookie-value")
    session_service = SessionService(
        session=session,
        client=platform_client,
        credential_store=InMemoryCredentialStore(),
    )
    upload_service = make_upload_service(session, platform_client, sleep)
    pipeline_service = TtsPipelineService(
        session_service=session_service,
        translator=translator,
        synthesizer=synthesizer,
        upload_service=upload_service,
        target_locale=settings.target_locale,
        clock=lambda: 1700000000.0,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session=session,
        session_service=session_service,
        upload_service=upload_service,
        pipeline_service=pipeline_service,
        close_resources=close_resources,
    )
