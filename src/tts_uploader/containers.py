"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from tts_uploader.adapters.asset_platform_client import HttpxAssetPlatformClient
from tts_uploader.adapters.cookie_store import FileCookieStore
from tts_uploader.adapters.gradio_speech_client import HttpxGradioSpeechClient
from tts_uploader.adapters.openai_translator import OpenAITranslator
from tts_uploader.config import Settings, parse_universe_id
from tts_uploader.domain.session import SessionContext
from tts_uploader.services.permissions import PermissionGrantor
from tts_uploader.services.pipeline import TtsPipelineService
from tts_uploader.services.polling import OperationPoller
from tts_uploader.services.session import SessionService
from tts_uploader.services.uploader import AssetUploader
from tts_uploader.services.uploads import AssetUploadService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session: SessionContext
    session_service: SessionService
    upload_service: AssetUploadService
    pipeline_service: TtsPipelineService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    session = SessionContext()
    platform_client = HttpxAssetPlatformClient.create(
        users_base_url=resolved_settings.users_api_base_url,
        develop_base_url=resolved_settings.develop_api_base_url,
        apis_base_url=resolved_settings.apis_base_url,
    )
    session_service = SessionService(
        session=session,
        client=platform_client,
        credential_store=FileCookieStore(Path(resolved_settings.cookie_file_path)),
    )
    upload_service = AssetUploadService(
        uploader=AssetUploader(session=session, client=platform_client),
        poller=OperationPoller(session=session, client=platform_client),
        grantor=PermissionGrantor(
            session=session,
            client=platform_client,
            universe_id=parse_universe_id(resolved_settings.universe_id),
            enabled=resolved_settings.grant_asset_permissions,
        ),
        bypass_moderation_wait=resolved_settings.bypass_moderation_wait,
    )
    translator = OpenAITranslator.create(
        api_key=resolved_settings.openai_api_key,
        model=resolved_settings.openai_model,
    )
    speech_client = HttpxGradioSpeechClient.create(
        base_url=resolved_settings.gradio_base_url,
        api_name=resolved_settings.gradio_api_name,
        speed=resolved_settings.speech_speed,
    )
    pipeline_service = TtsPipelineService(
        session_service=session_service,
        translator=translator,
        synthesizer=speech_client,
        upload_service=upload_service,
        target_locale=resolved_settings.target_locale,
    )

    async def close_resources() -> None:
        await platform_client.close()
        await speech_client.close()
        await translator.close()

    return AppContainer(
        settings=resolved_settings,
        session=session,
        session_service=session_service,
        upload_service=upload_service,
        pipeline_service=pipeline_service,
        close_resources=close_resources,
    )
