"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tts_uploader.app_logging import configure_logging
from tts_uploader.containers import AppContainer
from tts_uploader.services.pipeline import TtsResult

ASSET_LIBRARY_URL = "https://www.roblox.com/library/{asset_id}"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        settings = state_container.settings
        if settings.bypass_moderation_wait:
            logger.warning(
                "Moderation wait bypass is enabled; assets under review are "
                "reported as success"
            )
        if settings.grant_asset_permissions:
            logger.info(
                "Asset permissions will be granted to universe %s",
                settings.universe_id,
            )
        try:
            state_container.session_service.load_cookie()
            await state_container.session_service.fetch_authenticated_user_id()
        except Exception:
            logger.exception("Failed to initialize the platform session")
        if state_container.session.get_user_id() is None:
            logger.warning("Authenticated user id not fetched; uploads will fail")
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.api_route("/tts", methods=["GET", "POST"])
    async def tts(
        request: Request, text: str | None = None, char: str | None = None
    ) -> JSONResponse:
        """Translate, synthesize and upload text as an audio asset."""
        state_container: AppContainer = request.app.state.container
        logger.info("Received /tts request: text=%r char=%r", text, char)
        if not text or not text.strip():
            return JSONResponse(
                status_code=400, content={"error": "Missing text parameter"}
            )
        voice = char or state_container.settings.default_voice
        try:
            result = await state_container.pipeline_service.run(text, voice)
        except Exception:
            logger.exception("TTS pipeline crashed")
            return JSONResponse(
                status_code=500, content={"error": "Internal server error"}
            )
        return JSONResponse(
            status_code=result.status_code, content=_result_body(result)
        )

    return app


def _result_body(result: TtsResult) -> dict[str, object]:
    """Render a pipeline result as the JSON response body."""
    if result.success and result.asset_id is not None:
        return {
            "message": result.message,
            "assetUrl": ASSET_LIBRARY_URL.format(asset_id=result.asset_id),
            "assetId": result.asset_id,
            "operationId": result.operation_id,
            "statusNote": result.status_note,
        }
    return {
        "error": result.message,
        "operationId": result.operation_id,
        "assetId": result.asset_id,
        "statusNote": result.status_note,
    }
