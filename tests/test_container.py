"""Tests for container wiring."""

import asyncio

from tts_uploader.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.pipeline_service is not None
    assert container.upload_service.uploader.session is container.session
    assert container.upload_service.grantor.is_active is False
    asyncio.run(container.close_resources())
