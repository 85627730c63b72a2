"""ASGI entrypoint for the TTS uploader API."""

from tts_uploader.api.app import create_app
from tts_uploader.containers import build_container

app = create_app(build_container())
