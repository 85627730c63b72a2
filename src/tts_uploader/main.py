"""Run the TTS uploader API with uvicorn."""

import uvicorn

from tts_uploader.config import Settings


def main() -> None:
    """Start the HTTP server on the configured port."""
    settings = Settings()
    uvicorn.run("tts_uploader.api.asgi:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
