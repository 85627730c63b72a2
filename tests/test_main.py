"""Tests for main module."""

import uvicorn

from tts_uploader.main import main


def test_main_starts_uvicorn_on_configured_port(monkeypatch) -> None:
    calls: list[tuple[str, dict[str, object]]] = []
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    monkeypatch.setenv("PORT", "8123")
    monkeypatch.setattr(
        uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs))
    )

    main()

    assert calls == [
        ("tts_uploader.api.asgi:app", {"host": "0.0.0.0", "port": 8123})
    ]
