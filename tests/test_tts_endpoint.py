"""Tests for the /tts endpoint."""

from fastapi.testclient import TestClient

from tts_uploader.api.app import create_app
from tests.conftest import (
    FakeAssetPlatformClient,
    FakeSpeechSynthesizer,
    FakeTranslator,
    RecordingSleep,
    operation_payload,
)


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_tts_approved_returns_asset(
    container,
    platform_client: FakeAssetPlatformClient,
    translator: FakeTranslator,
    synthesizer: FakeSpeechSynthesizer,
) -> None:
    platform_client.operation_results = [
        operation_payload(asset_id=123, state="Approved")
    ]
    client = TestClient(create_app(container))

    response = client.get("/tts", params={"text": "Hello"})

    assert response.status_code == 200
    data = response.json()
    assert data["assetId"] == 123
    assert data["statusNote"] == "Approved"
    assert data["operationId"] == "op-1"
    assert data["assetUrl"] == "https://www.roblox.com/library/123"
    assert translator.calls == [("Hello", "ja")]
    assert synthesizer.synthesized == [("こんにちは", "JP_Shiroko")]
    request, user_id = platform_client.uploads[0]
    assert user_id == 42
    assert request.display_name == "Hello"
    assert request.filename == "tts_audio_1700000000000.wav"


def test_tts_rejected_returns_error_with_asset(
    container, platform_client: FakeAssetPlatformClient
) -> None:
    platform_client.operation_results = [
        operation_payload(asset_id=123, state="Rejected")
    ]
    client = TestClient(create_app(container))

    response = client.post("/tts", params={"text": "Hello"})

    assert response.status_code == 500
    data = response.json()
    assert data["assetId"] == 123
    assert data["statusNote"] == "Asset Rejected."
    assert data["error"] == "Asset Rejected"


def test_tts_completion_timeout_has_no_asset(
    container, platform_client: FakeAssetPlatformClient, sleep: RecordingSleep
) -> None:
    platform_client.operation_results = [operation_payload(done=False)]
    client = TestClient(create_app(container))

    response = client.get("/tts", params={"text": "Hello"})

    assert response.status_code == 500
    data = response.json()
    assert data["assetId"] is None
    assert data["operationId"] == "op-1"
    assert data["error"] == "Could not obtain asset id from platform operation."
    assert sleep.delays == [2] * 24


def test_tts_empty_translation_stops_pipeline(
    container,
    platform_client: FakeAssetPlatformClient,
    translator: FakeTranslator,
    synthesizer: FakeSpeechSynthesizer,
) -> None:
    translator.result = ""
    client = TestClient(create_app(container))

    response = client.get("/tts", params={"text": "Hello"})

    assert response.status_code == 500
    assert response.json()["error"] == "Translation service error"
    assert synthesizer.synthesized == []
    assert "create_asset" not in platform_client.call_names()


def test_tts_missing_audio_url_is_synthesis_error(
    container,
    platform_client: FakeAssetPlatformClient,
    synthesizer: FakeSpeechSynthesizer,
) -> None:
    synthesizer.audio_url = ""
    client = TestClient(create_app(container))

    response = client.get("/tts", params={"text": "Hello"})

    assert response.status_code == 500
    assert response.json()["error"] == "Speech synthesis service error"
    assert platform_client.uploads == []


def test_tts_requires_text(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/tts")

    assert response.status_code == 400
    assert "error" in response.json()


def test_tts_uses_requested_voice(
    container, synthesizer: FakeSpeechSynthesizer
) -> None:
    client = TestClient(create_app(container))

    client.get("/tts", params={"text": "Hello", "char": "JP_Hoshino"})

    assert synthesizer.synthesized[0][1] == "JP_Hoshino"


def test_tts_fails_when_user_cannot_be_authenticated(
    container, platform_client: FakeAssetPlatformClient
) -> None:
    platform_client.user_results = [{"name": "no id"}]
    client = TestClient(create_app(container))

    response = client.get("/tts", params={"text": "Hello"})

    assert response.status_code == 500
    assert "authenticate" in response.json()["error"]
    assert platform_client.uploads == []


def test_startup_loads_cookie_and_user(container) -> None:
    container.session.set_cookie("")
    app = create_app(container)

    with TestClient(app) as client:
        client.get("/health")

    assert container.session.get_cookie() == "cookie-value"
    assert container.session.get_user_id() == 42


def test_tts_non_numeric_user_id_is_authentication_failure(
    container, platform_client: FakeAssetPlatformClient
) -> None:
    platform_client.user_results = [{"id": "abc"}]
    client = TestClient(create_app(container))

    response = client.get("/tts", params={"text": "Hello"})

    assert response.status_code == 500
    assert response.json()["error"] == (
        "Failed to authenticate platform user. Check cookie and server logs."
    )
    assert platform_client.uploads == []
