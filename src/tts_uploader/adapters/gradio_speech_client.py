"""Gradio text-to-speech client."""

import json
from dataclasses import dataclass

import httpx

from tts_uploader.domain.assets import AudioFile
from tts_uploader.domain.errors import SynthesisError
from tts_uploader.services.pipeline import SpeechSynthesizer


@dataclass
class HttpxGradioSpeechClient(SpeechSynthesizer):
    """Speech synthesizer calling a Gradio app through its HTTP API."""

    base_url: str
    api_name: str
    http_client: httpx.AsyncClient
    speed: float = 1.0

    @classmethod
    def create(
        cls, base_url: str, api_name: str, speed: float = 1.0
    ) -> "HttpxGradioSpeechClient":
        """Create a Gradio client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            api_name=api_name.strip("/"),
            http_client=httpx.AsyncClient(),
            speed=speed,
        )

    async def synthesize(self, text: str, voice: str) -> str:
        """Queue a prediction and return the URL of the generated audio."""
        call_url = f"{self.base_url}/gradio_api/call/{self.api_name}"
        response = await self.http_client.post(
            call_url, json={"data": [text, voice, self.speed]}, timeout=15
        )
        response.raise_for_status()
        event_id = response.json().get("event_id")
        if not event_id:
            raise SynthesisError("Gradio did not return an event id")

        result = await self.http_client.get(f"{call_url}/{event_id}", timeout=120)
        result.raise_for_status()
        outputs = _parse_event_stream(result.text)
        return self._audio_url(outputs)

    async def download_audio(self, url: str) -> AudioFile:
        """Download the generated audio file."""
        response = await self.http_client.get(url, timeout=30)
        response.raise_for_status()
        content_type = response.headers.get("content-type", "audio/wav")
        return AudioFile(content=response.content, content_type=content_type)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _audio_url(self, outputs: list[object]) -> str:
        """Return the audio URL from the (message, audio) output pair."""
        if len(outputs) < 2 or not isinstance(outputs[1], dict):
            raise SynthesisError("Gradio response missing audio output")
        audio = outputs[1]
        url = audio.get("url")
        if url:
            return str(url)
        path = audio.get("path")
        if path:
            return f"{self.base_url}/gradio_api/file={path}"
        raise SynthesisError("Gradio response missing audio URL")


def _parse_event_stream(body: str) -> list[object]:
    """Extract the output list from a Gradio server-sent event stream."""
    event: str | None = None
    for line in body.splitlines():
        if line.startswith("event:"):
            event = line.removeprefix("event:").strip()
            continue
        if not line.startswith("data:"):
            continue
        data = line.removeprefix("data:").strip()
        if event == "error":
            raise SynthesisError(f"Gradio prediction failed: {data}")
        if event == "complete":
            outputs = json.loads(data)
            if not isinstance(outputs, list):
                raise SynthesisError("Gradio completion payload is not a list")
            return outputs
    raise SynthesisError("Gradio stream ended without a result")
