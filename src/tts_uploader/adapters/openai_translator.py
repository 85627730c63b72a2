"""OpenAI Responses API client for translation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from tts_uploader.domain.errors import TranslationError
from tts_uploader.services.pipeline import Translator

_PROMPT = (
    "Translate the user's text into the language with locale code {locale}. "
    "Reply with the translation only, without quotes or commentary."
)


@dataclass
class OpenAITranslator(Translator):
    """Translator backed by OpenAI Responses API."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(cls, api_key: str, model: str) -> "OpenAITranslator":
        """Create an OpenAI translator."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model)

    async def translate(self, text: str, target_locale: str) -> str:
        """Translate text with a single model call."""
        response = await self.client.responses.create(
            model=self.model,
            instructions=_PROMPT.format(locale=target_locale),
            input=text,
        )
        output_text = response.output_text
        if not output_text:
            raise TranslationError("OpenAI returned an empty translation")
        return output_text.strip()

    async def close(self) -> None:
        """Close the underlying OpenAI client."""
        await self.client.close()
