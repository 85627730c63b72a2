"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    target_locale: str = "ja"
    gradio_base_url: str = "http://127.0.0.1:5555"
    gradio_api_name: str = "tts_fn"
    default_voice: str = "JP_Shiroko"
    speech_speed: float = 1.0
    cookie_file_path: str = "cookies.txt"
    users_api_base_url: str = "https://users.roblox.com"
    develop_api_base_url: str = "https://develop.roblox.com"
    apis_base_url: str = "https://apis.roblox.com"
    universe_id: str | None = None
    grant_asset_permissions: bool = False
    bypass_moderation_wait: bool = False
    port: int = 7621
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_universe_id(raw: str | None) -> str | None:
    """Parse the universe id that receives asset permissions."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    if not cleaned.isdigit():
        raise ValueError(f"Universe id must be numeric, got {raw!r}")
    return cleaned
