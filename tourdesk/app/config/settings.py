"""Application configuration models and utilities."""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    api_base_url: HttpUrl = Field(
        default="http://localhost:8000", alias="TOURDESK_API_BASE_URL"
    )
    access_token: Optional[str] = Field(default=None, alias="TOURDESK_ACCESS_TOKEN")
    token_file: Optional[Path] = Field(default=None, alias="TOURDESK_TOKEN_FILE")
    use_mock_data: bool = Field(default=False, alias="USE_MOCK_DATA")
    app_name: str = Field(default="Tourdesk Admin Backend", alias="APP_NAME")
    timezone: str = Field(default="UTC", alias="TOURDESK_TIMEZONE")
    price_debounce_seconds: float = Field(
        default=0.3, ge=0, alias="PRICE_DEBOUNCE_SECONDS"
    )
    fence_stale_responses: bool = Field(default=True, alias="FENCE_STALE_RESPONSES")
    method_override: bool = Field(default=True, alias="METHOD_OVERRIDE")
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    model_config = SettingsConfigDict(
        env_file=(".env.local", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached app settings instance."""
    return Settings()
