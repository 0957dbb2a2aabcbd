"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SearchServiceSettings(BaseModel):
    base_url: AnyHttpUrl = Field(
        default="http://localhost:3001",
        description="Root URL of the search backend.",
    )
    search_path: str = "/api/search"
    relics_path: str = "/relics"
    request_timeout_seconds: int = Field(default=30, ge=1, le=600)

    @field_validator("search_path", "relics_path")
    @classmethod
    def _ensure_leading_slash(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith("/"):
            value = f"/{value}"
        return value

    def endpoint(self, path: str) -> str:
        return f"{str(self.base_url).rstrip('/')}{path}"

    @property
    def search_url(self) -> str:
        return self.endpoint(self.search_path)

    @property
    def relics_url(self) -> str:
        return self.endpoint(self.relics_path)


class RequestLimitSettings(BaseModel):
    max_requests: int = Field(default=5, ge=0)
    interval_seconds: int = Field(default=10, ge=1)


class SearchBotSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RELIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__"
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    telegram_token: SecretStr
    telegram_proxy: str | None = None
    default_language: str = "en"
    admin_telegram_id: int | None = None

    service: SearchServiceSettings = Field(default_factory=SearchServiceSettings)
    request_limit: RequestLimitSettings = Field(default_factory=RequestLimitSettings)

    log_level: str = "INFO"
    enable_markdown_v2: bool = True
    max_chat_views: int = Field(default=1000, ge=1)


@lru_cache
def get_settings() -> SearchBotSettings:
    """Return cached settings instance."""

    return SearchBotSettings()  # type: ignore[call-arg]


__all__ = [
    "RequestLimitSettings",
    "SearchBotSettings",
    "SearchServiceSettings",
    "get_settings",
]
