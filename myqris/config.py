"""Application configuration utilities."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(default=True, description="Enable JSON formatted logs")


class RenderConfig(BaseModel):
    box_size: int = Field(default=10, ge=1, le=50, description="Pixels per QR module")
    border: int = Field(default=4, ge=0, le=20, description="Quiet zone width in modules")
    error_correction: Literal["L", "M", "Q", "H"] = Field(default="M")


class Settings(BaseSettings):
    """Central application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="myqris")
    environment: Literal["development", "staging", "production"] = Field(default="development")
    api_key: str = Field(default="dev-secret-key", validation_alias=AliasChoices("MYQRIS_API_KEY", "API_KEY"))
    image_fetch_timeout: float = Field(default=10.0, gt=0, le=120)
    max_image_bytes: int = Field(default=5 * 1024 * 1024, ge=1024)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return memoized application settings."""

    return Settings()


settings = get_settings()
