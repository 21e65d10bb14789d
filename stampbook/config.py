"""
Configuration and settings for the prize backend.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api", validation_alias="API_PREFIX")

    # Hosted KV (Upstash / Vercel KV REST API)
    kv_rest_api_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("KV_REST_API_URL", "UPSTASH_REDIS_REST_URL"),
    )
    kv_rest_api_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "KV_REST_API_TOKEN", "UPSTASH_REDIS_REST_TOKEN"
        ),
    )
    kv_timeout_seconds: float = Field(default=10.0, validation_alias="KV_TIMEOUT_SECONDS")

    # Redis
    redis_url: Optional[str] = Field(default=None, validation_alias="REDIS_URL")

    # Key (KV/Redis) holding the serialized collection
    prizes_key: str = Field(default="prizes", validation_alias="PRIZES_KEY")

    # Local file fallback
    data_file: str = Field(
        default="data/prizes.json", validation_alias="PRIZES_DATA_FILE"
    )

    # Serverless platform markers; any of them disables the file fallback.
    vercel: Optional[str] = Field(default=None, validation_alias="VERCEL")
    aws_lambda_function_name: Optional[str] = Field(
        default=None, validation_alias="AWS_LAMBDA_FUNCTION_NAME"
    )
    netlify: Optional[str] = Field(default=None, validation_alias="NETLIFY")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="STAMPBOOK_USE_IN_MEMORY_BACKENDS"
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def kv_configured(self) -> bool:
        return bool(self.kv_rest_api_url and self.kv_rest_api_token)

    @property
    def serverless(self) -> bool:
        return any((self.vercel, self.aws_lambda_function_name, self.netlify))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
