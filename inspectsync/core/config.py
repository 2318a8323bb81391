"""Configuration settings using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Remote inspection server
    api_base_url: str = "http://crm.professionalhomeinspection.net/api"
    api_username: str
    api_password: str

    # Timeouts
    request_timeout_seconds: float = 10.0
    bootstrap_timeout_seconds: float = 30.0

    environment: Literal["development", "production"] = "development"

    @field_validator("api_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, v):
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator("request_timeout_seconds", "bootstrap_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be greater than zero")
        return v

    @model_validator(mode="after")
    def _validate_production_settings(self) -> Settings:
        if self.environment != "production":
            return self

        if not self.api_base_url.startswith("https://"):
            raise ValueError("API_BASE_URL must use https in production")

        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
