"""Application configuration using pydantic-settings."""

import json
from ast import literal_eval
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Deal Discovery"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"
    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    # Deal library backend
    deal_library_base_url: str = "http://localhost:3002"
    deal_library_connect_timeout: float = 10.0

    # Per-branch deadlines (seconds). Branches without one wait indefinitely.
    market_sizing_timeout_seconds: float = 60.0
    audience_insights_timeout_seconds: float = 60.0
    general_search_timeout_seconds: float = 45.0

    # Relevance ranking
    deal_result_limit: int = 6

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("deal_library_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: object) -> object:
        """Store the backend URL without a trailing slash."""
        if not isinstance(value, str):
            return value
        return value.strip().rstrip("/")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: object) -> object:
        """Accept JSON list/string or comma-separated values for CORS_ORIGINS."""
        def normalize(origin: object) -> str:
            cleaned = str(origin).strip().strip("'\"")
            if cleaned.startswith("[") and cleaned.endswith("]"):
                cleaned = cleaned[1:-1].strip().strip("'\"")
            return cleaned

        if isinstance(value, list):
            return [normalize(origin) for origin in value if normalize(origin)]
        if not isinstance(value, str):
            return value

        raw = value.strip()
        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            try:
                parsed = literal_eval(raw)
            except (ValueError, SyntaxError):
                parsed = [normalize(origin) for origin in raw.split(",")]
                return [origin for origin in parsed if origin]

        if isinstance(parsed, str):
            parsed = [parsed]
        if isinstance(parsed, tuple | set):
            parsed = list(parsed)
        if not isinstance(parsed, list):
            raise ValueError(
                "CORS_ORIGINS must be a JSON array, JSON string, or comma-separated string.",
            )
        return [normalize(origin) for origin in parsed if normalize(origin)]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()

    return settings


settings = get_settings()
