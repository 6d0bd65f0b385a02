"""Application configuration using Pydantic Settings."""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import DEFAULT_LANGUAGE, DEFAULT_TITLE

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI configuration (alt text generation)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_base_url: Optional[str] = None
    openai_timeout_seconds: float = 60.0
    openai_max_tokens: int = 300
    caption_enabled: bool = True

    # Cover defaults used when neither the request nor the source provides a value
    default_title: str = DEFAULT_TITLE
    default_language: str = DEFAULT_LANGUAGE

    # Server
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT

    # File handling
    max_file_size_mb: int = 50

    # Logging
    log_level: str = "INFO"

    @field_validator("port", mode="before")
    @classmethod
    def _fallback_port(cls, value):
        """Fall back to the default port when PORT is not an integer."""
        if value is None or value == "":
            return DEFAULT_PORT
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid PORT value {value!r}, using default: {DEFAULT_PORT}")
            return DEFAULT_PORT

    @property
    def max_file_size_bytes(self) -> int:
        """Return max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def captioning_available(self) -> bool:
        """Whether alt text can be requested from the vision model."""
        return self.caption_enabled and bool(self.openai_api_key.strip())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
