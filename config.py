"""
Configuration management for the Framing Routine backend.

Centralizes all configuration using Pydantic settings with environment variable support.
"""

from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8000,
        description="API server port"
    )

    # LLM Configuration (tone and translation passes only)
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key (required when an LLM pass is enabled with provider=openai)"
    )
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key (required when an LLM pass is enabled with provider=anthropic)"
    )
    llm_provider: Literal["openai", "anthropic"] = Field(
        default="openai",
        description="Provider for the tone and translation passes"
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="Model id for the tone and translation passes"
    )
    llm_timeout_seconds: float = Field(
        default=8.0,
        gt=0,
        description="Per-call budget for an LLM pass before falling back"
    )

    # Routine behaviour
    tone_pass_enabled: bool = Field(
        default=False,
        description="Let the LLM rephrase each question"
    )
    translation_enabled: bool = Field(
        default=True,
        description="Translate questions once a non-English language is locked"
    )
    max_reply_chars: int = Field(
        default=420,
        ge=40,
        description="Hard cap on reply length"
    )
    transcript_max_entries: int = Field(
        default=200,
        ge=2,
        description="Transcript entries kept in the state document"
    )
    language_switch_min_chars: int = Field(
        default=12,
        ge=1,
        description="Shortest message that may trigger the language-switch check"
    )
    default_language: str = Field(
        default="en",
        description="Language code a session starts in"
    )

    # Application Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def llm_enabled(self) -> bool:
        return self.tone_pass_enabled or self.translation_enabled


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    Returns:
        Settings: Application settings
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None


def validate_required_settings():
    """
    Validate that required settings are present at runtime.

    An API key is only required for the provider in use, and only when an
    LLM pass is enabled; the routine itself needs no credentials.
    Raises ValueError if a required setting is missing.
    """
    settings = get_settings()

    if settings.llm_enabled:
        key = settings.anthropic_api_key if settings.llm_provider == "anthropic" else settings.openai_api_key
        if not key:
            raise ValueError(
                f"{settings.llm_provider.upper()}_API_KEY environment variable is required when "
                "TONE_PASS_ENABLED or TRANSLATION_ENABLED is set. "
                "Disable both passes or configure the key in your environment."
            )

    return True
