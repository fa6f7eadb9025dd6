"""Configuration settings for FairClause application."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # API Keys
    openai_api_key: str = ""

    # Application
    app_env: str = "development"
    debug: bool = True
    app_name: str = "FairClause"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # AI provider
    ai_model: str = "gpt-4o-mini"
    ai_temperature: float = 0.2
    ai_max_output_tokens: int = 4000
    # Bounded: a slow provider must never stall a request indefinitely
    ai_timeout_seconds: float = Field(default=180.0, gt=0, le=600)

    # Prompt truncation budgets (characters of source text)
    quick_truncation_chars: int = Field(default=1000, gt=0)
    full_truncation_chars: int = Field(default=30000, gt=0)
    benchmark_truncation_chars: int = Field(default=12000, gt=0)

    # Ingestion
    max_upload_bytes: int = 16 * 1024 * 1024  # 16MB

    # Request defaults
    default_jurisdiction: str = "India"
    default_role: str = "Consumer"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
