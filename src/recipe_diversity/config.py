"""
Recipe Diversity - Configuration and settings.

Runtime settings (API keys, model names, request defaults) come from the
environment via pydantic-settings. Scoring weights are NOT settings: they
live as named constants in recipe_diversity.scoring.diversity so that a bad
weight map fails at import time.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the diversity engine, its store and its LLM collaborators."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str
    generation_model: str = "gpt-4.1-mini"
    embedding_model: str = "text-embedding-3-small"

    # Supabase
    supabase_url: str
    supabase_service_role_key: str

    # Application
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Generation request defaults
    default_max_retries: int = 3
    default_similarity_threshold: float = 0.85
    default_temporal_window_days: int = 14
    generation_timeout_seconds: float = 120.0

    # Similarity scan
    use_temporal_decay: bool = False
    decay_factor: float = 0.95

    # Maintenance / analytics
    retention_days: int = 90
    metrics_stale_days: int = 7

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
