# careerforge/config.py
# Service settings loaded from the environment and .env.

import logging
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Configuration for the skill-gap chat service."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: str = "*"

    # Primary / judge models
    openai_api_key: Optional[str] = None
    primary_model: str = "gpt-4o-mini"
    primary_temperature: float = 0.7
    judge_model: str = "gpt-4o-mini"
    judge_temperature: float = 0.3

    # Input limits
    max_message_length: int = 50_000
    max_pdf_size_bytes: int = 10 * 1024 * 1024
    pdf_max_pages: int = 50

    # Rate limiting (single process, in memory)
    rate_limit_window_seconds: float = 60.0
    rate_limit_max_requests: int = 30
    rate_limit_max_entries: int = 10_000

    # Opik tracing / evaluation
    opik_api_key: Optional[str] = None
    opik_workspace: str = "careerforgeai"
    opik_project: str = "skill-gap-hackathon"
    evaluation_enabled: bool = False

    # Adzuna job search (optional; mock catalogue otherwise)
    adzuna_app_id: Optional[str] = None
    adzuna_app_key: Optional[str] = None

    @property
    def tracing_enabled(self) -> bool:
        """Tracing and judge evaluation run when Opik is configured or forced on."""
        return bool(self.opik_api_key) or self.evaluation_enabled

    @property
    def adzuna_configured(self) -> bool:
        return bool(self.adzuna_app_id and self.adzuna_app_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def log_settings_summary(settings: Settings) -> None:
    """Log which optional integrations are active (never logs secrets)."""
    if settings.openai_api_key:
        key = settings.openai_api_key
        masked = f"{key[:4]}...{key[-4:]}" if len(key) > 8 else "***"
        logger.info(f"OpenAI API key FOUND (masked: {masked})")
    else:
        logger.warning("OpenAI API key NOT FOUND - /chat will answer 500 until OPENAI_API_KEY is set")
    logger.info(f"Tracing/evaluation: {'ENABLED' if settings.tracing_enabled else 'DISABLED'}")
    logger.info(f"Job source: {'Adzuna + mock fallback' if settings.adzuna_configured else 'mock catalogue'}")
    logger.info(
        f"Rate limit: {settings.rate_limit_max_requests} requests / "
        f"{settings.rate_limit_window_seconds:g}s per client"
    )
