"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "FolioSync"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: Literal["local", "development", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 50
    STATE_KEY_PREFIX: str = "foliosync"

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"
    CELERY_TIMEZONE: str = "UTC"

    # Upstream portfolio pages
    PORTFOLIO_BASE_URL: str = "https://www.investing.com/portfolio/"
    PORTFOLIO_ID_PARAM: str = "portfolioID"
    PORTFOLIO_SESSION_COOKIE: str = ""
    PORTFOLIO_USER_AGENT: str = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )
    FETCH_TIMEOUT_SEC: float = 15.0
    RETRY_BACKOFF_SEC: float = 10.0  # Phase-2 delay before each retried tab

    # User settings defaults (seeded on first run)
    DEFAULT_CACHE_DURATION_MINUTES: int = 10
    DEFAULT_MONITORED_PATHS: list[str] = ["/equities/", "/etfs/"]

    # Scheduler
    SCHEDULER_TICK_SECONDS: float = 60.0
    SCHEDULER_HEARTBEAT_TTL_SECONDS: int = 180

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:4200", "http://localhost:8000"]


# Global settings instance
settings = Settings()
