"""Application configuration management."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # Redis (empty disables response caching)
    REDIS_URL: str = ""
    CACHE_TTL_SECONDS: int = 300

    # Auth tokens are issued by the hosted auth provider, only verified here
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    # ScrapeCreators
    SCRAPECREATORS_API_KEY: str = ""
    SCRAPECREATORS_BASE_URL: str = "https://api.scrapecreators.com"

    # Apify
    APIFY_API_TOKEN: str = ""
    APIFY_BASE_URL: str = "https://api.apify.com/v2"
    APIFY_INSTAGRAM_ACTOR: str = "apify~instagram-scraper"
    APIFY_POLL_INTERVAL_SECONDS: float = 5
    APIFY_MAX_WAIT_SECONDS: float = 120
    INSTAGRAM_RESULTS_LIMIT: int = 200

    PROVIDER_REQUEST_TIMEOUT_SECONDS: int = 30

    # APScheduler
    SCHEDULER_ENABLED: bool = True
    SYNC_INTERVAL_HOURS: int = 6
    SCHEDULER_EXECUTORS_DEFAULT_MAX_WORKERS: int = 10
    SCHEDULER_JOB_DEFAULTS_COALESCE: bool = True
    SCHEDULER_JOB_DEFAULTS_MAX_INSTANCES: int = 1

    # Delay between accounts in a manual Instagram batch sync
    BATCH_SYNC_DELAY_SECONDS: float = 0.4

    # Error tracking
    SENTRY_DSN: str = ""

    # Application
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True
    )

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS comma-separated string into list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


# Global settings instance
settings = Settings()
