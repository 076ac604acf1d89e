# core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration read from the environment (or a local .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DATABASE_URL: str
    AI_SERVICE_BASE_URL: str
    MAIN_SERVICE_BASE_URL: str

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    # Dispatch loop tick and per-call bound for fetch / AI / main service calls.
    QUEUE_PROCESSING_INTERVAL_MS: int = 5000
    SCRAPER_TIMEOUT_MS: int = 30000
    SCRAPER_USER_AGENT: str = (
        "ChatBot Hub Scraper/1.0 (+https://chatboth.com/scraper-info)"
    )

    # Tests and one-off scripts turn this off to drive the queue by hand.
    DISPATCH_AUTOSTART: bool = True

    @property
    def scraper_timeout_seconds(self) -> float:
        return self.SCRAPER_TIMEOUT_MS / 1000


settings = Settings()
