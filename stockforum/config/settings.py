# stockforum/config/settings.py

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "development"
    DATABASE_URL: str  # will be read from .env or environment variable
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Bearer tokens are issued elsewhere, we only decode them
    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    TWELVE_DATA_API_KEY: Optional[str] = None
    TWELVE_DATA_BASE_URL: str = "https://api.twelvedata.com"
    QUOTE_TIMEOUT_SECONDS: float = 15.0

    # Twelve Data free tier: 8 requests per minute, 800 per day
    IMPORT_BATCH_SIZE: int = 8
    IMPORT_BATCH_DELAY_SECONDS: float = 60.0
    RATE_LIMIT_BACKOFF_SECONDS: float = 60.0
    REQUESTS_PER_DAY: int = 800

    # 0 disables the background price refresher
    PRICE_REFRESH_INTERVAL_SECONDS: int = 0


settings = Settings()
