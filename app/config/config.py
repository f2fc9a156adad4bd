import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "Zap Shift"
    DEBUG: bool = False
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    TEST: bool = False
    PORT: int = 3000

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./zap_shift.db"

    # Database connection settings
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    DB_MAX_RETRIES: int = 3
    DB_RETRY_DELAY: int = 1

    # Stripe
    STRIPE_SECRET_KEY: str | None = os.getenv("STRIP_KEY")
    STRIPE_API_BASE: str = "https://api.stripe.com/v1"
    CHECKOUT_CURRENCY: str = "usd"

    # Public site, used for checkout redirects
    SITE_DOMAIN: str = "http://localhost:5173"

    # Firebase
    FIREBASE_SERVICE_ACCOUNT_FILE: str | None = None
    FIREBASE_SERVICE_ACCOUNT_JSON: str | None = None

    TRACKING_ID_PREFIX: str = "PRCL"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # LOGFIRE / SENTRY
    LOGFIRE_TOKEN: str | None = None
    SENTRY_DSN: str | None = None

    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]


settings = Settings()
