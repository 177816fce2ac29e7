"""
Settings Configuration

Centralized runtime configuration for the service.
All values are loaded from environment variables (a local .env file is honoured).
"""
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


def get_int_env(key: str, default: int) -> int:
    """Get an integer value from environment variable."""
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return int(value)


def get_list_env(key: str) -> List[str]:
    """Get a comma-separated list from environment variable."""
    return [item.strip() for item in os.getenv(key, "").split(",") if item.strip()]


class Settings:
    """
    Runtime settings for the application.

    To add a new setting:
    1. Add it here as a class attribute
    2. Load it from environment variable
    3. Read it through the shared `settings` instance
    """

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Storage
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./paperdesk.db")
    DB_POOL_SIZE: int = get_int_env("DB_POOL_SIZE", 10)
    DB_MAX_OVERFLOW: int = get_int_env("DB_MAX_OVERFLOW", 20)
    DB_TIMEOUT_SECONDS: int = get_int_env("DB_TIMEOUT_SECONDS", 30)

    # Identity context (tokens are issued by the external login service)
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = get_int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 60)

    # HTTP edge
    ALLOWED_ORIGINS: List[str] = get_list_env("ALLOWED_ORIGINS")
    RATE_LIMIT: str = os.getenv("RATE_LIMIT", "120/minute")
    RATE_LIMIT_ENABLED: bool = get_bool_env("RATE_LIMIT_ENABLED", True)

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == "development"


settings = Settings()
