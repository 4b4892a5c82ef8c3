"""
Settings

Centralized runtime configuration for the backend.
All settings are loaded from environment variables (and .env, if present).
"""
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

load_dotenv(dotenv_path=ENV_FILE)


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


def get_int_env(key: str, default: int) -> int:
    """Get an integer value from environment variable, falling back on garbage."""
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_list_env(key: str) -> List[str]:
    """Comma-separated environment variable as a list of non-empty items."""
    return [item.strip() for item in os.getenv(key, "").split(",") if item.strip()]


class Settings:
    """
    Application settings.

    To add a new setting:
    1. Add it here as a class attribute
    2. Load it from environment variable
    3. Read it through the shared `settings` instance
    """

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./hackhub.db")
    DATABASE_ECHO: bool = get_bool_env("DATABASE_ECHO", False)

    # Auth (tokens are issued by the external identity provider)
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_AUDIENCE: Optional[str] = os.getenv("JWT_AUDIENCE") or None

    # Rate limiting
    REDIS_URL: Optional[str] = os.getenv("REDIS_URL") or None
    REGISTRATION_RATE_LIMIT: int = get_int_env("REGISTRATION_RATE_LIMIT", 5)
    REGISTRATION_RATE_WINDOW_SECONDS: int = get_int_env("REGISTRATION_RATE_WINDOW_SECONDS", 3600)
    API_RATE_LIMIT: str = os.getenv("API_RATE_LIMIT", "200/minute")

    # Notifications
    NOTIFICATION_WEBHOOK_URL: Optional[str] = os.getenv("NOTIFICATION_WEBHOOK_URL") or None
    NOTIFICATION_TIMEOUT_SECONDS: int = get_int_env("NOTIFICATION_TIMEOUT_SECONDS", 5)

    # Leaderboard: "competition" (1,1,3) or "dense" (1,1,2)
    LEADERBOARD_RANKING_SCHEME: str = os.getenv("LEADERBOARD_RANKING_SCHEME", "competition").lower()

    # CORS
    ALLOWED_ORIGINS: List[str] = get_list_env("ALLOWED_ORIGINS")

    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


settings = Settings()
