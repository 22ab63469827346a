"""
Application settings.

Reads configuration from environment variables (and the project's .env file).
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load .env file from project root
project_root = Path(__file__).parent.parent.parent
env_path = project_root / ".env"
load_dotenv(dotenv_path=env_path)


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def with_connect_timeout(database_url: str, seconds: int = 3) -> str:
    """
    Add connect_timeout to PostgreSQL URLs if not already present.
    This prevents hanging when database is unreachable.
    """
    if database_url.startswith("postgresql://") or database_url.startswith("postgres://"):
        if "connect_timeout" not in database_url:
            separator = "&" if "?" in database_url else "?"
            return f"{database_url}{separator}connect_timeout={seconds}"
    return database_url


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the resolver service."""
    database_url: Optional[str]
    yelp_api_key: str = ""
    google_places_api_key: str = ""
    provider_timeout_seconds: float = 10.0
    cache_search_limit: int = 50
    trending_default_limit: int = 20
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        database_url = os.getenv("DATABASE_URL")
        if database_url:
            database_url = with_connect_timeout(database_url)

        return cls(
            database_url=database_url,
            yelp_api_key=os.getenv("YELP_API_KEY", ""),
            google_places_api_key=os.getenv("GOOGLE_PLACES_API_KEY", ""),
            provider_timeout_seconds=_float_env("PROVIDER_TIMEOUT_SECONDS", 10.0),
            cache_search_limit=_int_env("CACHE_SEARCH_LIMIT", 50),
            trending_default_limit=_int_env("TRENDING_DEFAULT_LIMIT", 20),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def require_database_url(self) -> str:
        if not self.database_url:
            raise ValueError("DATABASE_URL environment variable is not set")
        return self.database_url


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
