from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing or unusable."""


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - DATABASE_URL: PostgreSQL connection string (required to serve requests)
    - DB_POOL_MIN_SIZE: minimum pooled connections. Default 1
    - DB_POOL_MAX_SIZE: maximum pooled connections. Default 10
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level. Default 'INFO'
    - API_HOST / API_PORT: bind address used by the `todo-api` runner
    """

    database_url: Optional[str]
    db_pool_min_size: int
    db_pool_max_size: int
    cors_allow_origins: List[str]
    log_level: str
    api_host: str
    api_port: int

    def require_database_url(self) -> str:
        """Return DATABASE_URL or raise ConfigurationError when it is not set."""
        if not self.database_url:
            raise ConfigurationError(
                "DATABASE_URL is not set. Add it to your environment or .env file."
            )
        return self.database_url


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int, minimum: int = 0) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return max(parsed, minimum)


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    database_url = os.getenv("DATABASE_URL", "").strip() or None

    min_size = _parse_int(_get_env("DB_POOL_MIN_SIZE", "1"), 1, minimum=1)
    max_size = _parse_int(_get_env("DB_POOL_MAX_SIZE", "10"), 10, minimum=1)

    return Settings(
        database_url=database_url,
        db_pool_min_size=min_size,
        db_pool_max_size=max(max_size, min_size),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        api_host=_get_env("API_HOST", "0.0.0.0").strip(),
        api_port=_parse_int(_get_env("API_PORT", "8000"), 8000, minimum=1),
    )
