from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

from .errors import ConfigurationError


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - DATABASE_URL: SQLAlchemy URL of the backing store (required)
    - DB_POOL_SIZE: maximum number of pooled connections. Default 10
    - DB_MAX_OVERFLOW: connections allowed beyond DB_POOL_SIZE. Default 0
    - DB_POOL_TIMEOUT: seconds a checkout waits on a saturated pool. Default 30
    - LOG_LEVEL: logging level name. Default 'INFO'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    """

    database_url: str
    pool_size: int
    max_overflow: int
    pool_timeout: float
    log_level: str
    cors_allow_origins: List[str]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(name: str, default: int, minimum: int) -> int:
    raw = _get_env(name, str(default)).strip()
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _parse_timeout(name: str, default: float) -> float:
    raw = _get_env(name, str(default)).strip()
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


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
def get_cors_origins() -> List[str]:
    """Return allowed CORS origins; readable without a DATABASE_URL."""
    return _parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*"))


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """
    Return application settings loaded from environment variables.

    Raises:
        ConfigurationError: DATABASE_URL is missing or a pool value is invalid.
    """
    database_url = (os.getenv("DATABASE_URL") or "").strip()
    if not database_url:
        raise ConfigurationError("DATABASE_URL is not set")

    return Settings(
        database_url=database_url,
        pool_size=_parse_int("DB_POOL_SIZE", 10, minimum=1),
        max_overflow=_parse_int("DB_MAX_OVERFLOW", 0, minimum=0),
        pool_timeout=_parse_timeout("DB_POOL_TIMEOUT", 30.0),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        cors_allow_origins=get_cors_origins(),
    )
