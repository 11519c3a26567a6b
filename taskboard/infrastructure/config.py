"""Configuration utilities for the API client."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:3000/api"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_api_url() -> str:
    """
    Get API base URL.

    Returns:
        TASKBOARD_API_URL, defaults to the local development server
    """
    return os.getenv("TASKBOARD_API_URL") or DEFAULT_API_URL


def get_csrf_token() -> Optional[str]:
    """
    Get CSRF token sent with mutating requests.

    Returns:
        TASKBOARD_CSRF_TOKEN, or None when unset or blank
    """
    token = os.getenv("TASKBOARD_CSRF_TOKEN", "").strip()
    return token or None


def get_log_level() -> str:
    """Log level name from TASKBOARD_LOG_LEVEL, defaults to INFO."""
    return os.getenv("TASKBOARD_LOG_LEVEL", "INFO").strip().upper() or "INFO"


@dataclass(frozen=True)
class ApiSettings:
    """Client settings. Durations in seconds."""

    base_url: str = DEFAULT_API_URL
    timeout: float = 10.0
    health_timeout: float = 5.0
    retry_attempts: int = 3
    retry_delay: float = 1.0
    cache_ttl: float = 300.0
    csrf_token: Optional[str] = None
    log_level: str = "INFO"


def load_settings(env_file: Optional[Union[str, Path]] = None) -> ApiSettings:
    """
    Build settings from environment variables.

    Args:
        env_file: Optional .env file loaded first; existing environment
            variables take precedence over its values

    Returns:
        ApiSettings with invalid numeric values replaced by defaults
    """
    if env_file is not None and Path(env_file).exists():
        load_dotenv(env_file)

    defaults = ApiSettings()
    return ApiSettings(
        base_url=get_api_url(),
        timeout=_env_float("TASKBOARD_API_TIMEOUT", defaults.timeout),
        health_timeout=_env_float("TASKBOARD_HEALTH_TIMEOUT", defaults.health_timeout),
        retry_attempts=max(1, _env_int("TASKBOARD_RETRY_ATTEMPTS", defaults.retry_attempts)),
        retry_delay=_env_float("TASKBOARD_RETRY_DELAY", defaults.retry_delay),
        cache_ttl=_env_float("TASKBOARD_CACHE_TTL", defaults.cache_ttl),
        csrf_token=get_csrf_token(),
        log_level=get_log_level(),
    )
