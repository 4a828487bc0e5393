"""
Configuration — GitHub PR Review

All settings come from environment variables. A .env file in the working
directory is loaded first (python-dotenv), without overriding variables
that are already set.

    GITHUB_TOKEN        required, token used for every API call
    GITHUB_API_URL      REST base URL (default https://api.github.com)
    GITHUB_MAX_RETRIES  rate-limit retries per request (default 3)
    GITHUB_TIMEOUT      per-request timeout in seconds (default 30)
    LOG_LEVEL           logging level name (default INFO)
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv


DEFAULT_API_URL = "https://api.github.com"
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT = 30
DEFAULT_LOG_LEVEL = "INFO"


class ConfigurationError(Exception):
    """Raised when a required setting is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    github_token: str
    api_url: str = DEFAULT_API_URL
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout: int = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read Settings from the environment.

    Args:
        environ: Mapping to read instead of os.environ. When given, no .env
                 file is loaded (used by tests).

    Raises:
        ConfigurationError: GITHUB_TOKEN is missing, or a numeric setting
                            is not a non-negative integer.
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    token = environ.get("GITHUB_TOKEN", "").strip()
    if not token:
        raise ConfigurationError("GITHUB_TOKEN environment variable is required")

    return Settings(
        github_token=token,
        api_url=environ.get("GITHUB_API_URL", DEFAULT_API_URL).rstrip("/") or DEFAULT_API_URL,
        max_retries=_read_int(environ, "GITHUB_MAX_RETRIES", DEFAULT_MAX_RETRIES),
        timeout=_read_int(environ, "GITHUB_TIMEOUT", DEFAULT_TIMEOUT),
        log_level=environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL,
    )


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}")
    return value
