"""Environment-driven settings."""

import os
from typing import Callable, TypeVar

from .errors import ConfigurationError, MissingCredentialError

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TIMEOUT_SECONDS = 120.0
DEFAULT_LIVE_DELAY_MS = 1500

N = TypeVar("N", int, float)


def get_api_key() -> str:
    """Return the Gemini API key.

    Raises:
        MissingCredentialError: If neither GEMINI_API_KEY nor API_KEY is set.
    """
    key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
    if not key:
        raise MissingCredentialError("GEMINI_API_KEY environment variable not set")
    return key


def get_model_name() -> str:
    return os.environ.get("SCRIPT_ANALYZER_MODEL") or DEFAULT_MODEL


def get_request_timeout() -> float:
    """Return the per-request timeout in seconds handed to the model transport."""
    return _env_number("SCRIPT_ANALYZER_TIMEOUT", DEFAULT_TIMEOUT_SECONDS, float)


def get_live_delay_ms() -> int:
    """Return the quiet period before a live re-analysis fires."""
    return _env_number("SCRIPT_ANALYZER_LIVE_DELAY_MS", DEFAULT_LIVE_DELAY_MS, int)


def _env_number(name: str, default: N, cast: Callable[[str], N]) -> N:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {raw!r}")
    return value
