"""Environment-driven configuration.

All settings are read lazily from the environment (``.env`` is loaded by
``main.py`` at start-up) so tests can patch ``os.environ`` per case.

  GOOGLE_API_KEY        — required for discovery; discovery returns [] if missing
  GOOGLE_CSE_ID         — required for discovery; discovery returns [] if missing
  OUTBOUND_USER_AGENT   — optional fixed User-Agent for Reddit requests
  REDDIT_AUTH_MODE      — "anonymous" (default) or "oauth"
  REDDIT_CLIENT_ID      — OAuth mode only
  REDDIT_CLIENT_SECRET  — OAuth mode only
  REDDIT_USER_AGENT     — OAuth mode only (defaults to a descriptive value)
  REDDIT_MAX_RETRIES    — full-walk retries, 1-2 (default 1)
  REDDIT_REQUEST_TIMEOUT — per-request timeout in seconds (default 20)
  LOG_LEVEL             — logging level (default INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import ConfigurationError


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_str(key: str) -> str:
    return os.getenv(key, "").strip()


@dataclass(frozen=True)
class RedditOAuthCredentials:
    client_id: str
    client_secret: str
    user_agent: str


def has_search_credentials() -> bool:
    """Return True if both Google Custom Search variables are set."""
    return bool(_env_str("GOOGLE_API_KEY") and _env_str("GOOGLE_CSE_ID"))


def get_search_credentials() -> Tuple[str, str]:
    """Return ``(api_key, engine_id)``. Raises ConfigurationError if either is missing."""
    key = _env_str("GOOGLE_API_KEY")
    cx = _env_str("GOOGLE_CSE_ID")
    if not key or not cx:
        raise ConfigurationError(
            "GOOGLE_API_KEY and GOOGLE_CSE_ID environment variables must be set "
            "to search for Reddit threads."
        )
    return key, cx


def get_outbound_user_agent() -> Optional[str]:
    """Operator override for the User-Agent header, or None to rotate."""
    return _env_str("OUTBOUND_USER_AGENT") or None


def get_reddit_auth_mode() -> str:
    mode = _env_str("REDDIT_AUTH_MODE").lower()
    return mode if mode in ("anonymous", "oauth") else "anonymous"


def get_reddit_oauth_credentials() -> Optional[RedditOAuthCredentials]:
    """Return OAuth credentials when OAuth mode is fully configured, else None."""
    if get_reddit_auth_mode() != "oauth":
        return None
    client_id = _env_str("REDDIT_CLIENT_ID")
    client_secret = _env_str("REDDIT_CLIENT_SECRET")
    if not client_id or not client_secret:
        return None
    return RedditOAuthCredentials(
        client_id=client_id,
        client_secret=client_secret,
        user_agent=_env_str("REDDIT_USER_AGENT") or "ThreadPulse/1.0 (product sentiment)",
    )


def get_log_level() -> str:
    return (_env_str("LOG_LEVEL") or "INFO").upper()


def get_max_fetch_retries(default: int) -> int:
    """Retries of the full URL-variation walk (clamped to 1-2)."""
    return max(1, min(_env_int("REDDIT_MAX_RETRIES", default), 2))


def get_request_timeout(default: float) -> float:
    return _env_float("REDDIT_REQUEST_TIMEOUT", default)
