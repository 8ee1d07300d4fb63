# tourney_api/config.py
from __future__ import annotations

import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


# -------------------------
# Match format defaults
# -------------------------
# Format label stored on a tournament; "100 Balls" selects the ball-count regime.
DEFAULT_OVERS_PER_MATCH: str = _get_env("DEFAULT_OVERS_PER_MATCH", "20")

# Used only when a tournament record carries no points configuration at all
DEFAULT_POINTS_FOR_WIN: int = _get_env_int("DEFAULT_POINTS_FOR_WIN", 2)
DEFAULT_POINTS_FOR_DRAW: int = _get_env_int("DEFAULT_POINTS_FOR_DRAW", 1)
DEFAULT_POINTS_FOR_LOSS: int = _get_env_int("DEFAULT_POINTS_FOR_LOSS", 0)


# -------------------------
# Service config
# -------------------------
STANDINGS_CACHE_TTL_SECONDS: int = _get_env_int("STANDINGS_CACHE_TTL_SECONDS", 60)
STANDINGS_CACHE_MAX_ENTRIES: int = _get_env_int("STANDINGS_CACHE_MAX_ENTRIES", 256)

LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS: list[str] = [
    o.strip()
    for o in _get_env("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
    if o.strip()
]


def validate_config() -> None:
    if not DEFAULT_OVERS_PER_MATCH:
        raise RuntimeError("DEFAULT_OVERS_PER_MATCH must not be empty")

    if STANDINGS_CACHE_TTL_SECONDS < 0:
        raise RuntimeError("STANDINGS_CACHE_TTL_SECONDS must be zero (disabled) or positive")

    if STANDINGS_CACHE_MAX_ENTRIES <= 0:
        raise RuntimeError("STANDINGS_CACHE_MAX_ENTRIES must be positive")

    if LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise RuntimeError(f"LOG_LEVEL must be a standard logging level, got {LOG_LEVEL!r}")
