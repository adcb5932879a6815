"""Centralized configuration for environment variables and external APIs.

This module is the single source of truth for configuration used across the
application. Import constants from here rather than calling os.getenv directly
in multiple places. The ``require_*`` accessors read the environment at call
time so tests can patch ``os.environ``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

logger = logging.getLogger(__name__)

PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parent

DEFAULT_ROUTES_DIR: Final[Path] = PROJECT_ROOT / "routes_data"
DEFAULT_OSRM_MATCH_URL: Final[str] = "https://router.project-osrm.org/match/v1/driving"
DEFAULT_MAP_MATCH_TIMEOUT_SECONDS: Final[float] = 15.0
DEFAULT_MAP_MATCH_MAX_RETRIES: Final[int] = 1
DEFAULT_ROUTE_CACHE_TTL_SECONDS: Final[float] = 0.0
DEFAULT_CORS_ORIGINS: Final[list[str]] = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]
DEFAULT_PORT: Final[int] = 5000


def _env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using default %s", name, raw, default)
        return default
    if value < minimum:
        logger.warning("%s=%s below minimum %s; using default", name, value, minimum)
        return default
    return value


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using default %s", name, raw, default)
        return default
    if value < minimum:
        logger.warning("%s=%s below minimum %s; using default", name, value, minimum)
        return default
    return value


def require_routes_dir() -> Path:
    """Directory holding stored traces as ``<date>.json`` files."""
    raw = os.getenv("ROUTES_DIR", "").strip()
    return Path(raw) if raw else DEFAULT_ROUTES_DIR


def require_osrm_match_url() -> str:
    """Base URL of the OSRM match service, without a trailing slash."""
    raw = os.getenv("OSRM_MATCH_URL", "").strip()
    return (raw or DEFAULT_OSRM_MATCH_URL).rstrip("/")


def get_map_match_timeout_seconds() -> float:
    return _env_float(
        "MAP_MATCH_TIMEOUT_SECONDS",
        DEFAULT_MAP_MATCH_TIMEOUT_SECONDS,
        minimum=0.1,
    )


def get_map_match_max_retries() -> int:
    return _env_int("MAP_MATCH_MAX_RETRIES", DEFAULT_MAP_MATCH_MAX_RETRIES)


def get_route_cache_ttl_seconds() -> float:
    """TTL for cached pipeline results; 0 disables caching."""
    return _env_float("ROUTE_CACHE_TTL_SECONDS", DEFAULT_ROUTE_CACHE_TTL_SECONDS)


def get_cors_origins() -> list[str]:
    cors_origins_str = os.getenv("CORS_ALLOWED_ORIGINS", "")
    origins = [
        origin.strip() for origin in cors_origins_str.split(",") if origin.strip()
    ]
    return origins or list(DEFAULT_CORS_ORIGINS)


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def get_port() -> int:
    return _env_int("PORT", DEFAULT_PORT, minimum=1)


__all__ = [
    "DEFAULT_CORS_ORIGINS",
    "DEFAULT_OSRM_MATCH_URL",
    "DEFAULT_ROUTES_DIR",
    "PROJECT_ROOT",
    "get_cors_origins",
    "get_log_level",
    "get_map_match_max_retries",
    "get_map_match_timeout_seconds",
    "get_port",
    "get_route_cache_ttl_seconds",
    "require_osrm_match_url",
    "require_routes_dir",
]
