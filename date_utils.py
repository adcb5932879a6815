"""
Centralized date and time utilities for the application.

All timestamps handled by the trace pipeline are timezone-aware datetimes in
UTC. Stored traces carry timestamps either as ISO 8601 strings or as numeric
epoch milliseconds (the format JavaScript clients produce with
``Date.now()``); both are normalised here so the rest of the code only ever
sees ``datetime | None``.
"""

import logging
import math
from datetime import UTC, datetime

from dateutil import parser

logger = logging.getLogger(__name__)


def get_current_utc_time() -> datetime:
    """Return the current time as a timezone-aware datetime object in UTC."""
    return datetime.now(UTC)


def parse_timestamp(ts: str | datetime | int | float | None) -> datetime | None:
    """
    Parse a timestamp and ensure it is timezone-aware, defaulting to UTC.

    Args:
        ts: An ISO 8601 string, a datetime object, or epoch milliseconds.

    Returns:
        A timezone-aware UTC datetime, or None if the value is empty or
        cannot be interpreted.
    """
    if ts is None or ts == "":
        return None

    if isinstance(ts, bool):
        logger.debug("Ignoring boolean timestamp value %r", ts)
        return None

    if isinstance(ts, datetime):
        return ensure_utc(ts)

    if isinstance(ts, int | float):
        if not math.isfinite(ts):
            return None
        try:
            return datetime.fromtimestamp(ts / 1000.0, tz=UTC)
        except (OverflowError, OSError, ValueError) as e:
            logger.warning("Failed to convert epoch timestamp %r: %s", ts, e)
            return None

    if not isinstance(ts, str):
        logger.warning("Unsupported timestamp type '%s'", type(ts).__name__)
        return None

    try:
        return ensure_utc(parser.isoparse(ts))
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning("Failed to parse timestamp '%s': %s", ts, e)
        return None


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Return the datetime as an explicit UTC-aware value."""

    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def format_timestamp(dt: datetime | None) -> str | None:
    """Format a datetime as an ISO 8601 UTC string with a ``Z`` suffix."""
    if dt is None:
        return None
    utc_dt = ensure_utc(dt)
    return utc_dt.isoformat().replace("+00:00", "Z")
