"""Global constants for the core package.

This module contains shared constants used across the trace cleaning service.
"""

from typing import Final

# HTTP Client Constants
HTTP_CONNECTION_LIMIT: Final[int] = 10
HTTP_TIMEOUT_CONNECT: Final[float] = 5.0
HTTP_TIMEOUT_SOCK_READ: Final[float] = 20.0
HTTP_TIMEOUT_TOTAL: Final[float] = 30.0
HTTP_USER_AGENT: Final[str] = "GpsTraceCleaner/1.0"

# Geodesy
EARTH_RADIUS_M: Final[float] = 6_371_000.0

# Noise filtering
DEFAULT_MAX_SPEED_KMH: Final[float] = 200.0
# Elapsed time assumed when a timestamp is missing or the delta is not positive.
FALLBACK_ELAPSED_SECONDS: Final[float] = 1.0

# Smoothing
DEFAULT_SMOOTHING_FACTOR: Final[float] = 0.3

# Map matching (OSRM match service limits)
MAP_MATCH_MAX_POINTS: Final[int] = 100
MAP_MATCH_RADIUS_M: Final[int] = 50
