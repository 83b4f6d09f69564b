"""
Environment configuration.

Values come from the process environment, with an optional .env file at the
project root loaded first. A missing API key is not fatal: the app warns at
startup and relay calls fail at request time.
"""

import os
import logging
from typing import Optional

from dotenv import load_dotenv

_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
load_dotenv(os.path.join(_PROJECT_ROOT, ".env"))

logger = logging.getLogger(__name__)

# API Configuration
TEXT_SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"
DEFAULT_PAGE_SIZE = 20
MIN_RATING_FILTER = 4.0  # server-side filter, independent of the scoring gate
INCLUDE_SERVICE_AREA_BUSINESSES = True
DEFAULT_PORT = 3000
DEFAULT_MAX_ROWS = 50

# Restricts the upstream payload to what scoring and display need
FIELD_MASK = [
    "places.id",
    "places.displayName",
    "places.rating",
    "places.userRatingCount",
    "places.formattedAddress",
    "places.websiteUri",
    "places.businessStatus",
    "places.reviews.publishTime",
    "nextPageToken",
]

API_KEY_ENV_VARS = ("GOOGLE_MAPS_API_KEY", "GOOGLE_PLACES_API_KEY")


def get_api_key() -> Optional[str]:
    for name in API_KEY_ENV_VARS:
        key = os.getenv(name)
        if key:
            return key
    return None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}; using {default}")
        return default


def get_port() -> int:
    return _int_env("PORT", DEFAULT_PORT)


def get_max_rows() -> int:
    return _int_env("MAX_ROWS_TO_SHOW", DEFAULT_MAX_ROWS)


def get_request_timeout() -> Optional[float]:
    """Outbound timeout in seconds; None (the default) waits indefinitely."""
    raw = os.getenv("PLACES_REQUEST_TIMEOUT")
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric PLACES_REQUEST_TIMEOUT={raw!r}")
        return None
    return value if value > 0 else None


def warn_if_unconfigured() -> bool:
    """Log a warning when no API key is set. Returns True if a key is present."""
    if get_api_key():
        return True
    logger.warning(
        "No API key configured. Set GOOGLE_MAPS_API_KEY in the environment "
        "or .env; searches will fail until it is set."
    )
    return False
