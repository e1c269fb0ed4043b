from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

logger = logging.getLogger(__name__)


def env_int(name: str, default: int) -> int:
    """Read a positive integer setting, keeping ``default`` when unset or invalid."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %d", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class PlacesConfig:
    api_key: str = os.getenv("GOOGLE_PLACES_API_KEY", "")
    search_radius: int = env_int("PLACES_SEARCH_RADIUS", 1500)  # metres
    max_results: int = env_int("RESTAURANT_MAX_RESULTS", 5)
    timeout: float = 10.0
    geocode_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    nearby_search_url: str = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
    photo_url: str = "https://maps.googleapis.com/maps/api/place/photo"
    photo_max_width: int = 400
    enabled: bool = True

    @property
    def live_search(self) -> bool:
        return self.enabled and bool(self.api_key)


DEFAULT_PLACES_CONFIG = PlacesConfig()
