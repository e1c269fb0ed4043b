from __future__ import annotations

import logging

from ..recommendations.models import Restaurant
from .catalog import catalog_restaurants
from .categories import build_search_keywords, infer_categories
from .config import DEFAULT_PLACES_CONFIG, PlacesConfig
from .places_client import search_nearby

logger = logging.getLogger(__name__)


def select_restaurants(
    location: str,
    assessment_text: str,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> list[Restaurant]:
    """
    Pick restaurants near ``location`` suited to the advisory text.

    Uses the live places search when a key is configured, otherwise the
    local catalog. Any live-search failure switches this request to the
    catalog.
    """
    categories = infer_categories(assessment_text)
    logger.debug("Inferred dietary categories: %s", [c.value for c in categories])

    if config.live_search:
        keywords = build_search_keywords(assessment_text, categories)
        try:
            return search_nearby(location, keywords, categories, config)[: config.max_results]
        except Exception:
            logger.warning("Places search failed, falling back to restaurant catalog", exc_info=True)
    else:
        logger.info("Places API key is not set, using restaurant catalog")

    return catalog_restaurants(categories, limit=config.max_results)
