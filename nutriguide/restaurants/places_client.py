from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from ..recommendations.models import Restaurant
from .categories import CATEGORY_RULES, DietaryCategory, rule_for
from .config import DEFAULT_PLACES_CONFIG, PlacesConfig

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_OPTIONS = "健康的なメニューあり"

_NAME_HINTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"organ|オーガニック", re.IGNORECASE), "オーガニック食材使用"),
    (re.compile(r"veg|ベジ|ヴェジ", re.IGNORECASE), "ベジタリアンメニューあり"),
    (re.compile(r"health|ヘルシー|健康", re.IGNORECASE), "健康志向メニュー"),
    (re.compile(r"diet|ダイエット", re.IGNORECASE), "ダイエット向けメニュー"),
)

_TYPE_HINTS: dict[str, str] = {
    "vegetarian_restaurant": "ベジタリアン専門",
    "vegan_restaurant": "ヴィーガン専門",
    "health": "健康食専門",
}


class PlacesSearchError(RuntimeError):
    """Geocoding or nearby search returned a non-OK status."""

    def __init__(self, stage: str, status: str) -> None:
        self.stage = stage
        self.status = status
        super().__init__(f"{stage} failed: {status}")


def suggest_health_options(
    name: str,
    types: list[str],
    categories: list[DietaryCategory],
) -> str:
    """
    Guess a place's health options, which the search API does not return.

    Looks at the place name and type tags for health-related vocabulary,
    then adds the menu labels of the dietary categories inferred from the
    advisory text.
    """
    options: list[str] = []
    tag_text = " ".join([name, *types])

    for pattern, label in _NAME_HINTS:
        if pattern.search(name):
            options.append(label)
    for place_type in types:
        if place_type in _TYPE_HINTS:
            options.append(_TYPE_HINTS[place_type])
    for rule in CATEGORY_RULES:
        if rule.pattern.search(tag_text):
            options.append(rule.menu_label)
    for category in categories:
        options.append(rule_for(category).menu_label)

    options = list(dict.fromkeys(options))
    return "、".join(options) if options else DEFAULT_HEALTH_OPTIONS


def _get_json(client: httpx.Client, url: str, params: dict[str, Any]) -> dict[str, Any]:
    response = client.get(url, params=params)
    response.raise_for_status()
    return response.json()


def geocode(client: httpx.Client, location: str, config: PlacesConfig) -> tuple[float, float]:
    data = _get_json(client, config.geocode_url, {"address": location, "key": config.api_key})
    status = data.get("status")
    if status != "OK" or not data.get("results"):
        raise PlacesSearchError("Geocoding", str(status))
    coords = data["results"][0]["geometry"]["location"]
    return float(coords["lat"]), float(coords["lng"])


def _photo_url(place: dict[str, Any], config: PlacesConfig) -> str | None:
    photos = place.get("photos") or []
    if not photos or not photos[0].get("photo_reference"):
        return None
    return str(
        httpx.URL(
            config.photo_url,
            params={
                "maxwidth": config.photo_max_width,
                "photoreference": photos[0]["photo_reference"],
                "key": config.api_key,
            },
        )
    )


def _place_to_restaurant(
    place: dict[str, Any],
    categories: list[DietaryCategory],
    config: PlacesConfig,
) -> Restaurant:
    name = place.get("name", "")
    types = place.get("types") or []
    place_id = place.get("place_id")
    return Restaurant(
        name=name,
        address=place.get("vicinity") or place.get("formatted_address") or "",
        rating=place.get("rating"),
        price_level=place.get("price_level"),
        photo_url=_photo_url(place, config),
        url=f"https://www.google.com/maps/place/?q=place_id:{place_id}" if place_id else None,
        health_options=suggest_health_options(name, types, categories),
    )


def search_nearby(
    location: str,
    keywords: list[str],
    categories: list[DietaryCategory],
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> list[Restaurant]:
    """
    Geocode ``location`` and search restaurants around it.

    ZERO_RESULTS from the nearby search yields an empty list. Any other
    non-OK status raises ``PlacesSearchError``; transport problems surface
    as ``httpx.HTTPError``.
    """
    with httpx.Client(timeout=config.timeout) as client:
        lat, lng = geocode(client, location, config)
        data = _get_json(
            client,
            config.nearby_search_url,
            {
                "location": f"{lat},{lng}",
                "radius": config.search_radius,
                "type": "restaurant",
                "keyword": " ".join(keywords),
                "key": config.api_key,
            },
        )

    status = data.get("status")
    if status == "ZERO_RESULTS":
        logger.info("Nearby search found no restaurants around %r", location)
        return []
    if status != "OK":
        raise PlacesSearchError("Place search", str(status))

    return [
        _place_to_restaurant(place, categories, config)
        for place in data.get("results", [])[: config.max_results]
    ]
