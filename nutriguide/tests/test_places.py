from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from nutriguide.restaurants.categories import DietaryCategory
from nutriguide.restaurants.config import PlacesConfig
from nutriguide.restaurants.places_client import (
    DEFAULT_HEALTH_OPTIONS,
    PlacesSearchError,
    search_nearby,
    suggest_health_options,
)

CONFIG = PlacesConfig(api_key="places-key", search_radius=1500, max_results=5)

_RealClient = httpx.Client

GEOCODE_OK = {
    "status": "OK",
    "results": [{"geometry": {"location": {"lat": 35.68, "lng": 139.76}}}],
}

PLACES_OK = {
    "status": "OK",
    "results": [
        {
            "name": "Organic Veg Cafe",
            "vicinity": "千代田区丸の内1-1",
            "rating": 4.4,
            "price_level": 2,
            "types": ["restaurant", "vegetarian_restaurant"],
            "place_id": "abc123",
            "photos": [{"photo_reference": "photo-ref"}],
        },
        {
            "name": "定食屋",
            "vicinity": "千代田区神田2-2",
            "types": ["restaurant"],
        },
    ],
}


def _patched_client(geocode: dict, places: dict | None = None, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path.endswith("/geocode/json"):
            return httpx.Response(200, json=geocode)
        return httpx.Response(200, json=places)

    transport = httpx.MockTransport(handler)
    return patch(
        "nutriguide.restaurants.places_client.httpx.Client",
        side_effect=lambda **kwargs: _RealClient(transport=transport, **kwargs),
    )


# ── Health options ───────────────────────────────────────────────────────


class TestSuggestHealthOptions:
    def test_default_when_nothing_matches(self):
        assert suggest_health_options("ラーメン一番", ["restaurant"], []) == DEFAULT_HEALTH_OPTIONS

    def test_name_and_type_hints(self):
        options = suggest_health_options("Organic Veg Cafe", ["vegetarian_restaurant"], [])
        assert options.split("、") == ["オーガニック食材使用", "ベジタリアンメニューあり", "ベジタリアン専門"]

    def test_categories_from_advice_apply(self):
        options = suggest_health_options("定食屋", [], [DietaryCategory.low_sugar, DietaryCategory.low_salt])
        assert options == "低糖質メニューあり、減塩メニューあり"

    def test_name_rescanned_with_category_vocabulary(self):
        options = suggest_health_options("減塩ダイニング", [], [])
        assert "減塩メニューあり" in options

    def test_labels_deduplicated(self):
        options = suggest_health_options("減塩食堂", [], [DietaryCategory.low_salt])
        assert options == "減塩メニューあり"


# ── Live search ──────────────────────────────────────────────────────────


class TestSearchNearby:
    def test_maps_places_to_restaurants(self):
        seen: list[httpx.Request] = []
        with _patched_client(GEOCODE_OK, PLACES_OK, seen):
            result = search_nearby("東京都", ["低糖質", "健康"], [DietaryCategory.low_sugar], CONFIG)

        assert [r.name for r in result] == ["Organic Veg Cafe", "定食屋"]
        first, second = result
        assert first.address == "千代田区丸の内1-1"
        assert first.rating == 4.4
        assert first.price_level == 2
        assert first.url == "https://www.google.com/maps/place/?q=place_id:abc123"
        assert "photoreference=photo-ref" in first.photo_url
        assert "maxwidth=400" in first.photo_url
        assert "低糖質メニューあり" in first.health_options
        assert second.photo_url is None and second.url is None
        assert second.health_options == "低糖質メニューあり"

        geocode_req, search_req = seen
        assert geocode_req.url.params["address"] == "東京都"
        assert search_req.url.params["location"] == "35.68,139.76"
        assert search_req.url.params["radius"] == "1500"
        assert search_req.url.params["type"] == "restaurant"
        assert search_req.url.params["keyword"] == "低糖質 健康"
        assert search_req.url.params["key"] == "places-key"

    def test_zero_results_is_empty(self):
        with _patched_client(GEOCODE_OK, {"status": "ZERO_RESULTS", "results": []}):
            assert search_nearby("東京都", [], [], CONFIG) == []

    def test_search_status_error_raises(self):
        with _patched_client(GEOCODE_OK, {"status": "OVER_QUERY_LIMIT"}):
            with pytest.raises(PlacesSearchError) as excinfo:
                search_nearby("東京都", [], [], CONFIG)
        assert excinfo.value.status == "OVER_QUERY_LIMIT"

    def test_geocode_failure_raises(self):
        with _patched_client({"status": "ZERO_RESULTS", "results": []}):
            with pytest.raises(PlacesSearchError) as excinfo:
                search_nearby("nowhere", [], [], CONFIG)
        assert excinfo.value.stage == "Geocoding"

    def test_http_error_status_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        with patch(
            "nutriguide.restaurants.places_client.httpx.Client",
            side_effect=lambda **kwargs: _RealClient(transport=transport, **kwargs),
        ):
            with pytest.raises(httpx.HTTPStatusError):
                search_nearby("東京都", [], [], CONFIG)

    def test_results_capped(self):
        many = {"status": "OK", "results": [{"name": f"r{i}", "vicinity": "x"} for i in range(9)]}
        with _patched_client(GEOCODE_OK, many):
            assert len(search_nearby("東京都", [], [], CONFIG)) == 5
