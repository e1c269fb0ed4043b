from unittest.mock import patch

import httpx
import pytest

from nutriguide.evaluation.evaluator import evaluate
from nutriguide.evaluation.render import render_assessment
from nutriguide.recommendations.models import Restaurant
from nutriguide.restaurants.catalog import catalog_restaurants
from nutriguide.restaurants.categories import (
    BASE_SEARCH_KEYWORDS,
    DietaryCategory,
    build_search_keywords,
    infer_categories,
)
from nutriguide.restaurants.config import PlacesConfig, env_int
from nutriguide.restaurants.data_store import get_catalog
from nutriguide.restaurants.places_client import PlacesSearchError
from nutriguide.restaurants.selector import select_restaurants

CATALOG_CONFIG = PlacesConfig(api_key="")
LIVE_CONFIG = PlacesConfig(api_key="places-key")

GENERAL_NAMES = ["オーガニックテーブル 丸の内", "タニタ食堂 秋葉原店", "GREEN BROTHER 表参道"]


# ── Category inference ───────────────────────────────────────────────────


class TestInferCategories:
    def test_no_match(self):
        assert infer_categories("水分を十分に取る") == []

    def test_empty_text(self):
        assert infer_categories("") == []

    def test_all_categories_in_canonical_order(self):
        text = "タンパク質 食物繊維 DHA 貧血 減塩 糖尿"
        assert infer_categories(text) == list(DietaryCategory)

    def test_case_insensitive(self):
        assert infer_categories("epa を含む魚") == [DietaryCategory.omega3]

    def test_inferred_from_rendered_advice(self):
        advice = render_assessment(evaluate({"bloodSugar": "160", "ferritin": "20"}))
        assert infer_categories(advice) == [
            DietaryCategory.low_sugar,
            DietaryCategory.iron_deficiency,
        ]


class TestSearchKeywords:
    def test_base_keywords_always_present(self):
        assert build_search_keywords("", []) == list(BASE_SEARCH_KEYWORDS)

    def test_category_and_hint_keywords_deduplicated(self):
        text = "血糖値が高め。LDLコレステロールが高めです。"
        keywords = build_search_keywords(text, infer_categories(text))
        assert keywords == ["低糖質", "ロカボ", "ダイエット", "ヘルシー", "オーガニック", "健康", "ベジタリアン"]


# ── Catalog mode ─────────────────────────────────────────────────────────


class TestCatalog:
    def test_catalog_has_one_entry_per_category_and_three_general(self):
        df = get_catalog()
        for category in DietaryCategory:
            assert (df["category"] == category.value).sum() == 1
        assert (df["category"] == "general").sum() == 3

    def test_zero_categories_use_general_filler(self):
        result = catalog_restaurants([], limit=5)
        assert [r.name for r in result] == GENERAL_NAMES

    def test_low_sugar_and_iron_come_first(self):
        result = catalog_restaurants(
            [DietaryCategory.low_sugar, DietaryCategory.iron_deficiency], limit=5
        )
        assert [r.name for r in result[:2]] == ["低糖質キッチン 銀座店", "鉄人厨房"]
        assert [r.name for r in result[2:]] == GENERAL_NAMES
        assert len(result) <= 5

    def test_three_categories_skip_filler(self):
        result = catalog_restaurants(
            [DietaryCategory.low_salt, DietaryCategory.omega3, DietaryCategory.high_fiber], limit=5
        )
        assert len(result) == 3
        assert not {r.name for r in result} & set(GENERAL_NAMES)

    def test_truncated_to_limit(self):
        result = catalog_restaurants(list(DietaryCategory), limit=5)
        assert len(result) == 5
        assert result[-1].name == "ベジタブルガーデン"

    def test_entries_are_well_formed(self):
        for r in catalog_restaurants(list(DietaryCategory), limit=10):
            assert r.name and r.address
            assert 0 <= r.rating <= 5
            assert r.health_options

    def test_results_are_fresh_objects(self):
        first = catalog_restaurants([], limit=5)
        first[0].name = "changed"
        assert catalog_restaurants([], limit=5)[0].name == GENERAL_NAMES[0]


# ── Selector ─────────────────────────────────────────────────────────────


class TestSelectRestaurants:
    @patch("nutriguide.restaurants.selector.search_nearby")
    def test_catalog_mode_without_key(self, mock_search):
        result = select_restaurants("東京都", "水分を十分に取る", config=CATALOG_CONFIG)
        mock_search.assert_not_called()
        assert 3 <= len(result) <= 5

    def test_catalog_mode_respects_max_results(self):
        config = PlacesConfig(api_key="", max_results=2)
        assert len(select_restaurants("東京都", "", config=config)) == 2

    @patch("nutriguide.restaurants.selector.search_nearby")
    def test_live_mode_with_key(self, mock_search):
        mock_search.return_value = [Restaurant(name="Healthy Bowl", address="Shibuya")]

        result = select_restaurants("渋谷", "血糖値が高めです。", config=LIVE_CONFIG)

        assert [r.name for r in result] == ["Healthy Bowl"]
        location, keywords, categories, config = mock_search.call_args.args
        assert location == "渋谷"
        assert "低糖質" in keywords
        assert categories == [DietaryCategory.low_sugar]
        assert config is LIVE_CONFIG

    @patch("nutriguide.restaurants.selector.search_nearby", return_value=[])
    def test_live_zero_results_is_empty_not_fallback(self, mock_search):
        assert select_restaurants("どこか", "血糖", config=LIVE_CONFIG) == []

    @patch("nutriguide.restaurants.selector.search_nearby")
    def test_live_status_error_falls_back_to_catalog(self, mock_search):
        mock_search.side_effect = PlacesSearchError("Place search", "REQUEST_DENIED")

        result = select_restaurants("東京都", "血糖値が高めです。", config=LIVE_CONFIG)

        assert result[0].name == "低糖質キッチン 銀座店"
        assert 3 <= len(result) <= 5

    @patch("nutriguide.restaurants.selector.search_nearby")
    def test_live_network_error_falls_back_to_catalog(self, mock_search):
        mock_search.side_effect = httpx.ConnectError("down")

        result = select_restaurants("東京都", "", config=LIVE_CONFIG)

        assert [r.name for r in result] == GENERAL_NAMES

    @patch("nutriguide.restaurants.selector.search_nearby")
    def test_live_results_truncated(self, mock_search):
        mock_search.return_value = [Restaurant(name=f"r{i}", address="x") for i in range(8)]
        config = PlacesConfig(api_key="k", max_results=5)
        assert len(select_restaurants("東京都", "", config=config)) == 5


# ── Config ───────────────────────────────────────────────────────────────


class TestEnvInt:
    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv("PLACES_SEARCH_RADIUS", raising=False)
        assert env_int("PLACES_SEARCH_RADIUS", 1500) == 1500

    def test_valid_value(self, monkeypatch):
        monkeypatch.setenv("PLACES_SEARCH_RADIUS", "800")
        assert env_int("PLACES_SEARCH_RADIUS", 1500) == 800

    @pytest.mark.parametrize("raw", ["abc", "1.5km", "0", "-3", "  "])
    def test_invalid_value_uses_default(self, monkeypatch, raw):
        monkeypatch.setenv("PLACES_SEARCH_RADIUS", raw)
        assert env_int("PLACES_SEARCH_RADIUS", 1500) == 1500
