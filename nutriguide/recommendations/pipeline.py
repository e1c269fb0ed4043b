from __future__ import annotations

import logging
import time
from typing import Any, Mapping

from ..evaluation.evaluator import evaluate
from ..evaluation.render import render_assessment
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import acquire_diet_suggestions
from ..restaurants.config import DEFAULT_PLACES_CONFIG, PlacesConfig
from ..restaurants.selector import select_restaurants
from .models import (
    DietSuggestion,
    RecommendationErrorResponse,
    RecommendationResult,
    Restaurant,
)

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_ADVICE = (
    "健康データの分析中にエラーが発生しました。"
    "一般的に、バランスの取れた食事と適度な運動が推奨されます。"
)

REQUEST_FAILED_MESSAGE = "レコメンデーションの処理中にエラーが発生しました"
REQUEST_FAILED_ADVICE = "データ処理中にエラーが発生しました。一般的な健康的な食事習慣を心がけてください。"


def _stage_fallback_suggestions() -> list[DietSuggestion]:
    return [
        DietSuggestion(
            name="バランスの良い日本食",
            description="玄米、焼き魚、季節の野菜の煮物を中心とした低塩分・低脂質の食事",
            nutrition="カロリー: 450kcal, 炭水化物: 60g, タンパク質: 25g, 脂質: 10g",
        )
    ]


def _health_advice(metrics: Mapping[str, Any]) -> str:
    try:
        return render_assessment(evaluate(metrics))
    except Exception:
        logger.warning("Health analysis failed, using generic advice", exc_info=True)
        return ANALYSIS_FAILED_ADVICE


def _diet_suggestions(advice: str, config: LLMConfig) -> list[DietSuggestion]:
    try:
        suggestions = acquire_diet_suggestions(advice, config=config)
    except Exception:
        logger.warning("Diet suggestion stage failed", exc_info=True)
        return _stage_fallback_suggestions()
    return suggestions or _stage_fallback_suggestions()


def _restaurants(location: str, advice: str, config: PlacesConfig) -> list[Restaurant]:
    if not location or not location.strip():
        return []
    try:
        return select_restaurants(location.strip(), advice, config=config)
    except Exception:
        logger.warning("Restaurant selection stage failed", exc_info=True)
        return []


def build_recommendation(
    metrics: Mapping[str, Any],
    location: str,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    places_config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> RecommendationResult:
    start_time = time.time()

    advice = _health_advice(metrics)
    suggestions = _diet_suggestions(advice, llm_config)
    restaurants = _restaurants(location, advice, places_config)

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info(
        "Recommendation built: %d suggestions, %d restaurants in %.1f ms",
        len(suggestions),
        len(restaurants),
        elapsed_ms,
    )

    return RecommendationResult(
        health_advice=advice,
        diet_suggestions=suggestions,
        restaurants=restaurants,
    )


def error_recommendation() -> RecommendationErrorResponse:
    """Fully-formed payload returned alongside an HTTP 500."""
    return RecommendationErrorResponse(
        error=REQUEST_FAILED_MESSAGE,
        health_advice=REQUEST_FAILED_ADVICE,
        diet_suggestions=[
            DietSuggestion(
                name="エラー時のデフォルト推薦",
                description="バランスの取れた食事を心がけてください。野菜、タンパク質、穀物をバランスよく摂取しましょう。",
                nutrition="栄養バランスを考慮した食事",
            )
        ],
        restaurants=[],
    )
