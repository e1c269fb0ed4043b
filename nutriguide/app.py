from __future__ import annotations

import logging

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from .llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .recommendations.models import (
    ErrorResponse,
    RecommendationRequest,
    RecommendationResult,
)
from .recommendations.pipeline import build_recommendation, error_recommendation
from .restaurants.config import DEFAULT_PLACES_CONFIG, PlacesConfig

logger = logging.getLogger(__name__)

MISSING_HEALTH_DATA_MESSAGE = "健康データが必要です"

app = FastAPI(title="Health Diet Recommendation API", version="1.0.0")


def get_llm_config() -> LLMConfig:
    return DEFAULT_LLM_CONFIG


def get_places_config() -> PlacesConfig:
    return DEFAULT_PLACES_CONFIG


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post(
    "/api/recommend",
    response_model=RecommendationResult,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
)
def recommend(
    body: RecommendationRequest,
    llm_config: LLMConfig = Depends(get_llm_config),
    places_config: PlacesConfig = Depends(get_places_config),
):
    if not body.health_data:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=MISSING_HEALTH_DATA_MESSAGE).model_dump(by_alias=True),
        )

    try:
        return build_recommendation(
            body.health_data,
            body.location,
            llm_config=llm_config,
            places_config=places_config,
        )
    except Exception:
        logger.exception("Error processing recommendation")
        return JSONResponse(
            status_code=500,
            content=error_recommendation().model_dump(by_alias=True, exclude_none=True),
        )
