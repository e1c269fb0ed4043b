from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecommendationRequest(_CamelModel):
    health_data: dict[str, Any] | None = Field(
        default=None,
        description="Metric name to raw value, e.g. {\"bloodSugar\": \"160\"}",
    )
    location: str | None = Field(default="", description="Free-text place name or address")

    @field_validator("health_data", mode="before")
    @classmethod
    def _non_mapping_is_missing(cls, value: Any) -> dict[str, Any] | None:
        # Values are typed by the evaluator, which only reads recognized keys.
        return value if isinstance(value, dict) else None

    @field_validator("location", mode="before")
    @classmethod
    def _non_string_location_is_blank(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class DietSuggestion(BaseModel):
    name: str
    description: str = ""
    nutrition: str = Field(
        default="",
        validation_alias=AliasChoices("nutrition", "nutritionSummary", "nutrition_summary"),
    )

    @field_validator("description", mode="before")
    @classmethod
    def _null_description_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("nutrition", mode="before")
    @classmethod
    def _flatten_nutrition(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, dict):
            return ", ".join(f"{k}: {v}" for k, v in value.items())
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        return str(value)


class Restaurant(_CamelModel):
    name: str
    address: str = ""
    cuisine: str | None = None
    health_options: str | None = None
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    photo_url: str | None = None
    price_level: int | None = None
    url: str | None = None


class RecommendationResult(_CamelModel):
    health_advice: str
    diet_suggestions: list[DietSuggestion]
    restaurants: list[Restaurant] = Field(default_factory=list)


class ErrorResponse(_CamelModel):
    error: str


class RecommendationErrorResponse(RecommendationResult):
    error: str
