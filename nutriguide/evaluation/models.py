from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class MetricRange:
    min_value: float
    max_value: float
    display_name: str


class MetricValidationError(ValueError):
    """A supplied metric is not a finite number inside its declared range."""

    def __init__(self, metric: str, metric_range: MetricRange, reason: str) -> None:
        self.metric = metric
        self.display_name = metric_range.display_name
        self.min_value = metric_range.min_value
        self.max_value = metric_range.max_value
        super().__init__(
            f"{metric_range.display_name}は{format_value(metric_range.min_value)}〜"
            f"{format_value(metric_range.max_value)}の範囲の{reason}"
        )


class Severity(str, Enum):
    normal = "normal"
    borderline = "borderline"
    high = "high"
    low = "low"


class Finding(BaseModel):
    section: str
    title: str
    severity: Severity
    summary: str
    actions: list[str] = Field(default_factory=list)
    values: dict[str, float] = Field(default_factory=dict)


class HealthAssessment(BaseModel):
    findings: list[Finding] = Field(default_factory=list)
    general_advice: list[str] = Field(default_factory=list)
    closing: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def format_value(value: float) -> str:
    return f"{value:g}"
