from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable, Mapping

from .models import (
    Finding,
    HealthAssessment,
    MetricRange,
    MetricValidationError,
    Severity,
    format_value,
)

logger = logging.getLogger(__name__)

# Canonical metric order; findings follow this order, never the input's.
METRIC_RANGES: dict[str, MetricRange] = {
    "bloodSugar": MetricRange(0, 500, "血糖値"),
    "triglyceride": MetricRange(0, 1000, "中性脂肪"),
    "LDL": MetricRange(0, 500, "LDLコレステロール"),
    "HDL": MetricRange(0, 200, "HDLコレステロール"),
    "totalCholesterol": MetricRange(0, 1000, "総コレステロール"),
    "WBC": MetricRange(0, 20000, "白血球数"),
    "iron": MetricRange(0, 200, "鉄分"),
    "ferritin": MetricRange(0, 500, "フェリチン"),
    "serumIron": MetricRange(0, 200, "血清鉄"),
    "zinc": MetricRange(0, 200, "亜鉛"),
}

# Plain decimal notation only: no digit underscores, no "nan"/"inf" words.
_NUMBER_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

NO_METRICS_MESSAGE = "有効な健康データが入力されていません。少なくとも1つの項目を入力してください。"

GENERAL_ADVICE = [
    "水分を十分に取る",
    "定期的な運動を心がける",
    "食事はバランスよく、過食を避ける",
]

CLOSING_NOTE = (
    "これらの推奨事項を実行することで、全体的な健康状態の向上が期待できます。"
    "ただし、これらの変更を行う前に、医師や栄養専門家と相談することをお勧めします。"
)


def _is_supplied(raw: Any) -> bool:
    return raw is not None and str(raw).strip() != ""


def _parse_metric(metric: str, raw: Any) -> float:
    metric_range = METRIC_RANGES[metric]
    if isinstance(raw, bool):
        raise MetricValidationError(metric, metric_range, "数値で入力してください")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not _NUMBER_RE.fullmatch(text):
            raise MetricValidationError(metric, metric_range, "数値で入力してください")
        value = float(text)

    if not math.isfinite(value):
        raise MetricValidationError(metric, metric_range, "数値で入力してください")
    if value < metric_range.min_value or value > metric_range.max_value:
        raise MetricValidationError(
            metric,
            metric_range,
            f"値で入力してください（入力値: {format_value(value)}）",
        )
    return value


def parse_metrics(metrics: Mapping[str, Any]) -> dict[str, float]:
    """
    Validate every supplied recognized metric in one atomic pass.

    Unknown keys and blank values are ignored. The first invalid metric
    aborts the whole pass with ``MetricValidationError``.
    """
    values: dict[str, float] = {}
    for metric in METRIC_RANGES:
        raw = metrics.get(metric)
        if _is_supplied(raw):
            values[metric] = _parse_metric(metric, raw)
    return values


# ---------------------------------------------------------------------------
# Section rules
# ---------------------------------------------------------------------------


def _blood_sugar(values: dict[str, float]) -> Finding | None:
    if "bloodSugar" not in values:
        return None
    value = values["bloodSugar"]
    shown = format_value(value)

    if value > 140:
        severity = Severity.high
        summary = f"血糖値（{shown} mg/dL）が高めです。糖尿病のリスクを示唆しています。以下の対策をお勧めします："
        actions = [
            "砂糖や精製された炭水化物（白パン、白米、菓子類など）の摂取を減らす",
            "ジュースやソーダなどの糖分の高い飲料を避ける",
            "全粒穀物（玄米、全粒小麦パンなど）を選ぶ",
            "野菜や果物を多く摂る（ただし、果物は糖分が高いものは控えめに）",
        ]
    elif value > 100:
        severity = Severity.borderline
        summary = f"血糖値（{shown} mg/dL）が正常範囲の上限付近です。予防的な食事管理をお勧めします："
        actions = [
            "食事の炭水化物と糖質のバランスに注意する",
            "食物繊維を豊富に含む食品を積極的に摂取する",
            "規則正しい食事時間を心がける",
        ]
    else:
        severity = Severity.normal
        summary = "血糖値は正常範囲内です。現在の食生活を維持しましょう。"
        actions = []

    return Finding(
        section="bloodSugar",
        title="血糖値管理",
        severity=severity,
        summary=summary,
        actions=actions,
        values={"bloodSugar": value},
    )


def _triglyceride(values: dict[str, float]) -> Finding | None:
    if "triglyceride" not in values:
        return None
    value = values["triglyceride"]

    if value > 150:
        return Finding(
            section="triglyceride",
            title="中性脂肪管理",
            severity=Severity.high,
            summary=(
                f"中性脂肪（{format_value(value)} mg/dL）が高めです。"
                "心血管疾患のリスクを高める可能性があります。以下の対策をお勧めします："
            ),
            actions=[
                "飽和脂肪酸（赤肉、バター、高脂肪乳製品）の摂取を減らす",
                "糖質の摂取を控える",
                "オメガ3脂肪酸が豊富な食品（サーモン、マグロ、亜麻仁、チアシード）を取り入れる",
                "適度な有酸素運動を定期的に行う",
            ],
            values={"triglyceride": value},
        )

    return Finding(
        section="triglyceride",
        title="中性脂肪管理",
        severity=Severity.normal,
        summary="中性脂肪の値は正常範囲内です。健康的な脂質バランスを維持しましょう。",
        values={"triglyceride": value},
    )


_CHOLESTEROL_KEYS = ("LDL", "HDL", "totalCholesterol")


def _cholesterol(values: dict[str, float]) -> Finding | None:
    present = {k: values[k] for k in _CHOLESTEROL_KEYS if k in values}
    if not present:
        return None

    # Every flagged sub-metric is named in the same paragraph.
    notes: list[str] = []
    if present.get("LDL", 0) > 140:
        notes.append("LDLコレステロール（悪玉コレステロール）が高めです。")
    if "HDL" in present and present["HDL"] < 40:
        notes.append("HDLコレステロール（善玉コレステロール）が低めです。")
    if present.get("totalCholesterol", 0) > 220:
        notes.append("総コレステロールが高めです。")

    if notes:
        severity = Severity.high
        summary = "".join(notes) + "コレステロール値を改善するために以下の対策をお勧めします："
    else:
        severity = Severity.normal
        summary = "コレステロール値は正常範囲内です。良好な状態を保つために以下の対策をお勧めします："

    return Finding(
        section="cholesterol",
        title="コレステロール管理",
        severity=severity,
        summary=summary,
        actions=[
            "不飽和脂肪酸を多く含む食品（オリーブオイル、アボカド、ナッツ類）を適量取り入れる",
            "食物繊維が豊富な食品（野菜、全粒穀物、豆類）を多く摂る",
            "加工食品や揚げ物を控える",
        ],
        values=present,
    )


def _white_cell_count(values: dict[str, float]) -> Finding | None:
    if "WBC" not in values:
        return None
    value = values["WBC"]

    if value > 10000:
        severity = Severity.high
        summary = "白血球数が高めです。免疫反応が活発な状態です。ビタミンCやDを含む食品を摂取しましょう。"
    elif value < 4000:
        severity = Severity.low
        summary = "白血球数が低めです。良質なタンパク質や抗酸化物質を含む食品を積極的に摂取しましょう。"
    else:
        severity = Severity.normal
        summary = "白血球数は正常範囲内です。バランスの良い食事で免疫力を維持しましょう。"

    return Finding(
        section="WBC",
        title="免疫機能",
        severity=severity,
        summary=summary,
        values={"WBC": value},
    )


# Lower bounds below which a reading indicates iron deficiency.
_IRON_THRESHOLDS = {"iron": 60, "ferritin": 50, "serumIron": 60}


def _iron(values: dict[str, float]) -> Finding | None:
    present = {k: values[k] for k in _IRON_THRESHOLDS if k in values}
    if not present:
        return None

    deficient = [k for k, v in present.items() if v < _IRON_THRESHOLDS[k]]
    if deficient:
        names = "、".join(METRIC_RANGES[k].display_name for k in deficient)
        return Finding(
            section="iron",
            title="鉄分管理",
            severity=Severity.low,
            summary=f"{names}の値から、鉄分が不足している可能性があります。以下の食品を積極的に摂取してください：",
            actions=[
                "鉄分を含む食品（赤身肉、レバー、ほうれん草、豆類）",
                "ビタミンCを含む食品（柑橘類、キウイ、パプリカ）と一緒に摂ると吸収率が上がります",
            ],
            values=present,
        )

    return Finding(
        section="iron",
        title="鉄分管理",
        severity=Severity.normal,
        summary="鉄分値は正常範囲内です。バランスの良い食事を継続しましょう。",
        values=present,
    )


def _zinc(values: dict[str, float]) -> Finding | None:
    if "zinc" not in values:
        return None
    value = values["zinc"]

    if 0 < value < 80:
        return Finding(
            section="zinc",
            title="亜鉛管理",
            severity=Severity.low,
            summary="亜鉛が不足している可能性があります。以下の食品を摂取しましょう：",
            actions=[
                "牡蠣、牛肉、豚肉、ナッツ類など亜鉛を豊富に含む食品",
                "亜鉛の吸収を高めるためにビタミンCを含む食品との併用もお勧めします",
            ],
            values={"zinc": value},
        )

    return Finding(
        section="zinc",
        title="亜鉛管理",
        severity=Severity.normal,
        summary="亜鉛値は正常範囲内です。免疫機能の維持に重要なため、引き続き意識してください。",
        values={"zinc": value},
    )


SECTION_RULES: list[Callable[[dict[str, float]], Finding | None]] = [
    _blood_sugar,
    _triglyceride,
    _cholesterol,
    _white_cell_count,
    _iron,
    _zinc,
]


def evaluate(metrics: Mapping[str, Any]) -> HealthAssessment:
    """
    Evaluate raw health metrics into a structured assessment.

    Never raises for bad input: a validation failure, or no supplied
    recognized metric at all, yields an assessment whose ``error`` holds
    a single advisory sentence and which carries no findings.
    """
    try:
        values = parse_metrics(metrics)
    except MetricValidationError as exc:
        logger.info("Metric validation failed for %s: %s", exc.metric, exc)
        return HealthAssessment(error=str(exc))

    if not values:
        return HealthAssessment(error=NO_METRICS_MESSAGE)

    findings = [f for f in (rule(values) for rule in SECTION_RULES) if f is not None]

    return HealthAssessment(
        findings=findings,
        general_advice=list(GENERAL_ADVICE),
        closing=CLOSING_NOTE,
    )
