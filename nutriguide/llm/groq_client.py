from __future__ import annotations

import json
import logging
from typing import Any

from groq import Groq
from pydantic import ValidationError

from ..recommendations.models import DietSuggestion
from .config import DEFAULT_LLM_CONFIG, LLMConfig
from .shapes import extract_suggestion_entries

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "あなたは健康的な食事を提案する栄養士です。JSON形式で回答してください。"

USER_PROMPT_TEMPLATE = """\
以下の健康分析に基づいて、適切な食事提案を3つ作成してください。
各提案には料理名、説明、栄養情報を含めてください。

健康分析:
{advice}

回答は以下の構造のJSONでお願いします:
[
  {{
    "name": "料理名",
    "description": "説明",
    "nutrition": "栄養情報"
  }},
  ...
]"""

_FALLBACK_SUGGESTIONS: tuple[dict[str, str], ...] = (
    {
        "name": "地中海風サラダボウル",
        "description": "オリーブオイルでドレッシングした新鮮な野菜とレンズ豆のサラダ。低糖質で塩分控えめ。",
        "nutrition": "カロリー: 350kcal, 炭水化物: 30g, タンパク質: 15g, 脂質: 20g, 食塩相当量: 1.5g",
    },
    {
        "name": "蒸し鶏と季節野菜のプレート",
        "description": "香草で香り付けした蒸し鶏と、軽く蒸した季節の野菜。シンプルな味付けで塩分を抑えています。",
        "nutrition": "カロリー: 420kcal, 炭水化物: 25g, タンパク質: 40g, 脂質: 18g, 食塩相当量: 1.2g",
    },
    {
        "name": "玄米と焼き魚の和風セット",
        "description": "玄米ご飯と、塩分控えめの焼き魚、小鉢3種。低GIで血糖値の上昇を緩やかにします。",
        "nutrition": "カロリー: 480kcal, 炭水化物: 60g, タンパク質: 30g, 脂質: 12g, 食塩相当量: 1.8g",
    },
)

_UNRECOGNIZED_SHAPE_SUGGESTION: dict[str, str] = {
    "name": "健康的な地中海風サラダ",
    "description": "あなたの健康状態に基づいて推奨される、新鮮な野菜とオリーブオイルを使用した地中海風サラダです。",
    "nutrition": "ビタミン、ミネラル、健康的な脂肪酸を豊富に含みます。",
}


def fallback_suggestions() -> list[DietSuggestion]:
    """The fixed three-entry list used whenever the LLM is absent or fails."""
    return [DietSuggestion(**s) for s in _FALLBACK_SUGGESTIONS]


def unrecognized_shape_suggestions() -> list[DietSuggestion]:
    return [DietSuggestion(**_UNRECOGNIZED_SHAPE_SUGGESTION)]


def _to_suggestions(entries: list[Any]) -> list[DietSuggestion]:
    suggestions: list[DietSuggestion] = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        try:
            suggestions.append(DietSuggestion.model_validate(entry))
        except ValidationError:
            logger.debug("Dropping malformed diet suggestion: %r", entry)
    return suggestions


def parse_diet_response(content: str) -> list[DietSuggestion]:
    """
    Turn the raw completion text into diet suggestions.

    Raises ``json.JSONDecodeError`` on malformed JSON so the caller can
    apply the network-failure fallback. An unrecognized JSON shape yields
    the one-entry model fallback instead.
    """
    parsed = json.loads(content)

    match = extract_suggestion_entries(parsed)
    if match is None:
        logger.warning("Unrecognized diet response shape: %s", type(parsed).__name__)
        return unrecognized_shape_suggestions()

    shape, entries = match
    suggestions = _to_suggestions(entries)
    if not suggestions:
        logger.warning("Diet response shape %r held no usable suggestions", shape)
        return fallback_suggestions()
    return suggestions


def acquire_diet_suggestions(
    assessment_text: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> list[DietSuggestion]:
    """
    Ask the Groq LLM for diet suggestions matching the health advisory.

    Always returns a non-empty list: missing credentials, API errors,
    timeouts and malformed JSON all yield the fixed fallback list.
    """
    if not config.credentialed:
        logger.info("Groq API key is not set, using fallback diet suggestions")
        return fallback_suggestions()

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": USER_PROMPT_TEMPLATE.format(advice=assessment_text),
                },
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        return parse_diet_response(content)

    except Exception:
        logger.warning("Groq LLM call failed, falling back to fixed diet suggestions", exc_info=True)
        return fallback_suggestions()
