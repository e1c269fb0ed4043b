from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class DietaryCategory(str, Enum):
    low_sugar = "low_sugar"
    low_salt = "low_salt"
    iron_deficiency = "iron_deficiency"
    omega3 = "omega3"
    high_fiber = "high_fiber"
    high_protein = "high_protein"


@dataclass(frozen=True)
class CategoryRule:
    category: DietaryCategory
    pattern: re.Pattern[str]
    search_keywords: tuple[str, ...]
    menu_label: str


# Order here is the order of catalog entries in the final list.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        DietaryCategory.low_sugar,
        re.compile(r"血糖|糖尿|低糖質|糖質制限", re.IGNORECASE),
        ("低糖質", "ロカボ", "ダイエット"),
        "低糖質メニューあり",
    ),
    CategoryRule(
        DietaryCategory.low_salt,
        re.compile(r"塩分|高血圧|ナトリウム|減塩", re.IGNORECASE),
        ("減塩", "ヘルシー"),
        "減塩メニューあり",
    ),
    CategoryRule(
        DietaryCategory.iron_deficiency,
        re.compile(r"鉄分|貧血|鉄", re.IGNORECASE),
        ("鉄分", "レバー"),
        "鉄分強化メニューあり",
    ),
    CategoryRule(
        DietaryCategory.omega3,
        re.compile(r"オメガ3|EPA|DHA|魚油|不飽和脂肪酸", re.IGNORECASE),
        ("魚料理", "地中海料理"),
        "魚料理・オメガ3メニューあり",
    ),
    CategoryRule(
        DietaryCategory.high_fiber,
        re.compile(r"食物繊維|便秘|腸内環境", re.IGNORECASE),
        ("野菜", "マクロビ"),
        "食物繊維豊富なメニューあり",
    ),
    CategoryRule(
        DietaryCategory.high_protein,
        re.compile(r"タンパク質|たんぱく質|プロテイン", re.IGNORECASE),
        ("高タンパク",),
        "高タンパクメニューあり",
    ),
)

_RULES_BY_CATEGORY = {rule.category: rule for rule in CATEGORY_RULES}

# Search-only hints: they widen the live query but select no catalog entry.
_SEARCH_HINTS: tuple[tuple[re.Pattern[str], tuple[str, ...]], ...] = (
    (re.compile(r"カロリー|体重|ダイエット|肥満", re.IGNORECASE), ("ダイエット", "ヘルシー", "カロリー控えめ")),
    (re.compile(r"コレステロール|LDL|HDL", re.IGNORECASE), ("ヘルシー", "オーガニック")),
)

BASE_SEARCH_KEYWORDS: tuple[str, ...] = ("オーガニック", "健康", "ベジタリアン")


def infer_categories(text: str) -> list[DietaryCategory]:
    """Dietary-need categories mentioned in ``text``, in canonical order."""
    return [rule.category for rule in CATEGORY_RULES if rule.pattern.search(text or "")]


def rule_for(category: DietaryCategory) -> CategoryRule:
    return _RULES_BY_CATEGORY[category]


def build_search_keywords(text: str, categories: list[DietaryCategory]) -> list[str]:
    keywords: list[str] = []
    for category in categories:
        keywords.extend(rule_for(category).search_keywords)
    for pattern, hints in _SEARCH_HINTS:
        if pattern.search(text or ""):
            keywords.extend(hints)
    keywords.extend(BASE_SEARCH_KEYWORDS)
    # Deduplicate, keeping first occurrence.
    return list(dict.fromkeys(keywords))
