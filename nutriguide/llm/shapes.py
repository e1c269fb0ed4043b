"""
Shape matchers for diet-suggestion responses.

The model is asked for a bare JSON array but JSON mode frequently wraps it
in an object. Each matcher inspects the parsed payload and returns the list
of raw suggestion entries it recognizes, or ``None`` to pass. Matchers are
tried in order; the first hit wins.
"""
from __future__ import annotations

from typing import Any, Callable

ShapeMatcher = Callable[[Any], "list[Any] | None"]


def match_plain_list(parsed: Any) -> list[Any] | None:
    return parsed if isinstance(parsed, list) else None


def _match_named_field(field: str) -> ShapeMatcher:
    def matcher(parsed: Any) -> list[Any] | None:
        if isinstance(parsed, dict) and isinstance(parsed.get(field), list):
            return parsed[field]
        return None

    matcher.__name__ = f"match_{field}_field"
    return matcher


match_meals_field = _match_named_field("meals")
match_recommendations_field = _match_named_field("recommendations")


def match_single_suggestion(parsed: Any) -> list[Any] | None:
    if isinstance(parsed, dict) and parsed.get("name") and parsed.get("description"):
        return [parsed]
    return None


def match_first_list_field(parsed: Any) -> list[Any] | None:
    if not isinstance(parsed, dict):
        return None
    for value in parsed.values():
        if isinstance(value, list):
            return value
    return None


SHAPE_MATCHERS: list[tuple[str, ShapeMatcher]] = [
    ("plain_list", match_plain_list),
    ("meals", match_meals_field),
    ("recommendations", match_recommendations_field),
    ("single_suggestion", match_single_suggestion),
    ("first_list_field", match_first_list_field),
]


def extract_suggestion_entries(parsed: Any) -> tuple[str, list[Any]] | None:
    """Return ``(shape_name, entries)`` for the first matching shape, else ``None``."""
    for name, matcher in SHAPE_MATCHERS:
        entries = matcher(parsed)
        if entries is not None:
            return name, entries
    return None
