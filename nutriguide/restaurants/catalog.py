from __future__ import annotations

import pandas as pd

from ..recommendations.models import Restaurant
from .categories import DietaryCategory
from .data_store import GENERAL_CATEGORY, get_catalog

MIN_CATALOG_RESULTS = 3


def _row_to_restaurant(row: pd.Series) -> Restaurant:
    return Restaurant(
        name=row["name"],
        address=row["address"],
        cuisine=row["cuisine"] if pd.notna(row.get("cuisine")) else None,
        health_options=row["health_options"] if pd.notna(row.get("health_options")) else None,
        rating=float(row["rating"]) if pd.notna(row.get("rating")) else None,
    )


def _entries_for(df: pd.DataFrame, category: str) -> list[Restaurant]:
    return [_row_to_restaurant(row) for _, row in df[df["category"] == category].iterrows()]


def catalog_restaurants(
    categories: list[DietaryCategory],
    limit: int,
) -> list[Restaurant]:
    """
    Build the catalog-mode result for the given dietary categories.

    One curated entry per matched category, in category order. When fewer
    than three matched, the general healthy-restaurant entries are appended
    in catalog order. The result is capped at ``limit``.
    """
    df = get_catalog()

    restaurants: list[Restaurant] = []
    for category in categories:
        restaurants.extend(_entries_for(df, category.value)[:1])

    if len(restaurants) < MIN_CATALOG_RESULTS:
        restaurants.extend(_entries_for(df, GENERAL_CATEGORY))

    return restaurants[:limit]
