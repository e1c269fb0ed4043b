from __future__ import annotations

from pathlib import Path

import pandas as pd

_CATALOG_CSV = Path(__file__).resolve().parent / "data" / "catalog.csv"

GENERAL_CATEGORY = "general"

_df: pd.DataFrame | None = None


def _load(path: Path = _CATALOG_CSV) -> pd.DataFrame:
    df = pd.read_csv(path, dtype={"category": str, "name": str, "address": str})
    df["category"] = df["category"].fillna("").str.strip().str.lower()
    return df


def get_catalog() -> pd.DataFrame:
    """Return the read-only restaurant catalog, loading it on first call."""
    global _df
    if _df is None:
        _df = _load()
    return _df
