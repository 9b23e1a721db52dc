"""
core/catalogue.py
────────────────────────────────────────────────────────────────────────
Bridge between tabular recipe data (pandas) and the engine's `Recipe`
values.

Accepted columns (all but `id` optional):

    id, title, tags, ingredients, category,
    calories | kcal, protein_g, carbs_g, fat_g, fiber_g, sugar_g,
    cook_time_minutes | time, cost

List columns may hold real lists or ";"- / ","-separated strings. Missing
nutrient cells are read as 0 (sugar as unknown) rather than rejected.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from core.models.recipe import NutrientProfile, Recipe, ScoredRecipe

_LOG = logging.getLogger(__name__)

_MACROS = ("protein_g", "carbs_g", "fat_g", "fiber_g")
_HOURS = re.compile(r"(\d+(?:\.\d+)?)\s*(?:h|hr|hrs|hour|hours)\b")
_MINUTES = re.compile(r"(\d+(?:\.\d+)?)\s*(?:m|min|mins|minute|minutes)\b")


def _missing(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, (list, tuple, np.ndarray)):
        return False
    return bool(pd.isna(v))


def _num(v: Any) -> Optional[float]:
    if _missing(v):
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _split_list(v: Any) -> tuple[str, ...]:
    if _missing(v):
        return ()
    if isinstance(v, (list, tuple, np.ndarray)):
        items = [str(x) for x in v]
    else:
        sep = ";" if ";" in str(v) else ","
        items = str(v).split(sep)
    return tuple(i.strip() for i in items if i and i.strip())


def parse_time_minutes(value: Any) -> Optional[float]:
    """'25 mins' → 25, '1 hr 30 mins' → 90, 40 → 40, junk → None."""
    num = _num(value)
    if num is not None:
        return num
    if _missing(value):
        return None
    text = str(value).lower()
    hours = sum(float(h) for h in _HOURS.findall(text))
    mins = sum(float(m) for m in _MINUTES.findall(text))
    if not hours and not mins:
        return None
    return hours * 60 + mins


def recipe_from_row(row: Dict[str, Any]) -> Recipe:
    calories = _num(row.get("calories"))
    if calories is None:
        calories = _num(row.get("kcal"))

    cook_time = _num(row.get("cook_time_minutes"))
    if cook_time is None:
        cook_time = parse_time_minutes(row.get("time"))

    category = row.get("category")
    return Recipe(
        id=str(row["id"]),
        title="" if _missing(row.get("title")) else str(row["title"]),
        tags=_split_list(row.get("tags")),
        ingredients=_split_list(row.get("ingredients")),
        nutrients=NutrientProfile(
            calories=calories or 0.0,
            sugar_g=_num(row.get("sugar_g")),
            **{k: _num(row.get(k)) or 0.0 for k in _MACROS},
        ),
        cook_time_minutes=cook_time,
        cost=_num(row.get("cost")),
        category=None if _missing(category) else str(category),
    )


def recipes_from_frame(df: pd.DataFrame) -> List[Recipe]:
    if "id" not in df.columns:
        raise KeyError("Recipe DataFrame missing column: id")
    rows = df.to_dict("records")
    recipes = [recipe_from_row(r) for r in rows]
    _LOG.debug("loaded %d recipes from frame", len(recipes))
    return recipes


def load_catalogue(path: Path) -> List[Recipe]:
    """Read a CSV or JSON (list of records) catalogue."""
    path = Path(path)
    if path.suffix.lower() == ".json":
        df = pd.read_json(path, orient="records", dtype=False)
    else:
        df = pd.read_csv(path, dtype={"id": str})
    return recipes_from_frame(df)


def scored_to_frame(scored: Sequence[ScoredRecipe]) -> pd.DataFrame:
    cols = [
        "id", "title", "calories", "total_score", "nutritional_fit_score",
        "variety_score", "pantry_score", "cost_score", "recency_score",
        "similarity_score", "like_bonus", "reasons",
    ]
    rows = [
        {
            "id": s.recipe.id,
            "title": s.recipe.title,
            "calories": s.recipe.nutrients.calories,
            "total_score": s.total_score,
            "nutritional_fit_score": s.nutritional_fit_score,
            "variety_score": s.variety_score,
            "pantry_score": s.pantry_score,
            "cost_score": s.cost_score,
            "recency_score": s.recency_score,
            "similarity_score": s.similarity_score,
            "like_bonus": s.like_bonus,
            "reasons": "; ".join(s.reasons),
        }
        for s in scored
    ]
    return pd.DataFrame(rows, columns=cols)
