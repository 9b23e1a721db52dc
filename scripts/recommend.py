"""
Rank a recipe catalogue for one meal slot and print the result.

Usage
-----

    # default preferences (omnivore, Healthy preset)
    python -m scripts.recommend data/recipes.csv --meal-type lunch

    # with a stored preferences snapshot (UserPreferences JSON)
    python -m scripts.recommend data/recipes.json --meal-type dinner \
        --count 3 --prefs path/to/prefs.json

    # swap out a disliked pick
    python -m scripts.recommend data/recipes.csv --meal-type dinner \
        --replace chicken_curry --keep salmon_bowl,veggie_chili
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from config import settings
from core.catalogue import load_catalogue, scored_to_frame
from core.models.user import MealType, UserPreferences
from core.recommendation import RecommendationOrchestrator


def _load_prefs(path: Path | None) -> UserPreferences:
    if path is None:
        return UserPreferences()
    return UserPreferences.model_validate_json(path.read_text())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("catalogue", type=Path, help="CSV or JSON recipe catalogue")
    parser.add_argument(
        "--meal-type",
        default="lunch",
        choices=[m.value for m in MealType],
    )
    parser.add_argument("--count", type=int, default=5)
    parser.add_argument("--prefs", type=Path, help="UserPreferences JSON file")
    parser.add_argument("--no-breakfast", action="store_true", help="breakfast is not part of the plan")
    parser.add_argument("--replace", metavar="RECIPE_ID", help="find a replacement for this recipe")
    parser.add_argument("--keep", default="", help="comma-separated ids already selected")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    recipes = load_catalogue(args.catalogue)
    prefs = _load_prefs(args.prefs)
    engine = RecommendationOrchestrator(default_preset=settings.default_preset)

    if args.replace:
        keep = [k.strip() for k in args.keep.split(",") if k.strip()]
        found = engine.replace_disliked(prefs, recipes, keep, args.replace, args.meal_type)
        if found is None:
            print("No alternatives available")
            return 1
        print(f"✓ replace {args.replace} with {found.recipe.id} ({found.total_score:.2f})")
        return 0

    report = engine.recommend_detailed(
        prefs, recipes, args.meal_type, args.count, include_breakfast=not args.no_breakfast
    )
    for w in report.warnings:
        print(f"[WARN] {w}")
    if not report.recipes:
        return 1

    with pd.option_context("display.max_columns", None, "display.width", 160):
        print(scored_to_frame(report.recipes).round(3).to_string(index=False))
    print(f"\n{report.eligible_count}/{report.candidate_count} candidates passed the filters")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
