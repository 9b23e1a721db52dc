"""
core/scoring.py
────────────────────────────────────────────────────────────────────────
Per-candidate scoring.

Each sub-score is computed independently and clamped to [0, 1]:

  • nutritional fit   – how close the macros sit to the meal budget
  • variety           – different category from what the user already likes
  • pantry match      – share of ingredients already at home
  • cost              – cheaper is better
  • recency           – recently viewed recipes are pushed down
  • similarity        – tag / food overlap with liked recipes

The total is the weighted sum plus a flat like bonus, clamped to [0, 1].
Candidates are never modified; each pass returns a new `ScoredRecipe`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

import numpy as np

from core.filters import IngredientMatcher, SubstringMatcher
from core.meal_budget import MealBudget, MealConstraints
from core.models.recipe import NutrientProfile, Recipe, ScoredRecipe
from core.models.user import UserPreferences
from core.presets import RecommendationWeights
from core.similarity import similarity_to_likes

_LOG = logging.getLogger(__name__)

LIKE_BONUS = 0.2

# calorie, protein, carb, fat, fiber, sugar
FIT_COMPONENT_WEIGHTS = np.array([0.30, 0.25, 0.15, 0.15, 0.10, 0.05])
MAX_SUGAR_PENALTY = 0.3

COST_FLOOR, COST_CEILING = 2.0, 15.0
PREMIUM_INGREDIENTS = ("beef", "salmon", "shrimp", "cheese")

NO_HISTORY_VARIETY = 0.8
BASE_VARIETY = 0.5
NEW_CATEGORY_BOOST = 0.3


def clamp01(x: float) -> float:
    return max(0.0, min(1.0, float(x)))


# ──────────────────────────── nutritional fit ─────────────────────────── #
class FitStrategy(str, Enum):
    GOAL_BUDGET = "goal_budget"
    # legacy scorer, only picked when the user set explicit macro targets
    TARGET_DEVIATION = "target_deviation"


def component_score(actual: float, target: float, tolerance: float) -> float:
    """1 inside target×(1±tol), linear falloff outside, 1 if target is 0."""
    if target == 0:
        return 1.0
    ratio = actual / target
    min_ratio, max_ratio = 1 - tolerance, 1 + tolerance
    if min_ratio <= ratio <= max_ratio:
        return 1.0
    if ratio < min_ratio:
        return max(0.0, ratio / min_ratio)
    return max(0.0, 2 - ratio / max_ratio)


def goal_budget_fit(n: NutrientProfile, constraints: MealConstraints) -> float:
    b, tol = constraints.budget, constraints.tolerances

    fiber = 1.0 if b.fiber_min_g == 0 else min(1.0, n.fiber_g / b.fiber_min_g)

    sugar = n.sugar_g or 0.0
    penalty = 0.0
    if b.sugar_soft_cap_g > 0 and sugar > b.sugar_soft_cap_g:
        penalty = min(MAX_SUGAR_PENALTY, (sugar - b.sugar_soft_cap_g) / b.sugar_soft_cap_g)

    components = np.array([
        component_score(n.calories, b.kcal_target, tol.calorie),
        component_score(n.protein_g, b.protein_target_g, tol.protein),
        component_score(n.carbs_g, b.carb_target_g, tol.carb),
        component_score(n.fat_g, b.fat_target_g, tol.fat),
        fiber,
        1 - penalty,
    ])
    return clamp01(float(components @ FIT_COMPONENT_WEIGHTS))


def target_deviation_fit(
    n: NutrientProfile,
    budget: MealBudget,
    macros: Optional[Sequence[str]] = None,
) -> float:
    """Mean of `1 − 2·|actual − target| / target` over `macros` (all four if None)."""
    pairs = {
        "calories": (n.calories, budget.kcal_target),
        "protein": (n.protein_g, budget.protein_target_g),
        "carbs": (n.carbs_g, budget.carb_target_g),
        "fat": (n.fat_g, budget.fat_target_g),
    }
    if macros is not None:
        pairs = {k: v for k, v in pairs.items() if k in macros}
    scores = [
        max(0.0, 1 - 2 * abs(actual - target) / target)
        for actual, target in pairs.values()
        if target > 0
    ]
    if not scores:
        return 1.0
    return clamp01(float(np.mean(scores)))


def nutritional_fit(
    n: NutrientProfile,
    constraints: MealConstraints,
    strategy: FitStrategy,
    target_macros: Optional[Sequence[str]] = None,
) -> float:
    if strategy is FitStrategy.TARGET_DEVIATION:
        return target_deviation_fit(n, constraints.budget, target_macros or None)
    return goal_budget_fit(n, constraints)


def select_fit_strategy(prefs: UserPreferences) -> FitStrategy:
    return FitStrategy.TARGET_DEVIATION if prefs.has_explicit_targets else FitStrategy.GOAL_BUDGET


# ──────────────────────────── other sub-scores ────────────────────────── #
def variety_score(recipe: Recipe, liked_categories: FrozenSet[str], has_history: bool) -> float:
    if not has_history:
        return NO_HISTORY_VARIETY
    score = BASE_VARIETY
    if recipe.resolved_category not in liked_categories:
        score += NEW_CATEGORY_BOOST
    return clamp01(score)


def pantry_score(recipe: Recipe, pantry: Sequence[str], matcher: IngredientMatcher) -> float:
    items = [p for p in pantry if p and p.strip()]
    if not items:
        return 0.5
    if not recipe.ingredients:
        return 0.0
    hits = sum(1 for ing in recipe.ingredients if any(matcher.matches(ing, p) for p in items))
    return clamp01(hits / len(recipe.ingredients))


def cost_score(recipe: Recipe) -> float:
    if recipe.cost is not None:
        return 1 - clamp01((recipe.cost - COST_FLOOR) / (COST_CEILING - COST_FLOOR))

    # no price: estimate from ingredient count and premium items
    count_penalty = min(0.5, len(recipe.ingredients) / 20)
    lowered = [i.lower() for i in recipe.ingredients]
    premium = any(p in ing for ing in lowered for p in PREMIUM_INGREDIENTS)
    return clamp01(1 - count_penalty - (0.3 if premium else 0.0))


def recency_score(recipe_id: str, recently_viewed: Sequence[str]) -> float:
    if recipe_id not in recently_viewed:
        return 1.0
    position = list(recently_viewed).index(recipe_id)
    return clamp01(0.2 + 0.8 * (position / max(1, len(recently_viewed) - 1)))


def infer_liked_categories(liked_ids: Sequence[str], pool: Sequence[Recipe]) -> FrozenSet[str]:
    """Category of each liked recipe in the pool, else the id's `prefix_`."""
    by_id = {r.id: r for r in pool}
    cats = set()
    for rid in liked_ids:
        if rid in by_id and by_id[rid].resolved_category:
            cats.add(by_id[rid].resolved_category)
        elif "_" in rid:
            cats.add(rid.split("_", 1)[0].lower())
    return frozenset(cats)


# ──────────────────────────── scorer ──────────────────────────────────── #
@dataclass(frozen=True)
class ScoringContext:
    """Everything a scoring pass reads, frozen for the duration of one call."""

    constraints: MealConstraints
    weights: RecommendationWeights
    liked_ids: FrozenSet[str] = frozenset()
    liked_categories: FrozenSet[str] = frozenset()
    liked_recipes: Tuple[Recipe, ...] = ()
    liked_foods: Tuple[str, ...] = ()
    pantry: Tuple[str, ...] = ()
    recently_viewed: Tuple[str, ...] = ()
    fit_strategy: FitStrategy = FitStrategy.GOAL_BUDGET
    target_macros: Tuple[str, ...] = ()
    has_history: bool = False

    @classmethod
    def build(
        cls,
        prefs: UserPreferences,
        constraints: MealConstraints,
        weights: RecommendationWeights,
        pool: Sequence[Recipe],
        recently_viewed: Sequence[str] | None = None,
    ) -> "ScoringContext":
        recent = tuple(prefs.recently_viewed if recently_viewed is None else recently_viewed)
        liked = tuple(prefs.liked_meals)
        liked_set = frozenset(liked)
        return cls(
            constraints=constraints,
            weights=weights,
            liked_ids=liked_set,
            liked_categories=infer_liked_categories(liked, pool),
            liked_recipes=tuple(r for r in pool if r.id in liked_set),
            liked_foods=tuple(prefs.liked_foods),
            pantry=tuple(prefs.pantry),
            recently_viewed=recent,
            fit_strategy=select_fit_strategy(prefs),
            target_macros=prefs.explicit_target_macros,
            has_history=bool(liked or recent),
        )


@dataclass
class RecipeScorer:
    matcher: IngredientMatcher = field(default_factory=SubstringMatcher)

    def score(self, recipe: Recipe, ctx: ScoringContext) -> ScoredRecipe:
        w = ctx.weights
        subs: Dict[str, float] = {
            "nutritional_fit_score": nutritional_fit(
                recipe.nutrients, ctx.constraints, ctx.fit_strategy, ctx.target_macros
            ),
            "variety_score": variety_score(recipe, ctx.liked_categories, ctx.has_history),
            "pantry_score": pantry_score(recipe, ctx.pantry, self.matcher),
            "cost_score": cost_score(recipe),
            "recency_score": recency_score(recipe.id, ctx.recently_viewed),
            "similarity_score": similarity_to_likes(recipe, ctx.liked_recipes, ctx.liked_foods),
        }
        like_bonus = LIKE_BONUS if recipe.id in ctx.liked_ids else 0.0

        weighted = (
            w.nutritional_fit * subs["nutritional_fit_score"]
            + w.variety_boost * subs["variety_score"]
            + w.pantry_match * subs["pantry_score"]
            + w.cost_score * subs["cost_score"]
            + w.recency_penalty * subs["recency_score"]
            + w.similarity_to_likes * subs["similarity_score"]
        )

        return ScoredRecipe(
            recipe=recipe,
            like_bonus=like_bonus,
            total_score=clamp01(weighted + like_bonus),
            reasons=_reasons(subs, like_bonus),
            **subs,
        )

    def score_all(self, recipes: Sequence[Recipe], ctx: ScoringContext) -> List[ScoredRecipe]:
        return [self.score(r, ctx) for r in recipes]


def _reasons(subs: Dict[str, float], like_bonus: float) -> Tuple[str, ...]:
    out: List[str] = []
    if subs["nutritional_fit_score"] > 0.8:
        out.append("Great nutritional fit")
    if subs["variety_score"] > 0.7:
        out.append("Good variety")
    if subs["pantry_score"] > 0.5:
        out.append("Uses pantry ingredients")
    if subs["cost_score"] > 0.7:
        out.append("Budget-friendly")
    if like_bonus > 0:
        out.append("You liked this before")
    return tuple(out)
