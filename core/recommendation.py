"""
core/recommendation.py
────────────────────────────────────────────────────────────────────────
Meal recommendations for one slot, combining:

  • MealBudgetCalculator  → per-meal kcal / macro / sugar budget
  • HardFilter            → non-negotiable eligibility rules
  • RecipeScorer          → weighted multi-factor score
  • DiversityRanker       → greedy trim of near-duplicate ingredient sets

All public I/O happens through `RecommendationOrchestrator`:
`recommend(...)`, `recommend_detailed(...)`, `replace_disliked(...)` and
`similar_recipes(...)`. Every call is pure: no state survives between
calls and no input is mutated.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol, Sequence

from core.diversity import DiversityRanker
from core.filters import HardFilter, IngredientMatcher, SubstringMatcher, matches_meal_type
from core.meal_budget import MealBudget, MealBudgetCalculator
from core.models.recipe import Recipe, ScoredRecipe
from core.models.user import MealType, UserPreferences
from core.presets import DEFAULT_PRESET, resolve_weights, selected_goal
from core.scoring import RecipeScorer, ScoringContext
from core.similarity import find_similar_recipes

_LOG = logging.getLogger(__name__)

NO_MATCHES_WARNING = "No recipes found after filtering. Consider relaxing constraints."
PRE_DIVERSITY_FACTOR = 2   # ask the diversity pass for 2×count


class RecencyStore(Protocol):
    def recently_viewed(self) -> List[str]: ...


class StaticRecencyStore:
    """Snapshot of a view-history log, most recent first."""

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids = list(ids)

    def recently_viewed(self) -> List[str]:
        return list(self._ids)


@dataclass(frozen=True)
class RecommendationReport:
    recipes: List[ScoredRecipe]
    budget: MealBudget
    candidate_count: int
    eligible_count: int
    warnings: List[str] = field(default_factory=list)


class RecommendationOrchestrator:
    def __init__(
        self,
        matcher: IngredientMatcher | None = None,
        recency_store: RecencyStore | None = None,
        default_preset: str = DEFAULT_PRESET,
        budgets: MealBudgetCalculator | None = None,
        ranker: DiversityRanker | None = None,
    ) -> None:
        matcher = matcher or SubstringMatcher()
        self._budgets = budgets or MealBudgetCalculator()
        self._filter = HardFilter(matcher)
        self._scorer = RecipeScorer(matcher)
        self._ranker = ranker or DiversityRanker()
        self._recency = recency_store
        self._default_preset = default_preset

    # ─────────────────────────────── recommend ──────────────────────── #
    def recommend(
        self,
        prefs: UserPreferences,
        candidate_pool: Sequence[Recipe],
        meal_type: MealType | str,
        count: int = 5,
        include_breakfast: bool = True,
    ) -> List[ScoredRecipe]:
        return self.recommend_detailed(prefs, candidate_pool, meal_type, count, include_breakfast).recipes

    def recommend_detailed(
        self,
        prefs: UserPreferences,
        candidate_pool: Sequence[Recipe],
        meal_type: MealType | str,
        count: int = 5,
        include_breakfast: bool = True,
    ) -> RecommendationReport:
        slot = MealType.parse(meal_type)
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")
        pool = list(candidate_pool)
        weights = resolve_weights(prefs, self._default_preset)

        _LOG.debug(
            "recommending %d %s for goal %s",
            count, slot.value, selected_goal(prefs) or DEFAULT_PRESET,
        )

        constraints = self._budgets.meal_constraints(prefs, slot, include_breakfast)

        disliked = set(prefs.disliked_meals)
        in_slot = [r for r in pool if matches_meal_type(r, slot) and r.id not in disliked]
        eligible = self._filter.apply(in_slot, constraints)

        if not eligible:
            _LOG.warning(NO_MATCHES_WARNING)
            return RecommendationReport(
                recipes=[],
                budget=constraints.budget,
                candidate_count=len(pool),
                eligible_count=0,
                warnings=[NO_MATCHES_WARNING],
            )

        ctx = ScoringContext.build(prefs, constraints, weights, pool, self._recently_viewed(prefs))
        scored = self._scorer.score_all(eligible, ctx)
        # sorted() is stable with reverse=True: ties keep pool order
        ranked = sorted(scored, key=lambda s: s.total_score, reverse=True)
        diversified = self._ranker.diversify(ranked, count * PRE_DIVERSITY_FACTOR)

        return RecommendationReport(
            recipes=diversified[:count],
            budget=constraints.budget,
            candidate_count=len(pool),
            eligible_count=len(eligible),
        )

    # ─────────────────────────────── replace ────────────────────────── #
    def replace_disliked(
        self,
        prefs: UserPreferences,
        candidate_pool: Sequence[Recipe],
        current_selections: Iterable[Recipe | ScoredRecipe | str],
        disliked_id: str,
        meal_type: MealType | str,
    ) -> Optional[ScoredRecipe]:
        exclude = {s if isinstance(s, str) else s.id for s in current_selections}
        exclude.add(disliked_id)
        available = [r for r in candidate_pool if r.id not in exclude]

        found = self.recommend(prefs, available, meal_type, count=1, include_breakfast=True)
        if not found:
            _LOG.info("no replacement available for %s", disliked_id)
            return None
        return found[0]

    # ─────────────────────────────── similar ────────────────────────── #
    def similar_recipes(
        self,
        recipe_id: str,
        candidate_pool: Sequence[Recipe],
        count: int = 3,
    ) -> List[Recipe]:
        source = next((r for r in candidate_pool if r.id == recipe_id), None)
        if source is None:
            raise KeyError(recipe_id)
        return find_similar_recipes(source, candidate_pool, count)

    # ─────────────────────────────── helpers ────────────────────────── #
    def _recently_viewed(self, prefs: UserPreferences) -> List[str]:
        if self._recency is not None:
            return list(self._recency.recently_viewed())
        return list(prefs.recently_viewed)
