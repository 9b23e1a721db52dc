# tests/test_scoring.py
from __future__ import annotations

import math
import pytest

from core.filters import SubstringMatcher
from core.meal_budget import MealBudget, MealConstraints
from core.models.recipe import NutrientProfile, Recipe
from core.models.user import UserPreferences
from core.presets import PRESETS, RecommendationWeights
from core.scoring import (
    FitStrategy,
    RecipeScorer,
    ScoringContext,
    component_score,
    cost_score,
    goal_budget_fit,
    infer_liked_categories,
    pantry_score,
    recency_score,
    select_fit_strategy,
    target_deviation_fit,
    variety_score,
)

BUDGET = MealBudget(
    kcal_target=500, protein_target_g=30, carb_target_g=60, fat_target_g=15,
    fiber_min_g=5, sugar_soft_cap_g=20, sugar_hard_cap_g=30,
)
CONSTRAINTS = MealConstraints.from_budget(BUDGET, tolerance=0.20)
ON_TARGET = NutrientProfile(calories=500, protein_g=30, carbs_g=60, fat_g=15, fiber_g=5, sugar_g=10)

scorer = RecipeScorer()


def _recipe(rid="r1", nutrients=ON_TARGET, ingredients=("rice", "beans", "corn", "salsa"), **kw) -> Recipe:
    return Recipe(id=rid, ingredients=ingredients, nutrients=nutrients, **kw)


# ── component falloff ───────────────────────────────────────────────
def test_component_score_inside_band():
    assert component_score(500, 500, 0.20) == 1.0
    assert component_score(600, 500, 0.20) == 1.0


def test_component_score_above_band_worked_example():
    # ratio 1.3 > 1.2 → 2 − 1.3/1.2
    assert component_score(650, 500, 0.20) == pytest.approx(0.9167, abs=1e-4)


def test_component_score_below_band_and_floor():
    assert component_score(300, 500, 0.20) == pytest.approx(0.75)
    assert component_score(2000, 500, 0.20) == 0.0
    assert component_score(0, 500, 0.20) == 0.0


def test_zero_target_is_not_applicable():
    assert component_score(123, 0, 0.20) == 1.0


# ── nutritional fit ─────────────────────────────────────────────────
def test_goal_budget_fit_perfect_match():
    assert goal_budget_fit(ON_TARGET, CONSTRAINTS) == pytest.approx(1.0)


def test_sugar_only_penalises_overage():
    sweet = ON_TARGET.model_copy(update={"sugar_g": 40})
    # penalty capped at 0.3, weighted 5 %
    assert goal_budget_fit(sweet, CONSTRAINTS) == pytest.approx(1 - 0.05 * 0.3)
    unsweet = ON_TARGET.model_copy(update={"sugar_g": 0})
    assert goal_budget_fit(unsweet, CONSTRAINTS) == pytest.approx(1.0)


def test_missing_fiber_counts_as_zero():
    no_fiber = NutrientProfile(calories=500, protein_g=30, carbs_g=60, fat_g=15, fiber_g=None)
    assert no_fiber.fiber_g == 0.0
    assert goal_budget_fit(no_fiber, CONSTRAINTS) == pytest.approx(0.9)


def test_target_deviation_fit():
    over = ON_TARGET.model_copy(update={"calories": 550})
    # calories 10 % off → 0.8, other macros exact
    assert target_deviation_fit(over, BUDGET) == pytest.approx(0.95)
    empty = MealBudget(0, 0, 0, 0, 0, 20, 30)
    assert target_deviation_fit(over, empty) == 1.0


def test_target_deviation_only_scores_set_targets():
    over = ON_TARGET.model_copy(update={"calories": 550})
    assert target_deviation_fit(over, BUDGET, ("protein",)) == 1.0
    assert target_deviation_fit(over, BUDGET, ("calories",)) == pytest.approx(0.8)

    prefs = UserPreferences(protein_target=150)
    assert prefs.explicit_target_macros == ("protein",)
    only_fit = RecommendationWeights(nutritional_fit=1.0)
    s = scorer.score(_recipe(nutrients=over), _ctx(prefs, only_fit))
    assert s.nutritional_fit_score == 1.0


def test_fit_strategy_selection():
    assert select_fit_strategy(UserPreferences()) is FitStrategy.GOAL_BUDGET
    assert select_fit_strategy(UserPreferences(protein_target=150)) is FitStrategy.TARGET_DEVIATION


# ── variety / pantry / cost / recency ───────────────────────────────
def test_variety_score():
    dinner = _recipe(category="Dinner")
    assert variety_score(dinner, frozenset(), has_history=False) == 0.8
    assert variety_score(dinner, frozenset({"breakfast"}), has_history=True) == pytest.approx(0.8)
    assert variety_score(dinner, frozenset({"dinner"}), has_history=True) == pytest.approx(0.5)


def test_liked_categories_from_pool_then_id_prefix():
    pool = [_recipe("abc", category="Soup")]
    assert infer_liked_categories(["abc", "breakfast_oats", "plain"], pool) == {"soup", "breakfast"}


def test_pantry_score():
    m = SubstringMatcher()
    r = _recipe(ingredients=("chicken breast", "brown rice", "broccoli", "soy sauce"))
    assert pantry_score(r, [], m) == 0.5
    assert pantry_score(r, ["Chicken", "rice"], m) == pytest.approx(0.5)
    assert pantry_score(_recipe(ingredients=()), ["rice"], m) == 0.0


def test_cost_score_explicit_price():
    assert cost_score(_recipe(cost=2)) == 1.0
    assert cost_score(_recipe(cost=8.5)) == pytest.approx(0.5)
    assert cost_score(_recipe(cost=15)) == 0.0
    assert cost_score(_recipe(cost=40)) == 0.0
    assert cost_score(_recipe(cost=0.5)) == 1.0


def test_cost_score_estimated():
    assert cost_score(_recipe()) == pytest.approx(0.8)
    salmon = _recipe(ingredients=("Salmon fillet", "rice", "lemon", "dill"))
    assert cost_score(salmon) == pytest.approx(0.5)
    big = _recipe(ingredients=("ground beef",) + tuple(f"item {i}" for i in range(11)))
    assert cost_score(big) == pytest.approx(0.2)


def test_recency_score():
    recent = ["a", "b", "c"]
    assert recency_score("z", recent) == 1.0
    assert recency_score("a", recent) == pytest.approx(0.2)
    assert recency_score("b", recent) == pytest.approx(0.6)
    assert recency_score("c", recent) == pytest.approx(1.0)
    assert recency_score("a", ["a"]) == pytest.approx(0.2)


# ── scorer ──────────────────────────────────────────────────────────
def _ctx(prefs=UserPreferences(), weights=PRESETS["Healthy"], pool=()):
    return ScoringContext.build(prefs, CONSTRAINTS, weights, list(pool))


def test_total_is_weighted_sum():
    only_fit = RecommendationWeights(nutritional_fit=1.0)
    s = scorer.score(_recipe(), _ctx(weights=only_fit))
    assert s.total_score == pytest.approx(1.0)

    only_variety = RecommendationWeights(variety_boost=0.5)
    s = scorer.score(_recipe(), _ctx(weights=only_variety))
    assert s.total_score == pytest.approx(0.4)


def test_like_bonus_is_additive_and_clamped():
    prefs = UserPreferences(liked_meals=["r1"])
    weights = RecommendationWeights(cost_score=0.5)
    s = scorer.score(_recipe(), _ctx(prefs, weights))
    assert s.like_bonus == 0.2
    assert s.total_score == pytest.approx(0.5 * 0.8 + 0.2)
    assert "You liked this before" in s.reasons

    heavy = RecommendationWeights(nutritional_fit=1, variety_boost=1, cost_score=1)
    assert scorer.score(_recipe(), _ctx(prefs, heavy)).total_score == 1.0


def test_reserved_weights_do_not_contribute():
    reserved = RecommendationWeights(metadata_overlap=1, vector_similarity=1, collaborative_filtering=1)
    assert scorer.score(_recipe(), _ctx(weights=reserved)).total_score == 0.0


def test_all_scores_in_unit_interval():
    prefs = UserPreferences(
        liked_meals=["lunch_x", "r2"],
        recently_viewed=["r2", "r1"],
        pantry=["rice"],
        liked_foods=["corn"],
    )
    nutrient_cases = [
        ON_TARGET,
        NutrientProfile(),
        NutrientProfile(calories=5000, protein_g=400, carbs_g=900, fat_g=300, fiber_g=80, sugar_g=300),
        NutrientProfile(calories=1, sugar_g=0),
    ]
    recipes = [
        _recipe(f"r{i}", nutrients=n, cost=c)
        for i, n in enumerate(nutrient_cases)
        for c in (None, 0.0, 9.0, 99.0)
    ]
    heavy = RecommendationWeights(**{k: 3.0 for k in RecommendationWeights.model_fields})
    for weights in (PRESETS["Healthy"], heavy):
        ctx = _ctx(prefs, weights, recipes)
        for r in recipes:
            s = scorer.score(r, ctx)
            for v in (
                s.nutritional_fit_score, s.variety_score, s.pantry_score,
                s.cost_score, s.recency_score, s.similarity_score, s.total_score,
            ):
                assert 0.0 <= v <= 1.0


def test_scoring_does_not_touch_candidate():
    r = _recipe()
    before = r.model_dump()
    s = scorer.score(r, _ctx())
    assert s.recipe is r
    assert r.model_dump() == before
    with pytest.raises(Exception):
        s.total_score = 0.1   # frozen


def test_reasons_for_good_fit():
    s = scorer.score(_recipe(), _ctx())
    assert "Great nutritional fit" in s.reasons
    assert "Good variety" in s.reasons
    assert math.isclose(s.nutritional_fit_score, 1.0)
