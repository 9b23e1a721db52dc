# tests/test_filters.py
from __future__ import annotations

from core.filters import (
    COMMON_ALLERGEN_SYNONYMS,
    HardFilter,
    SubstringMatcher,
    SynonymMatcher,
    expand_tags,
    matches_meal_type,
)
from core.meal_budget import MealBudget, MealConstraints
from core.models.recipe import NutrientProfile, Recipe

BUDGET = MealBudget(
    kcal_target=500, protein_target_g=30, carb_target_g=60, fat_target_g=15,
    fiber_min_g=5, sugar_soft_cap_g=20, sugar_hard_cap_g=30,
)
BASE = MealConstraints.from_budget(BUDGET, tolerance=0.20)
hard = HardFilter()


def _recipe(rid="r1", kcal=500.0, sugar=None, tags=(), ingredients=("rice",), cook=None) -> Recipe:
    return Recipe(
        id=rid,
        tags=tags,
        ingredients=ingredients,
        nutrients=NutrientProfile(calories=kcal, sugar_g=sugar),
        cook_time_minutes=cook,
    )


# ── rule 1: calories ────────────────────────────────────────────────
def test_calorie_band_is_asymmetric():
    assert hard.passes(_recipe(kcal=650), BASE)
    assert hard.passes(_recipe(kcal=660), BASE)
    assert hard.passes(_recipe(kcal=440), BASE)
    assert not hard.passes(_recipe(kcal=700), BASE)
    assert not hard.passes(_recipe(kcal=430), BASE)
    assert hard.violations(_recipe(kcal=700), BASE) == ["calories"]


# ── rule 2: sugar ───────────────────────────────────────────────────
def test_sugar_hard_cap_and_unknown_sugar():
    assert hard.passes(_recipe(sugar=30), BASE)
    assert hard.passes(_recipe(sugar=None), BASE)
    assert hard.violations(_recipe(sugar=31), BASE) == ["sugar"]


# ── rule 3: cook time ───────────────────────────────────────────────
def test_cook_time_only_when_both_known():
    limited = MealConstraints.from_budget(BUDGET, tolerance=0.20, max_cook_time=30)
    assert not hard.passes(_recipe(cook=45), limited)
    assert hard.passes(_recipe(cook=30), limited)
    assert hard.passes(_recipe(cook=None), limited)
    assert hard.passes(_recipe(cook=45), BASE)


# ── rule 4: required tags ───────────────────────────────────────────
def test_required_tags_with_implications():
    veg = MealConstraints.from_budget(BUDGET, tolerance=0.20, required_tags=("vegetarian",))
    assert hard.passes(_recipe(tags=("Vegan",)), veg)
    assert hard.passes(_recipe(tags=("vegetarian", "dinner")), veg)
    assert hard.violations(_recipe(tags=("dinner",)), veg) == ["required_tags"]

    strict = MealConstraints.from_budget(BUDGET, tolerance=0.20, required_tags=("vegan", "gluten-free"))
    assert not hard.passes(_recipe(tags=("vegan",)), strict)
    assert hard.passes(_recipe(tags=("vegan", "gluten-free")), strict)


def test_expand_tags():
    assert {"vegan", "vegetarian", "pescatarian", "dairy-free"} <= expand_tags(["VEGAN"])
    assert "keto" in expand_tags(["low-carb"])
    assert "vegetarian" not in expand_tags(["seafood"])


# ── rule 5: excluded ingredients ────────────────────────────────────
def test_excluded_ingredient_substring_case_insensitive():
    nuts = MealConstraints.from_budget(BUDGET, tolerance=0.20, excluded_ingredients=("Peanut",))
    assert not hard.passes(_recipe(ingredients=("rice noodles", "peanut butter")), nuts)
    assert hard.passes(_recipe(ingredients=("rice noodles", "tofu")), nuts)


def test_blank_exclusion_terms_are_ignored():
    blank = MealConstraints.from_budget(BUDGET, tolerance=0.20, excluded_ingredients=("", "  "))
    assert hard.passes(_recipe(ingredients=("rice",)), blank)


def test_synonym_matcher_is_injectable():
    dairy = MealConstraints.from_budget(BUDGET, tolerance=0.20, excluded_ingredients=("dairy",))
    cheesy = _recipe(ingredients=("pasta", "cheddar cheese"))
    assert HardFilter(SubstringMatcher()).passes(cheesy, dairy)
    assert not HardFilter(SynonymMatcher(COMMON_ALLERGEN_SYNONYMS)).passes(cheesy, dairy)


def test_several_violations_reported_together():
    nuts = MealConstraints.from_budget(BUDGET, tolerance=0.20, excluded_ingredients=("peanut",))
    bad = _recipe(kcal=900, sugar=50, ingredients=("peanut sauce",))
    assert hard.violations(bad, nuts) == ["calories", "sugar", "excluded_ingredient"]


# ── stage level ─────────────────────────────────────────────────────
def test_apply_is_monotonic():
    pool = [
        _recipe("a", kcal=500),
        _recipe("b", kcal=900),
        _recipe("c", kcal=600, sugar=10),
        _recipe("d", kcal=300),
    ]
    kept = hard.apply(pool, BASE)
    assert [r.id for r in kept] == ["a", "c"]
    assert all(r in pool for r in kept)
    assert all(hard.passes(r, BASE) for r in kept)


def test_meal_type_tags():
    assert matches_meal_type(_recipe(tags=("lunch", "vegan")), "lunch")
    assert not matches_meal_type(_recipe(tags=("breakfast",)), "lunch")
    assert matches_meal_type(_recipe(tags=("vegan",)), "dinner")
