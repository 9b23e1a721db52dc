"""
core/filters.py
────────────────────────────────────────────────────────────────────────
Hard eligibility rules. A recipe either passes every rule or is dropped;
there is no partial credit.

Ingredient matching is delegated to an `IngredientMatcher` so the
strategy (plain substring, synonym table, ...) can change without touching
the rules.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Protocol, Sequence

from core.meal_budget import HardFilterLimits, MealConstraints
from core.models.recipe import Recipe
from core.models.user import MealType

_LOG = logging.getLogger(__name__)

# a recipe carrying the key tag also satisfies each listed requirement
TAG_IMPLICATIONS: Dict[str, tuple[str, ...]] = {
    "vegan": ("vegetarian", "pescatarian", "dairy-free"),
    "vegetarian": ("pescatarian",),
    "seafood": ("pescatarian",),
    "low-carb": ("keto",),
}


# ─────────────────────────── matchers ─────────────────────────── #
class IngredientMatcher(Protocol):
    def matches(self, ingredient: str, term: str) -> bool: ...


class SubstringMatcher:
    """Case-insensitive `term in ingredient`."""

    def matches(self, ingredient: str, term: str) -> bool:
        term = term.strip().lower()
        return bool(term) and term in ingredient.lower()


class SynonymMatcher:
    """Expand `term` through a synonym table, then substring-match each form."""

    def __init__(self, synonyms: Mapping[str, Iterable[str]]) -> None:
        self._synonyms = {
            k.strip().lower(): tuple(s.strip().lower() for s in v)
            for k, v in synonyms.items()
        }
        self._base = SubstringMatcher()

    def expand(self, term: str) -> tuple[str, ...]:
        key = term.strip().lower()
        return (key, *self._synonyms.get(key, ()))

    def matches(self, ingredient: str, term: str) -> bool:
        return any(self._base.matches(ingredient, t) for t in self.expand(term))


COMMON_ALLERGEN_SYNONYMS: Dict[str, tuple[str, ...]] = {
    "dairy": ("milk", "cheese", "butter", "cream", "yogurt", "ghee", "whey"),
    "lactose": ("milk", "cheese", "cream", "yogurt"),
    "gluten": ("wheat", "barley", "rye", "flour", "bread", "pasta", "couscous"),
    "nuts": ("almond", "walnut", "cashew", "pecan", "hazelnut", "pistachio"),
    "shellfish": ("shrimp", "prawn", "crab", "lobster", "mussel", "clam", "scallop"),
    "egg": ("eggs", "mayonnaise"),
    "soy": ("tofu", "tempeh", "edamame", "miso", "soy sauce"),
}


# ─────────────────────────── hard filter ──────────────────────── #
class HardFilter:
    def __init__(self, matcher: IngredientMatcher | None = None) -> None:
        self.matcher = matcher or SubstringMatcher()

    def passes(self, recipe: Recipe, constraints: MealConstraints | HardFilterLimits) -> bool:
        return not self.violations(recipe, constraints)

    def violations(self, recipe: Recipe, constraints: MealConstraints | HardFilterLimits) -> List[str]:
        """Names of the rules `recipe` breaks (empty list → eligible)."""
        hf = constraints.hard_filters if isinstance(constraints, MealConstraints) else constraints
        n = recipe.nutrients
        out: List[str] = []

        if not hf.min_calories <= n.calories <= hf.max_calories:
            out.append("calories")

        if n.sugar_g is not None and n.sugar_g > hf.max_sugar:
            out.append("sugar")

        if (
            hf.max_cook_time is not None
            and recipe.cook_time_minutes is not None
            and recipe.cook_time_minutes > hf.max_cook_time
        ):
            out.append("cook_time")

        if hf.required_tags:
            have = expand_tags(recipe.tags)
            if not all(t.lower() in have for t in hf.required_tags):
                out.append("required_tags")

        if hf.excluded_ingredients and self.contains_any(recipe.ingredients, hf.excluded_ingredients):
            out.append("excluded_ingredient")

        return out

    def contains_any(self, ingredients: Sequence[str], terms: Iterable[str]) -> bool:
        terms = [t for t in terms if t and t.strip()]
        return any(self.matcher.matches(ing, t) for t in terms for ing in ingredients)

    def apply(self, recipes: Iterable[Recipe], constraints: MealConstraints) -> List[Recipe]:
        recipes = list(recipes)
        kept = [r for r in recipes if self.passes(r, constraints)]
        _LOG.debug("hard filters reduced %d recipes to %d", len(recipes), len(kept))
        return kept


# ─────────────────────────── helpers ──────────────────────────── #
def expand_tags(tags: Iterable[str]) -> frozenset[str]:
    have = {t.lower() for t in tags}
    for tag in list(have):
        have.update(TAG_IMPLICATIONS.get(tag, ()))
    return frozenset(have)


def matches_meal_type(recipe: Recipe, meal_type: MealType | str) -> bool:
    """Untagged recipes fit any slot; tagged ones only their own slots."""
    slots = recipe.meal_type_tags
    return not slots or MealType.parse(meal_type).value in slots
