"""
core/meal_budget.py
────────────────────────────────────────────────────────────────────────
Per-meal nutrition budgets.

1. Goal profile   (preset → fitness goal → "Healthy")
2. Daily targets  (goal defaults, overridden by explicit user targets)
3. Meal split     (share of the day for the requested slot)
4. Constraints    (hard-filter limits + fit-score tolerances)

Budgets are recomputed on every call because they depend on mutable user
settings.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from core.models.user import DietaryPreference, MealType, UserPreferences
from core.presets import DEFAULT_PRESET, canonical_goal, selected_goal

_LOG = logging.getLogger(__name__)

# hard band = target × (1 + tol×1.6) … target × (1 − tol×0.6)
HARD_CAP_TOLERANCE_MULTIPLIER = 1.6
HARD_FLOOR_TOLERANCE_MULTIPLIER = 0.6

CARB_TOLERANCE = 0.25
FAT_TOLERANCE = 0.30


# ──────────────────────────────────────────────────────────────────────
#  Goal profiles
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class GoalProfile:
    daily_kcal: float
    protein_pct: float
    carbs_pct: float
    fat_pct: float
    fiber_min_g: float
    calorie_tolerance: float
    protein_tolerance: float
    # breakfast sizes vary more, so it gets its own (wider) band
    breakfast_calorie_tolerance: float
    breakfast_protein_tolerance: float


GOAL_PROFILES: Dict[str, GoalProfile] = {
    "Healthy": GoalProfile(
        daily_kcal=2200, protein_pct=0.25, carbs_pct=0.45, fat_pct=0.30,
        fiber_min_g=8, calorie_tolerance=0.15, protein_tolerance=0.20,
        breakfast_calorie_tolerance=0.25, breakfast_protein_tolerance=0.30,
    ),
    "WeightLoss": GoalProfile(
        daily_kcal=1800, protein_pct=0.35, carbs_pct=0.35, fat_pct=0.30,
        fiber_min_g=12, calorie_tolerance=0.10, protein_tolerance=0.15,
        breakfast_calorie_tolerance=0.20, breakfast_protein_tolerance=0.25,
    ),
    "MuscleGain": GoalProfile(
        daily_kcal=2800, protein_pct=0.30, carbs_pct=0.45, fat_pct=0.25,
        fiber_min_g=6, calorie_tolerance=0.20, protein_tolerance=0.15,
        breakfast_calorie_tolerance=0.30, breakfast_protein_tolerance=0.20,
    ),
    # performance has its own macro split but Healthy's tolerances
    "Performance": GoalProfile(
        daily_kcal=2600, protein_pct=0.20, carbs_pct=0.55, fat_pct=0.25,
        fiber_min_g=8, calorie_tolerance=0.15, protein_tolerance=0.20,
        breakfast_calorie_tolerance=0.25, breakfast_protein_tolerance=0.30,
    ),
}

MEAL_SPLITS: Dict[str, Dict[str, float]] = {
    "with_breakfast": {"breakfast": 0.25, "lunch": 0.35, "dinner": 0.40},
    "no_breakfast": {"lunch": 0.45, "dinner": 0.55},
    "with_snacks": {"breakfast": 0.20, "lunch": 0.30, "dinner": 0.35, "snack": 0.15},
}

# (soft, hard) grams per meal
SUGAR_CAPS: Dict[str, Tuple[float, float]] = {
    "breakfast": (15, 25),
    "lunch": (20, 30),
    "dinner": (20, 30),
    "snack": (10, 15),
}

# tags a recipe must carry for each diet; implied tags are expanded in filters
DIET_REQUIRED_TAGS: Dict[DietaryPreference, Tuple[str, ...]] = {
    DietaryPreference.omnivore: (),
    DietaryPreference.vegetarian: ("vegetarian",),
    DietaryPreference.vegan: ("vegan",),
    DietaryPreference.pescatarian: ("pescatarian",),
    DietaryPreference.keto: ("keto",),
}
RESTRICTION_TAGS = ("gluten-free", "dairy-free")


# ──────────────────────────────────────────────────────────────────────
#  Budget + constraint values
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class MealBudget:
    kcal_target: float
    protein_target_g: float
    carb_target_g: float
    fat_target_g: float
    fiber_min_g: float
    sugar_soft_cap_g: float
    sugar_hard_cap_g: float


@dataclass(frozen=True)
class Tolerances:
    calorie: float
    protein: float
    carb: float = CARB_TOLERANCE
    fat: float = FAT_TOLERANCE


@dataclass(frozen=True)
class HardFilterLimits:
    max_calories: float
    min_calories: float
    max_sugar: float
    required_tags: Tuple[str, ...] = ()
    excluded_ingredients: Tuple[str, ...] = ()
    max_cook_time: Optional[float] = None


@dataclass(frozen=True)
class MealConstraints:
    budget: MealBudget
    hard_filters: HardFilterLimits
    tolerances: Tolerances

    @classmethod
    def from_budget(
        cls,
        budget: MealBudget,
        tolerance: float,
        protein_tolerance: Optional[float] = None,
        required_tags: Tuple[str, ...] = (),
        excluded_ingredients: Tuple[str, ...] = (),
        max_cook_time: Optional[float] = None,
    ) -> "MealConstraints":
        return cls(
            budget=budget,
            hard_filters=HardFilterLimits(
                max_calories=round_half_up(budget.kcal_target * (1 + tolerance * HARD_CAP_TOLERANCE_MULTIPLIER)),
                min_calories=round_half_up(budget.kcal_target * (1 - tolerance * HARD_FLOOR_TOLERANCE_MULTIPLIER)),
                max_sugar=budget.sugar_hard_cap_g,
                required_tags=tuple(required_tags),
                excluded_ingredients=tuple(excluded_ingredients),
                max_cook_time=max_cook_time,
            ),
            tolerances=Tolerances(
                calorie=tolerance,
                protein=tolerance if protein_tolerance is None else protein_tolerance,
            ),
        )


def round_half_up(x: float) -> float:
    # builtin round() is banker's rounding; budgets round .5 upwards
    return float(math.floor(x + 0.5))


# ──────────────────────────────────────────────────────────────────────
#  Calculator
# ──────────────────────────────────────────────────────────────────────
class MealBudgetCalculator:
    """Pure function of (preferences, meal type, include_breakfast)."""

    def goal_name(self, prefs: UserPreferences) -> str:
        canon = canonical_goal(selected_goal(prefs))
        return canon if canon in GOAL_PROFILES else DEFAULT_PRESET

    def profile(self, prefs: UserPreferences) -> GoalProfile:
        return GOAL_PROFILES[self.goal_name(prefs)]

    # --------------- daily → per meal --------------------------------
    def meal_share(self, meal_type: MealType | str, include_breakfast: bool = True) -> float:
        slot = MealType.parse(meal_type).value
        split = MEAL_SPLITS["with_breakfast" if include_breakfast else "no_breakfast"]
        if slot in split:
            return split[slot]
        return MEAL_SPLITS["with_snacks"].get(slot, 1 / 3)

    def daily_targets(self, prefs: UserPreferences) -> Dict[str, float]:
        p = self.profile(prefs)
        kcal = prefs.calorie_target or p.daily_kcal
        return {
            "kcal": kcal,
            "protein_g": prefs.protein_target or kcal * p.protein_pct / 4,
            "carbs_g": prefs.carb_target or kcal * p.carbs_pct / 4,
            "fat_g": prefs.fat_target or kcal * p.fat_pct / 9,
        }

    def budget(
        self,
        prefs: UserPreferences,
        meal_type: MealType | str,
        include_breakfast: bool = True,
    ) -> MealBudget:
        slot = MealType.parse(meal_type).value
        share = self.meal_share(slot, include_breakfast)
        daily = self.daily_targets(prefs)
        soft, hard = SUGAR_CAPS.get(slot, SUGAR_CAPS["lunch"])
        return MealBudget(
            kcal_target=round_half_up(daily["kcal"] * share),
            protein_target_g=round_half_up(daily["protein_g"] * share),
            carb_target_g=round_half_up(daily["carbs_g"] * share),
            fat_target_g=round_half_up(daily["fat_g"] * share),
            fiber_min_g=round_half_up(self.profile(prefs).fiber_min_g * share),
            sugar_soft_cap_g=soft,
            sugar_hard_cap_g=hard,
        )

    # --------------- constraint set -----------------------------------
    def meal_constraints(
        self,
        prefs: UserPreferences,
        meal_type: MealType | str,
        include_breakfast: bool = True,
    ) -> MealConstraints:
        slot = MealType.parse(meal_type)
        budget = self.budget(prefs, slot, include_breakfast)
        p = self.profile(prefs)

        if slot is MealType.breakfast:
            cal_tol, prot_tol = p.breakfast_calorie_tolerance, p.breakfast_protein_tolerance
        else:
            cal_tol, prot_tol = p.calorie_tolerance, p.protein_tolerance

        constraints = MealConstraints.from_budget(
            budget,
            tolerance=cal_tol,
            protein_tolerance=prot_tol,
            required_tags=required_tags(prefs),
            excluded_ingredients=tuple(prefs.excluded_ingredients),
            max_cook_time=prefs.cooking_time,
        )
        _LOG.debug("budget for %s (%s): %s", slot.value, self.goal_name(prefs), budget)
        return constraints


def required_tags(prefs: UserPreferences) -> Tuple[str, ...]:
    tags = list(DIET_REQUIRED_TAGS.get(prefs.dietary_preference, ()))
    restrictions = {r.strip().lower() for r in prefs.dietary_restrictions}
    tags.extend(t for t in RESTRICTION_TAGS if t in restrictions)
    return tuple(tags)
