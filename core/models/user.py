from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from core.presets import RecommendationWeights


class DietaryPreference(str, Enum):
    omnivore = "omnivore"
    vegetarian = "vegetarian"
    vegan = "vegan"
    pescatarian = "pescatarian"
    keto = "keto"


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"

    @classmethod
    def parse(cls, value: "str | MealType") -> "MealType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise ValueError(f"unknown meal type {value!r} (expected one of: {allowed})") from None


class UserPreferences(BaseModel):
    """Read-only snapshot of the user profile for one engine call."""

    dietary_preference: DietaryPreference = DietaryPreference.omnivore
    dietary_restrictions: List[str] = []
    allergies: List[str] = []
    intolerances: List[str] = []
    disliked_foods: List[str] = []
    liked_foods: List[str] = []

    liked_meals: List[str] = []
    disliked_meals: List[str] = []
    recently_viewed: List[str] = []   # most recent first
    pantry: List[str] = []

    fitness_goal: Optional[str] = None
    recommendation_preset: Optional[str] = None
    recommendation_weights: Optional[RecommendationWeights] = None

    # explicit daily targets override the goal profile
    calorie_target: Optional[float] = Field(None, gt=0)
    protein_target: Optional[float] = Field(None, gt=0)
    carb_target: Optional[float] = Field(None, gt=0)
    fat_target: Optional[float] = Field(None, gt=0)

    cooking_time: Optional[float] = Field(None, gt=0)   # minutes

    model_config = ConfigDict(frozen=True)

    @property
    def explicit_target_macros(self) -> Tuple[str, ...]:
        """Macros the user set a daily target for, in calories/protein/carbs/fat order."""
        pairs = (
            ("calories", self.calorie_target),
            ("protein", self.protein_target),
            ("carbs", self.carb_target),
            ("fat", self.fat_target),
        )
        return tuple(name for name, t in pairs if t is not None)

    @property
    def has_explicit_targets(self) -> bool:
        return bool(self.explicit_target_macros)

    @property
    def excluded_ingredients(self) -> List[str]:
        return [t for t in (*self.allergies, *self.intolerances, *self.disliked_foods) if t.strip()]
