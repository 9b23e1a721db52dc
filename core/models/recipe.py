from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

MEAL_TYPE_TAGS = ("breakfast", "lunch", "dinner", "snack")


class NutrientProfile(BaseModel):
    """Per-serving nutrients. Missing macros are read as 0; sugar may be unknown."""

    calories: float = Field(0.0, ge=0)
    protein_g: float = Field(0.0, ge=0)
    carbs_g: float = Field(0.0, ge=0)
    fat_g: float = Field(0.0, ge=0)
    fiber_g: float = Field(0.0, ge=0)
    sugar_g: Optional[float] = Field(None, ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("calories", "protein_g", "carbs_g", "fat_g", "fiber_g", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0.0 if v is None else v


class Recipe(BaseModel):
    id: str
    title: str = ""
    tags: Tuple[str, ...] = ()
    ingredients: Tuple[str, ...] = ()
    nutrients: NutrientProfile = Field(default_factory=NutrientProfile)
    cook_time_minutes: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def tag_set(self) -> frozenset[str]:
        return frozenset(t.lower() for t in self.tags)

    @property
    def meal_type_tags(self) -> frozenset[str]:
        return self.tag_set.intersection(MEAL_TYPE_TAGS)

    @property
    def resolved_category(self) -> str:
        """Explicit category, else the first meal-type tag, else ''."""
        if self.category:
            return self.category.lower()
        for tag in self.tags:
            if tag.lower() in MEAL_TYPE_TAGS:
                return tag.lower()
        return ""


class ScoredRecipe(BaseModel):
    """A recipe with one scoring pass attached. The wrapped recipe is untouched."""

    recipe: Recipe
    nutritional_fit_score: float = Field(ge=0, le=1)
    variety_score: float = Field(ge=0, le=1)
    pantry_score: float = Field(ge=0, le=1)
    cost_score: float = Field(ge=0, le=1)
    recency_score: float = Field(ge=0, le=1)
    similarity_score: float = Field(ge=0, le=1)
    like_bonus: float = Field(ge=0)
    total_score: float = Field(ge=0, le=1)
    reasons: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def id(self) -> str:
        return self.recipe.id
