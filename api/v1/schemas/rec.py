# api/v1/schemas/rec.py
from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, Field

from core.models.recipe import Recipe, ScoredRecipe
from core.models.user import MealType, UserPreferences


class BudgetOut(BaseModel):
    kcal_target:      float
    protein_target_g: float
    carb_target_g:    float
    fat_target_g:     float
    fiber_min_g:      float
    sugar_soft_cap_g: float
    sugar_hard_cap_g: float


class RecRequest(BaseModel):
    preferences: UserPreferences = UserPreferences()
    candidates: List[Recipe]
    meal_type: MealType
    count: int = Field(5, ge=1, le=50)
    include_breakfast: bool = True


class RecResponse(BaseModel):
    recommendations: List[ScoredRecipe]
    budget:          BudgetOut
    candidate_count: int
    eligible_count:  int
    warnings:        List[str] = []


class ReplaceRequest(BaseModel):
    preferences: UserPreferences = UserPreferences()
    candidates: List[Recipe]
    current_selections: List[str] = []
    disliked_id: str
    meal_type: MealType


class ReplaceResponse(BaseModel):
    replacement: Optional[ScoredRecipe]
    message:     str


class SimilarRequest(BaseModel):
    recipe_id: str
    candidates: List[Recipe]
    count: int = Field(3, ge=1, le=20)
