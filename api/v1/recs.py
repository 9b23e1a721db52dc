# api/v1/recs.py
from __future__ import annotations
from dataclasses import asdict
from typing import List, Sequence

from fastapi import APIRouter, Depends, HTTPException, status

from config import settings
from core.models.recipe import Recipe
from core.recommendation import RecommendationOrchestrator
from api.v1.schemas import (
    BudgetOut,
    RecRequest,
    RecResponse,
    ReplaceRequest,
    ReplaceResponse,
    SimilarRequest,
)

router = APIRouter()


def get_orchestrator() -> RecommendationOrchestrator:
    """Fresh engine per request – nothing is shared between calls."""
    return RecommendationOrchestrator(default_preset=settings.default_preset)


def _check_pool(candidates: Sequence[Recipe]) -> None:
    if len(candidates) > settings.max_candidate_pool:
        raise HTTPException(
            status_code=413,
            detail=f"candidate pool too large ({len(candidates)} > {settings.max_candidate_pool})",
        )


@router.post("", response_model=RecResponse, status_code=status.HTTP_200_OK)
def recommend(
    body: RecRequest,
    engine: RecommendationOrchestrator = Depends(get_orchestrator),
) -> RecResponse:
    _check_pool(body.candidates)
    try:
        report = engine.recommend_detailed(
            body.preferences,
            body.candidates,
            body.meal_type,
            body.count,
            include_breakfast=body.include_breakfast,
        )
    except ValueError as exc:
        raise HTTPException(422, str(exc)) from exc

    return RecResponse(
        recommendations=report.recipes,
        budget=BudgetOut(**asdict(report.budget)),
        candidate_count=report.candidate_count,
        eligible_count=report.eligible_count,
        warnings=report.warnings,
    )


@router.post("/replace", response_model=ReplaceResponse, status_code=status.HTTP_200_OK)
def replace_disliked(
    body: ReplaceRequest,
    engine: RecommendationOrchestrator = Depends(get_orchestrator),
) -> ReplaceResponse:
    _check_pool(body.candidates)
    found = engine.replace_disliked(
        body.preferences,
        body.candidates,
        body.current_selections,
        body.disliked_id,
        body.meal_type,
    )
    if found is None:
        return ReplaceResponse(replacement=None, message="No alternatives available")
    return ReplaceResponse(replacement=found, message=f"Replaced {body.disliked_id}")


@router.post("/similar", response_model=List[Recipe], status_code=status.HTTP_200_OK)
def similar_recipes(
    body: SimilarRequest,
    engine: RecommendationOrchestrator = Depends(get_orchestrator),
) -> List[Recipe]:
    _check_pool(body.candidates)
    try:
        return engine.similar_recipes(body.recipe_id, body.candidates, body.count)
    except KeyError:
        raise HTTPException(404, f"recipe {body.recipe_id!r} not in candidates") from None
