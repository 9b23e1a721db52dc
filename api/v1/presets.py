from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, status

from core.presets import PRESETS, RecommendationWeights

router = APIRouter()


@router.get(
    "",
    response_model=Dict[str, RecommendationWeights],
    status_code=status.HTTP_200_OK,
    summary="List the named weight presets",
)
def list_presets() -> Dict[str, RecommendationWeights]:
    return dict(PRESETS)
