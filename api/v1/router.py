# api/v1/router.py
from fastapi import APIRouter

from . import presets, recs

api_router = APIRouter()

api_router.include_router(recs.router, prefix="/recommendations", tags=["Recommendations"])
api_router.include_router(presets.router, prefix="/presets", tags=["Presets"])
