"""
core/presets.py
────────────────────────────────────────────────────────────────────────
Named `RecommendationWeights` bundles and the rules for picking one.

Resolution order used by the orchestrator:

    explicit override  →  recommendation_preset  →  fitness goal  →  Healthy

An unknown preset name is not an error; it logs and falls back to
`Healthy`.
"""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

_LOG = logging.getLogger(__name__)

DEFAULT_PRESET = "Healthy"


class RecommendationWeights(BaseModel):
    nutritional_fit: float = Field(0.0, ge=0)
    variety_boost: float = Field(0.0, ge=0)
    pantry_match: float = Field(0.0, ge=0)
    cost_score: float = Field(0.0, ge=0)
    recency_penalty: float = Field(0.0, ge=0)
    similarity_to_likes: float = Field(0.0, ge=0)
    # reserved slots; the pipeline does not score these yet
    metadata_overlap: float = Field(0.0, ge=0)
    vector_similarity: float = Field(0.0, ge=0)
    collaborative_filtering: float = Field(0.0, ge=0)

    model_config = ConfigDict(frozen=True, allow_inf_nan=False, extra="forbid")


ACTIVE_WEIGHTS = (
    "nutritional_fit",
    "variety_boost",
    "pantry_match",
    "cost_score",
    "recency_penalty",
    "similarity_to_likes",
)

PRESETS: Dict[str, RecommendationWeights] = {
    "Healthy": RecommendationWeights(
        nutritional_fit=0.4,
        similarity_to_likes=0.2,
        variety_boost=0.1,
        pantry_match=0.1,
        cost_score=0.1,
        recency_penalty=0.1,
    ),
    "WeightLoss": RecommendationWeights(
        nutritional_fit=0.6,
        similarity_to_likes=0.1,
        variety_boost=0.1,
        pantry_match=0.1,
        cost_score=0.05,
        recency_penalty=0.05,
    ),
    "MuscleGain": RecommendationWeights(
        nutritional_fit=0.5,
        similarity_to_likes=0.1,
        variety_boost=0.1,
        pantry_match=0.1,
        cost_score=0.05,
        recency_penalty=0.15,
    ),
}

# fitness-goal spellings seen in stored profiles → preset / goal-profile name
GOAL_ALIASES: Dict[str, str] = {
    "healthy": "Healthy",
    "maintenance": "Healthy",
    "maintain": "Healthy",
    "general": "Healthy",
    "weightloss": "WeightLoss",
    "weight-loss": "WeightLoss",
    "weight_loss": "WeightLoss",
    "lose": "WeightLoss",
    "musclegain": "MuscleGain",
    "muscle-gain": "MuscleGain",
    "muscle_gain": "MuscleGain",
    "gain": "MuscleGain",
    "performance": "Performance",
}


def canonical_goal(name: Optional[str]) -> Optional[str]:
    """Map a preset / goal spelling onto its canonical name (None if unknown)."""
    if not name:
        return None
    if name in PRESETS or name == "Performance":
        return name
    return GOAL_ALIASES.get(name.strip().lower())


def get_preset(name: Optional[str], default: str = DEFAULT_PRESET) -> RecommendationWeights:
    canon = canonical_goal(name)
    if canon in PRESETS:
        return PRESETS[canon]
    if name and canon is None:
        _LOG.warning("unknown weight preset %r – falling back to %s", name, default)
    return PRESETS.get(default, PRESETS[DEFAULT_PRESET])


def selected_goal(prefs) -> Optional[str]:
    """
    The one goal name that drives both the meal budget and the weights.
    A set `recommendation_preset` wins even when it does not resolve.
    """
    return prefs.recommendation_preset or prefs.fitness_goal


def resolve_weights(prefs, default: str = DEFAULT_PRESET) -> RecommendationWeights:
    """Explicit override, else the named preset, else the goal's preset."""
    if prefs.recommendation_weights is not None:
        return prefs.recommendation_weights
    return get_preset(selected_goal(prefs), default)


def normalize_weights(raw: Mapping[str, float]) -> RecommendationWeights:
    """
    Rescale a (possibly partial) mapping so the active weights sum to 1.
    Reserved slots are dropped. An all-zero input yields `Healthy`.
    """
    values = {k: float(raw.get(k) or 0.0) for k in ACTIVE_WEIGHTS}
    if any(v < 0 for v in values.values()):
        raise ValueError("recommendation weights must be non-negative")
    total = sum(values.values())
    if total <= 0:
        return PRESETS[DEFAULT_PRESET]
    return RecommendationWeights(**{k: v / total for k, v in values.items()})
