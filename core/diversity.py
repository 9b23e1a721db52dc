"""
Greedy diversity pass over an already-ranked list.

Single pass, O(n), deterministic. It does not look for the globally most
varied subset; it only keeps the top of the list from repeating the same
main ingredients.
"""
from __future__ import annotations

import logging
from typing import List, Sequence

from core.models.recipe import Recipe, ScoredRecipe

_LOG = logging.getLogger(__name__)

MAIN_INGREDIENT_COUNT = 3


def main_ingredients(recipe: Recipe) -> List[str]:
    """Lower-cased first word of each of the first three ingredients."""
    out = []
    for name in recipe.ingredients[:MAIN_INGREDIENT_COUNT]:
        words = name.lower().split()
        out.append(words[0] if words else "")
    return out


def overlap_ratio(mains: Sequence[str], used: set[str]) -> float:
    return sum(1 for m in mains if m in used) / max(len(mains), 1)


class DiversityRanker:
    def __init__(self, max_overlap: float = 0.5, strong_match: float = 0.85) -> None:
        self.max_overlap = max_overlap
        # anything scoring above this is kept even if it repeats ingredients
        self.strong_match = strong_match

    def diversify(self, ranked: Sequence[ScoredRecipe], limit: int) -> List[ScoredRecipe]:
        selected: List[ScoredRecipe] = []
        used: set[str] = set()

        for cand in ranked:
            if len(selected) >= limit:
                break
            mains = main_ingredients(cand.recipe)
            if overlap_ratio(mains, used) < self.max_overlap or cand.total_score > self.strong_match:
                selected.append(cand)
                used.update(mains)

        _LOG.debug("diversity pass kept %d of %d", len(selected), len(ranked))
        return selected
