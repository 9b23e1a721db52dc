"""
Content similarity between recipes (tags + ingredients).

Used for the similarity-to-likes sub-score and for the "alternatives"
lookup shown next to a recipe. No embeddings: plain set overlap.
"""
from __future__ import annotations

from typing import List, Sequence

import numpy as np

from core.models.recipe import Recipe

NEUTRAL_SIMILARITY = 0.5


def _overlap(source: set[str], target: set[str]) -> float:
    return len(source & target) / max(len(source), 1)


def similarity_to_likes(
    recipe: Recipe,
    liked_recipes: Sequence[Recipe],
    liked_foods: Sequence[str] = (),
) -> float:
    """
    0.7 × mean tag overlap with liked recipes + 0.3 × share of liked foods
    found in the ingredients. Neutral 0.5 when there is nothing to compare.
    """
    foods = [f.strip().lower() for f in liked_foods if f and f.strip()]
    if not liked_recipes and not foods:
        return NEUTRAL_SIMILARITY

    score = 0.0
    if liked_recipes:
        tags = {t.lower() for t in recipe.tags}
        per_like = [_overlap(tags, {t.lower() for t in liked.tags}) for liked in liked_recipes]
        score += float(np.mean(per_like)) * 0.7

    if foods:
        ingredients = [i.lower() for i in recipe.ingredients]
        hits = sum(1 for f in foods if any(f in ing for ing in ingredients))
        score += hits / len(foods) * 0.3

    return min(score, 1.0)


def content_similarity(source: Recipe, target: Recipe) -> float:
    src_ing = {i.lower() for i in source.ingredients}
    tgt_ing = {i.lower() for i in target.ingredients}
    src_tags = {t.lower() for t in source.tags}
    tgt_tags = {t.lower() for t in target.tags}
    return _overlap(src_ing, tgt_ing) * 0.7 + _overlap(src_tags, tgt_tags) * 0.3


def find_similar_recipes(recipe: Recipe, pool: Sequence[Recipe], count: int = 3) -> List[Recipe]:
    """Most similar recipes to `recipe` (itself excluded), ties in pool order."""
    others = [r for r in pool if r.id != recipe.id]
    ranked = sorted(others, key=lambda r: content_similarity(recipe, r), reverse=True)
    return ranked[: max(count, 0)]
