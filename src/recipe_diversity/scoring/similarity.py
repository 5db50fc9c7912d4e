"""
Recipe Diversity - Vector Similarity.

Cosine similarity between recipe embeddings, and history scans that find
the closest previous recipe. Scans always walk the full history: per-user
windows are small, and the closest match is reported back to callers.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

import numpy as np

from recipe_diversity.errors import DimensionMismatchError
from recipe_diversity.models.entities import RecipeMemory, SimilarityResult

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.85
DEFAULT_DECAY_FACTOR = 0.95

SECONDS_PER_DAY = 86_400


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Raises:
        DimensionMismatchError: If the vectors differ in length.

    Returns:
        Similarity in [-1, 1]; 0.0 for empty or zero-norm vectors.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))
    if len(a) == 0:
        return 0.0

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0

    return float(np.clip(np.dot(va, vb) / norm, -1.0, 1.0))


def _scan(
    candidate: Sequence[float],
    history: list[RecipeMemory],
    threshold: float,
    weight_for: Callable[[RecipeMemory], float],
) -> SimilarityResult:
    max_similarity = 0.0
    best: RecipeMemory | None = None

    for record in history:
        if not record.embedding:
            logger.warning(f"Skipping recipe {record.id} in similarity scan: missing embedding")
            continue
        try:
            similarity = cosine_similarity(candidate, record.embedding) * weight_for(record)
        except (ValueError, TypeError) as e:
            logger.warning(f"Skipping recipe {record.id} in similarity scan: {e}")
            continue

        # Floor at 0: anti-correlated recipes are as novel as unrelated ones
        if similarity > max_similarity:
            max_similarity = similarity
            best = record

    return SimilarityResult(
        is_similar=max_similarity >= threshold,
        max_similarity=max_similarity,
        most_similar_match=best,
    )


def check_similarity(
    candidate_embedding: Sequence[float],
    history: list[RecipeMemory],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> SimilarityResult:
    """
    Find the most similar historical recipe.

    Args:
        candidate_embedding: Embedding of the new draft
        history: Recent recipes for the user (any order)
        threshold: Similarity at or above which the draft counts as a near-duplicate

    Returns:
        SimilarityResult with the maximum similarity and the record it came from.
        Empty history always yields is_similar=False, max_similarity=0.0.
    """
    return _scan(candidate_embedding, history, threshold, lambda record: 1.0)


def check_similarity_with_decay(
    candidate_embedding: Sequence[float],
    history: list[RecipeMemory],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    decay_factor: float = DEFAULT_DECAY_FACTOR,
    now: datetime | None = None,
) -> SimilarityResult:
    """
    Like check_similarity, but each similarity is scaled by decay_factor ** age_in_days.

    Recent recipes dominate the signal; a near-identical recipe from a month
    ago weighs far less than one from yesterday.
    """
    now = now or datetime.now(UTC)

    def decay(record: RecipeMemory) -> float:
        age_days = max(0.0, (now - record.created_at).total_seconds() / SECONDS_PER_DAY)
        return decay_factor ** age_days

    return _scan(candidate_embedding, history, threshold, decay)
