"""
Recipe Diversity - Scoring.

- similarity: embedding cosine similarity and history scans
- diversity: component scores, composite score, constraint builder
- normalize: table-driven protein/method/ingredient normalization
"""

from recipe_diversity.scoring.diversity import (
    DIVERSITY_WEIGHTS,
    DiversityScorer,
    DiversityWeights,
    validate_weights,
)
from recipe_diversity.scoring.similarity import (
    check_similarity,
    check_similarity_with_decay,
    cosine_similarity,
)

__all__ = [
    "DIVERSITY_WEIGHTS",
    "DiversityScorer",
    "DiversityWeights",
    "check_similarity",
    "check_similarity_with_decay",
    "cosine_similarity",
    "validate_weights",
]
