"""
Recipe Diversity - Diversity Scorer.

Scores a candidate recipe against the user's recent history on four
independent axes, then combines them with the semantic novelty from the
embedding scan:

- Cuisine rotation: recency-weighted repeats of the same cuisine
- Protein variety: recency-weighted repeats of the same protein bucket
- Cooking-method variety: recency-weighted repeats of the same method bucket
- Ingredient novelty: average Jaccard overlap with the last few recipes

Each axis looks at a different trailing window because repetition
tolerance differs: a repeated cuisine is noticed sooner than a repeated
cooking method.

Also builds the avoid/suggest constraints fed into the next generation.
"""

import math
from collections import Counter
from dataclasses import dataclass

from recipe_diversity.errors import ConfigurationError
from recipe_diversity.models.entities import (
    DiversityConstraints,
    DiversityScore,
    RecipeDraft,
    RecipeMemory,
)
from recipe_diversity.scoring.normalize import (
    REFERENCE_CUISINES,
    classify_ingredient,
    distinguishing_ingredients,
    normalize_cooking_method,
    normalize_protein,
    normalize_tag,
)


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class DiversityWeights:
    """
    Weights for the composite score. Must sum to 1.0.

    Cuisine is weighted 0 so recipes stay within familiar cuisines;
    variety comes from protein, method and ingredients instead. The
    cuisine sub-score is still computed and reported.
    """

    semantic: float = 0.20
    cuisine: float = 0.00
    protein: float = 0.20
    cooking_method: float = 0.20
    ingredient: float = 0.40

    @property
    def total(self) -> float:
        return self.semantic + self.cuisine + self.protein + self.cooking_method + self.ingredient

    @property
    def cuisine_constraints_enabled(self) -> bool:
        """Cuisine avoid/suggest hints only make sense while cuisine carries weight."""
        return self.cuisine > 0


WEIGHT_TOLERANCE = 0.001


def validate_weights(weights: DiversityWeights) -> DiversityWeights:
    """Raise ConfigurationError unless the weights are non-negative and sum to 1.0."""
    if min(weights.semantic, weights.cuisine, weights.protein, weights.cooking_method, weights.ingredient) < 0:
        raise ConfigurationError(f"Diversity weights must be non-negative: {weights}")
    if abs(weights.total - 1.0) > WEIGHT_TOLERANCE:
        raise ConfigurationError(f"Diversity weights must sum to 1.0, got {weights.total:.4f}: {weights}")
    return weights


DIVERSITY_WEIGHTS = validate_weights(DiversityWeights())

# Trailing windows (number of most recent records)
CUISINE_WINDOW = 10
PROTEIN_WINDOW = 8
COOKING_METHOD_WINDOW = 12
INGREDIENT_WINDOW = 5

# (decay scale, saturation): weight exp(-index/scale), score 1 - weighted/saturation
CUISINE_DECAY = (3.0, 3.0)
PROTEIN_DECAY = (2.0, 4.0)
COOKING_METHOD_DECAY = (4.0, 5.0)

NEUTRAL_SCORE = 0.5
EMPTY_HISTORY_SCORE = 1.0

STRENGTH_THRESHOLD = 0.7
WEAKNESS_THRESHOLD = 0.4
LOW_OVERALL_THRESHOLD = 0.6
DEFAULT_STRENGTH = "Acceptable variety across dimensions"
DEFAULT_WEAKNESS = "Could be more diverse overall"

# Constraint builder
CONSTRAINT_WINDOW = 10
AVOID_SHARE = 0.4
SUGGESTED_PROTEINS = ("chicken", "fish", "beef", "vegetarian", "lamb")
SUGGEST_BELOW_COUNT = 2
MAX_SUGGESTED_CUISINES = 3
MAX_SUGGESTED_VEGETABLES = 3


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


# =============================================================================
# Component Scores
# =============================================================================


def _rotation_score(
    candidate_value: str | None,
    history_values: list[str | None],
    decay: tuple[float, float],
) -> float:
    """Shared shape of the cuisine/protein/method scorers."""
    if candidate_value is None:
        return NEUTRAL_SCORE
    if not history_values:
        return EMPTY_HISTORY_SCORE

    scale, saturation = decay
    weighted_count = sum(
        math.exp(-index / scale)
        for index, value in enumerate(history_values)
        if value is not None and value == candidate_value
    )
    return max(0.0, 1.0 - weighted_count / saturation)


def score_cuisine_rotation(candidate: RecipeDraft, history: list[RecipeMemory]) -> float:
    """Case-insensitive exact cuisine repeats over the last 10 recipes."""
    window = history[:CUISINE_WINDOW]
    return _rotation_score(
        normalize_tag(candidate.metadata.cuisine),
        [normalize_tag(record.metadata.cuisine) for record in window],
        CUISINE_DECAY,
    )


def score_protein_variety(candidate: RecipeDraft, history: list[RecipeMemory]) -> float:
    """Protein bucket repeats over the last 8 recipes."""
    window = history[:PROTEIN_WINDOW]
    return _rotation_score(
        normalize_protein(candidate.metadata.primary_protein),
        [normalize_protein(record.metadata.primary_protein) for record in window],
        PROTEIN_DECAY,
    )


def score_cooking_method_variety(candidate: RecipeDraft, history: list[RecipeMemory]) -> float:
    """Cooking method bucket repeats over the last 12 recipes."""
    window = history[:COOKING_METHOD_WINDOW]
    return _rotation_score(
        normalize_cooking_method(candidate.metadata.cooking_method),
        [normalize_cooking_method(record.metadata.cooking_method) for record in window],
        COOKING_METHOD_DECAY,
    )


def jaccard(a: set[str], b: set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def score_ingredient_novelty(candidate: RecipeDraft, history: list[RecipeMemory]) -> float:
    """
    1 - 2 * average Jaccard overlap with the last 5 recipes.

    Overlap of 50% or more drives the score to zero. Pantry staples are
    ignored on both sides.
    """
    candidate_set = distinguishing_ingredients(candidate.ingredients)
    if not candidate_set:
        return NEUTRAL_SCORE

    window = history[:INGREDIENT_WINDOW]
    if not window:
        return EMPTY_HISTORY_SCORE

    overlaps = [
        jaccard(candidate_set, distinguishing_ingredients(record.recipe.ingredients))
        for record in window
    ]
    average_overlap = sum(overlaps) / len(overlaps)
    return max(0.0, 1.0 - 2.0 * average_overlap)


# =============================================================================
# Scorer
# =============================================================================


class DiversityScorer:
    """Combines the component scores with a validated weight map."""

    def __init__(self, weights: DiversityWeights = DIVERSITY_WEIGHTS):
        self.weights = validate_weights(weights)

    def calculate_diversity_score(
        self,
        candidate: RecipeDraft,
        history: list[RecipeMemory],
        max_similarity: float = 0.0,
    ) -> DiversityScore:
        """
        Score a candidate against newest-first history.

        Args:
            candidate: The generated draft
            history: Recent recipes, newest first
            max_similarity: Highest embedding similarity found against history

        Returns:
            DiversityScore with sub-scores, overall score in [0, 1] and feedback
        """
        cuisine = _clamp(score_cuisine_rotation(candidate, history))
        protein = _clamp(score_protein_variety(candidate, history))
        method = _clamp(score_cooking_method_variety(candidate, history))
        ingredient = _clamp(score_ingredient_novelty(candidate, history))
        semantic = _clamp(1.0 - max_similarity)

        w = self.weights
        overall = _clamp(
            semantic * w.semantic
            + cuisine * w.cuisine
            + protein * w.protein
            + method * w.cooking_method
            + ingredient * w.ingredient
        )

        strengths, weaknesses = _feedback(candidate, cuisine, protein, method, ingredient, overall)

        return DiversityScore(
            cuisine_variety=cuisine,
            protein_diversity=protein,
            cooking_method_variety=method,
            ingredient_novelty=ingredient,
            semantic_novelty=semantic,
            overall_score=overall,
            strengths=strengths,
            weaknesses=weaknesses,
        )

    def build_constraints(
        self,
        history: list[RecipeMemory],
        window_size: int = CONSTRAINT_WINDOW,
    ) -> DiversityConstraints:
        """
        Derive avoid/suggest hints from the most recent recipes.

        Anything making up 40% or more of the window is avoided. Suggested
        proteins are the staples seen fewer than twice. Cuisine hints stay
        empty while the cuisine weight is zero.
        """
        window = history[:window_size]
        if not window:
            return DiversityConstraints()

        cuisines = Counter(v for v in (normalize_tag(r.metadata.cuisine) for r in window) if v)
        proteins = Counter(v for v in (normalize_protein(r.metadata.primary_protein) for r in window) if v)
        methods = Counter(v for v in (normalize_cooking_method(r.metadata.cooking_method) for r in window) if v)

        avoid_at = AVOID_SHARE * len(window)

        def overused(counts: Counter) -> list[str]:
            return [value for value, count in counts.most_common() if count >= avoid_at]

        avoid_proteins = overused(proteins)
        suggest_proteins = [
            protein
            for protein in SUGGESTED_PROTEINS
            if proteins[protein] < SUGGEST_BELOW_COUNT and protein not in avoid_proteins
        ]

        avoid_cuisines: list[str] = []
        suggest_cuisines: list[str] = []
        if self.weights.cuisine_constraints_enabled:
            avoid_cuisines = overused(cuisines)
            suggest_cuisines = [
                cuisine
                for cuisine in REFERENCE_CUISINES
                if cuisines[cuisine] < SUGGEST_BELOW_COUNT and cuisine not in avoid_cuisines
            ][:MAX_SUGGESTED_CUISINES]

        return DiversityConstraints(
            avoid_cuisines=avoid_cuisines,
            avoid_proteins=avoid_proteins,
            avoid_cooking_methods=overused(methods),
            suggest_cuisines=suggest_cuisines,
            suggest_proteins=suggest_proteins,
            suggest_vegetables=least_used_vegetables(window),
        )


def least_used_vegetables(
    history: list[RecipeMemory],
    count: int = MAX_SUGGESTED_VEGETABLES,
) -> list[str]:
    """Vegetables that appeared in the window, least-used first."""
    frequency: Counter = Counter()
    for record in history:
        for name in distinguishing_ingredients(record.recipe.ingredients):
            if classify_ingredient(name) == "vegetable":
                frequency[name] += 1

    ranked = sorted(frequency.items(), key=lambda item: (item[1], item[0]))
    return [name for name, _ in ranked[:count]]


def _feedback(
    candidate: RecipeDraft,
    cuisine: float,
    protein: float,
    method: float,
    ingredient: float,
    overall: float,
) -> tuple[list[str], list[str]]:
    meta = candidate.metadata
    strengths: list[str] = []
    weaknesses: list[str] = []

    if cuisine >= STRENGTH_THRESHOLD:
        strengths.append(f"Fresh cuisine choice: {meta.cuisine}")
    elif cuisine < WEAKNESS_THRESHOLD:
        weaknesses.append(f"Cuisine repeated recently: {meta.cuisine}")

    if protein >= STRENGTH_THRESHOLD:
        strengths.append(f"Varied protein: {meta.primary_protein}")
    elif protein < WEAKNESS_THRESHOLD:
        weaknesses.append(f"Protein used often lately: {meta.primary_protein}")

    if method >= STRENGTH_THRESHOLD:
        strengths.append(f"Different cooking method: {meta.cooking_method}")
    elif method < WEAKNESS_THRESHOLD:
        weaknesses.append(f"Cooking method used often lately: {meta.cooking_method}")

    if ingredient >= STRENGTH_THRESHOLD:
        strengths.append("Novel ingredient combination")
    elif ingredient < WEAKNESS_THRESHOLD:
        weaknesses.append("Ingredients overlap heavily with recent recipes")

    if not strengths:
        strengths.append(DEFAULT_STRENGTH)
    if not weaknesses and overall < LOW_OVERALL_THRESHOLD:
        weaknesses.append(DEFAULT_WEAKNESS)

    return strengths, weaknesses
