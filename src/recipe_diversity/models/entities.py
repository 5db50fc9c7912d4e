"""
Recipe Diversity - Entity Models.

These models map to the Supabase tables the engine owns
(recipe_memory, diversity_metrics, user_preferences) plus the ephemeral
values passed between scorer, orchestrator and generator.
"""

import json
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Recipe Content
# =============================================================================


class RecipeMetadata(BaseModel):
    """
    Classification tags attached by the generator.

    Every field is optional. A missing value means "unknown" and must never
    count as a match against history.
    """

    cuisine: str | None = None
    primary_protein: str | None = None
    cooking_method: str | None = None
    meal_type: str | None = None
    dietary_tags: list[str] = Field(default_factory=list)
    prep_time: int | None = None
    difficulty: str | None = None


class StructuredIngredient(BaseModel):
    """An ingredient line with its quantity kept apart."""

    item: str
    quantity: str | None = None


# Legacy recipes stored ingredients as bare strings
IngredientEntry = str | StructuredIngredient


def ingredient_name(entry: IngredientEntry) -> str:
    """Return the ingredient name for either entry shape."""
    match entry:
        case StructuredIngredient(item=item):
            return item
        case str():
            return entry
    raise TypeError(f"Unsupported ingredient entry: {type(entry).__name__}")


class NutritionInfo(BaseModel):
    """Per-serving nutrition. Absent until computed."""

    calories: float | None = None
    carbohydrates: float | None = None
    protein: float | None = None
    fat: float | None = None
    fiber: float | None = None
    sugar: float | None = None


class RecipeDraft(BaseModel):
    """A generated recipe before persistence."""

    name: str
    notes: str = ""
    ingredients: list[IngredientEntry] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    servings: int | None = None
    prep_time: int | None = None
    cook_time: int | None = None
    nutrition: NutritionInfo = Field(default_factory=NutritionInfo)
    metadata: RecipeMetadata = Field(default_factory=RecipeMetadata)

    def is_complete(self) -> bool:
        """A draft can only be accepted with a name, ingredients and steps."""
        return bool(self.name.strip() and self.ingredients and self.instructions)


# =============================================================================
# Persisted Memory
# =============================================================================


class NewRecipeMemory(BaseModel):
    """Parameters for MemoryStore.save_recipe_memory (id and timestamps are store-assigned)."""

    user_id: str
    conversation_id: str
    recipe: RecipeDraft
    embedding: list[float]
    embedding_model: str
    attempt_number: int = 1
    was_retried: bool = False
    # Closest-neighbor similarity and composite diversity at acceptance time
    similarity_score: float | None = None
    diversity_score: float | None = None


class RecipeMemory(NewRecipeMemory):
    """
    An accepted recipe in a user's history.

    Never mutated after creation except last_accessed_at. The embedding is
    None when the stored vector is missing or unreadable; similarity scans
    skip such records.
    """

    id: str
    embedding: list[float] | None = None
    created_at: datetime
    last_accessed_at: datetime

    @field_validator("embedding", mode="before")
    @classmethod
    def _parse_vector(cls, value):
        # pgvector columns come back from PostgREST as "[0.1,0.2,...]"
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                return None
        if value is not None and not isinstance(value, list):
            return None
        return value

    @property
    def metadata(self) -> RecipeMetadata:
        return self.recipe.metadata


# =============================================================================
# Scoring Values
# =============================================================================


class SimilarityResult(BaseModel):
    """Outcome of scanning a candidate embedding against history."""

    is_similar: bool = False
    max_similarity: float = 0.0
    most_similar_match: RecipeMemory | None = None


class DiversityScore(BaseModel):
    """Per-candidate diversity breakdown. Never persisted on its own."""

    cuisine_variety: float
    protein_diversity: float
    cooking_method_variety: float
    ingredient_novelty: float
    semantic_novelty: float
    overall_score: float
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)


class DiversityConstraints(BaseModel):
    """Avoid/suggest hints fed forward into the next generation call."""

    avoid_cuisines: list[str] = Field(default_factory=list)
    avoid_proteins: list[str] = Field(default_factory=list)
    avoid_cooking_methods: list[str] = Field(default_factory=list)
    suggest_cuisines: list[str] = Field(default_factory=list)
    suggest_proteins: list[str] = Field(default_factory=list)
    suggest_vegetables: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())

    def to_prompt_text(self) -> str:
        """Render the constraints as a compact hint block for the generator prompt."""
        lines = []
        if self.avoid_cuisines:
            lines.append(f"Avoid cuisines: {', '.join(self.avoid_cuisines)}")
        if self.avoid_proteins:
            lines.append(f"Avoid proteins: {', '.join(self.avoid_proteins)}")
        if self.avoid_cooking_methods:
            lines.append(f"Avoid cooking methods: {', '.join(self.avoid_cooking_methods)}")
        if self.suggest_cuisines:
            lines.append(f"Consider cuisines: {', '.join(self.suggest_cuisines)}")
        if self.suggest_proteins:
            lines.append(f"Consider proteins: {', '.join(self.suggest_proteins)}")
        if self.suggest_vegetables:
            lines.append(f"Consider vegetables: {', '.join(self.suggest_vegetables)}")
        return "\n".join(lines)


# =============================================================================
# Analytics
# =============================================================================


Trend = Literal["improving", "declining", "stable"]


class DiversityMetrics(BaseModel):
    """One analytics snapshot per user per calculation."""

    user_id: str
    window_start: datetime
    window_end: datetime
    cuisine_distribution: dict[str, int] = Field(default_factory=dict)
    protein_distribution: dict[str, int] = Field(default_factory=dict)
    method_distribution: dict[str, int] = Field(default_factory=dict)
    average_diversity_score: float = 0.0
    trend: Trend = "stable"
    underrepresented_cuisines: list[str] = Field(default_factory=list)
    underrepresented_proteins: list[str] = Field(default_factory=list)
    underrepresented_methods: list[str] = Field(default_factory=list)
    total_recipes: int = 0
    unique_cuisines: int = 0
    unique_proteins: int = 0
    calculated_at: datetime


# =============================================================================
# Preferences
# =============================================================================


class UserPreferences(BaseModel):
    """Per-user generation preferences. All-empty by default."""

    user_id: str
    dietary_restrictions: list[str] = Field(default_factory=list)
    allergens: list[str] = Field(default_factory=list)
    disliked_ingredients: list[str] = Field(default_factory=list)
    favorite_cuisines: list[str] = Field(default_factory=list)
    favorite_proteins: list[str] = Field(default_factory=list)
    favorite_cooking_methods: list[str] = Field(default_factory=list)
    health_goals: list[str] = Field(default_factory=list)
    calorie_target: int | None = None
    updated_at: datetime | None = None


class PreferencesUpdate(BaseModel):
    """Partial update: only fields explicitly set are merged."""

    dietary_restrictions: list[str] | None = None
    allergens: list[str] | None = None
    disliked_ingredients: list[str] | None = None
    favorite_cuisines: list[str] | None = None
    favorite_proteins: list[str] | None = None
    favorite_cooking_methods: list[str] | None = None
    health_goals: list[str] | None = None
    calorie_target: int | None = None
