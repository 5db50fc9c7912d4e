"""Recipe Diversity - Entity models."""

from recipe_diversity.models.entities import (
    DiversityConstraints,
    DiversityMetrics,
    DiversityScore,
    IngredientEntry,
    NewRecipeMemory,
    NutritionInfo,
    PreferencesUpdate,
    RecipeDraft,
    RecipeMemory,
    RecipeMetadata,
    SimilarityResult,
    StructuredIngredient,
    Trend,
    UserPreferences,
    ingredient_name,
)

__all__ = [
    "DiversityConstraints",
    "DiversityMetrics",
    "DiversityScore",
    "IngredientEntry",
    "NewRecipeMemory",
    "NutritionInfo",
    "PreferencesUpdate",
    "RecipeDraft",
    "RecipeMemory",
    "RecipeMetadata",
    "SimilarityResult",
    "StructuredIngredient",
    "Trend",
    "UserPreferences",
    "ingredient_name",
]
