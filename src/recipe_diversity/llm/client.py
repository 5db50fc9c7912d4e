"""
Recipe Diversity - OpenAI Client.

Wraps OpenAI with Instructor for guaranteed structured recipe output,
plus the embeddings endpoint for similarity checks.
"""

import logging

import instructor
from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from recipe_diversity.config import settings
from recipe_diversity.models.entities import (
    DiversityConstraints,
    NutritionInfo,
    RecipeDraft,
    RecipeMetadata,
    StructuredIngredient,
    UserPreferences,
)
from recipe_diversity.preferences import preferences_to_prompt_text

logger = logging.getLogger(__name__)

# Singleton raw client, shared by generator and embedder
_client: AsyncOpenAI | None = None


def get_raw_async_client() -> AsyncOpenAI:
    """
    Get the AsyncOpenAI client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        _client = AsyncOpenAI(api_key=settings.openai_api_key)

    return _client


# =============================================================================
# Structured Output Schema
# =============================================================================


class GeneratedRecipe(BaseModel):
    """Schema the model must fill. Converted to RecipeDraft after validation."""

    name: str = Field(description="Short, specific recipe name")
    notes: str = Field(default="", description="Chef notes: what makes this dish work, serving tips")
    ingredients: list[StructuredIngredient] = Field(min_length=1)
    instructions: list[str] = Field(min_length=1, description="Ordered steps")
    servings: int | None = None
    prep_time: int | None = Field(default=None, description="Minutes")
    cook_time: int | None = Field(default=None, description="Minutes")
    calories: float | None = Field(default=None, description="Per serving")
    carbohydrates: float | None = Field(default=None, description="Grams per serving")
    protein: float | None = Field(default=None, description="Grams per serving")
    cuisine: str | None = Field(default=None, description="e.g. turkish, italian, mediterranean")
    primary_protein: str | None = Field(default=None, description="Main protein, e.g. chicken, lentils")
    cooking_method: str | None = Field(default=None, description="Main method, e.g. baking, grilling")
    difficulty: str | None = Field(default=None, description="easy, medium or hard")
    dietary_tags: list[str] = Field(default_factory=list)

    def to_draft(self, meal_type: str) -> RecipeDraft:
        return RecipeDraft(
            name=self.name,
            notes=self.notes,
            ingredients=list(self.ingredients),
            instructions=self.instructions,
            servings=self.servings,
            prep_time=self.prep_time,
            cook_time=self.cook_time,
            nutrition=NutritionInfo(
                calories=self.calories,
                carbohydrates=self.carbohydrates,
                protein=self.protein,
            ),
            metadata=RecipeMetadata(
                cuisine=self.cuisine,
                primary_protein=self.primary_protein,
                cooking_method=self.cooking_method,
                meal_type=meal_type,
                dietary_tags=self.dietary_tags,
                prep_time=self.prep_time,
                difficulty=self.difficulty,
            ),
        )


SYSTEM_PROMPT = (
    "You are a recipe developer. Create one complete, cookable recipe for the "
    "requested category. Fill every metadata field you can."
)


def build_user_prompt(
    meal_type: str,
    style_type: str,
    constraints: DiversityConstraints | None,
    preferences: UserPreferences | None = None,
) -> str:
    """Request text: category plus any variety hints and user preferences."""
    lines = [f"Category: {meal_type}", f"Style: {style_type}"]
    hints = constraints.to_prompt_text() if constraints else ""
    if hints:
        lines.append("")
        lines.append("Variety hints from the user's recent recipes:")
        lines.append(hints)
    preference_text = preferences_to_prompt_text(preferences)
    if preference_text:
        lines.append("")
        lines.append("User preferences:")
        lines.append(preference_text)
    return "\n".join(lines)


# =============================================================================
# Collaborators
# =============================================================================


class OpenAIRecipeGenerator:
    """RecipeGenerator backed by an Instructor-wrapped chat model."""

    def __init__(
        self,
        model: str | None = None,
        client: AsyncOpenAI | None = None,
        max_retries: int = 2,
    ):
        self.model = model or settings.generation_model
        self._client = instructor.from_openai(client or get_raw_async_client())
        self.max_retries = max_retries

    async def generate(
        self,
        meal_type: str,
        style_type: str,
        constraints: DiversityConstraints | None,
        temperature: float,
        preferences: UserPreferences | None = None,
    ) -> RecipeDraft | None:
        """
        Generate one recipe.

        Args:
            meal_type: Category, e.g. "Kahvaltı" or "dinner"
            style_type: Subcategory within the meal type
            constraints: Avoid/suggest hints, or None for a first recipe
            temperature: Sampling temperature (raised on each retry)
            preferences: Diet, allergens and goals to respect, if any

        Returns:
            RecipeDraft, or None if the model produced nothing usable
        """
        try:
            result = await self._client.chat.completions.create(
                model=self.model,
                response_model=GeneratedRecipe,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(meal_type, style_type, constraints, preferences)},
                ],
                temperature=temperature,
                max_retries=self.max_retries,
            )
        except Exception as e:
            logger.error(f"Recipe generation failed ({self.model}, t={temperature}): {e}")
            raise

        if result is None:
            return None
        return result.to_draft(meal_type)


class OpenAIEmbedder:
    """Embedder backed by the OpenAI embeddings endpoint."""

    def __init__(self, model: str | None = None, client: AsyncOpenAI | None = None):
        self.model = model or settings.embedding_model
        self._client = client or get_raw_async_client()

    async def embed(self, text: str) -> list[float]:
        response = await self._client.embeddings.create(model=self.model, input=text)
        return list(response.data[0].embedding)
