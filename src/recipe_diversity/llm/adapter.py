"""
Generator and Embedder Protocols.

The orchestrator treats the LLM and the embedding model as opaque
collaborators. Anything with a matching async method can be injected:
the OpenAI implementations in recipe_diversity.llm.client, or mocks in
tests.
"""

from typing import Protocol, runtime_checkable

from recipe_diversity.models.entities import DiversityConstraints, RecipeDraft, UserPreferences


@runtime_checkable
class RecipeGenerator(Protocol):
    """Produces one recipe draft per call."""

    async def generate(
        self,
        meal_type: str,
        style_type: str,
        constraints: DiversityConstraints | None,
        temperature: float,
        preferences: UserPreferences | None = None,
    ) -> RecipeDraft | None:
        """
        Generate a recipe for the category, steered by the constraints
        and the user's stored preferences.

        Returns None (or raises) when generation fails. Either is fatal to
        the current request; the orchestrator does not retry it.
        """
        ...


@runtime_checkable
class Embedder(Protocol):
    """Turns text into a fixed-dimension vector."""

    model: str

    async def embed(self, text: str) -> list[float]:
        """Embed text. Dimension is constant for a given model."""
        ...
