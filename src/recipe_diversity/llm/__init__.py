"""Recipe Diversity - LLM collaborators (generator and embedder)."""

from recipe_diversity.llm.adapter import Embedder, RecipeGenerator

__all__ = ["Embedder", "RecipeGenerator"]
