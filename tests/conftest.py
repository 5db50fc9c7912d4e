"""
Pytest configuration and fixtures for recipe diversity tests.
"""

import os
from datetime import UTC, datetime, timedelta

import pytest

# Set test environment before importing recipe_diversity modules
os.environ.setdefault("OPENAI_API_KEY", "test-key-not-real")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")
os.environ.setdefault("ENVIRONMENT", "development")

from recipe_diversity.db.store import MemoryStore  # noqa: E402
from recipe_diversity.models.entities import (  # noqa: E402
    DiversityMetrics,
    NewRecipeMemory,
    RecipeDraft,
    RecipeMemory,
    RecipeMetadata,
    UserPreferences,
)


class InMemoryStore(MemoryStore):
    """MemoryStore over plain lists, with call records for assertions."""

    def __init__(self, recipes: list[RecipeMemory] | None = None):
        self.recipes: list[RecipeMemory] = list(recipes or [])
        self.metrics: list[DiversityMetrics] = []
        self.preferences: dict[str, UserPreferences] = {}
        self.saved: list[NewRecipeMemory] = []
        self.accessed: list[str] = []

    async def get_recent_recipes(self, user_id: str, window_days: int) -> list[RecipeMemory]:
        cutoff = datetime.now(UTC) - timedelta(days=window_days)
        recent = [r for r in self.recipes if r.user_id == user_id and r.created_at >= cutoff]
        return sorted(recent, key=lambda r: r.created_at, reverse=True)

    async def save_recipe_memory(self, params: NewRecipeMemory) -> str:
        now = datetime.now(UTC)
        recipe_id = f"recipe-{len(self.recipes) + 1}"
        self.recipes.append(
            RecipeMemory(id=recipe_id, created_at=now, last_accessed_at=now, **params.model_dump())
        )
        self.saved.append(params)
        return recipe_id

    async def get_recipe_by_id(self, recipe_id: str) -> RecipeMemory | None:
        return next((r for r in self.recipes if r.id == recipe_id), None)

    async def mark_accessed(self, recipe_id: str) -> None:
        self.accessed.append(recipe_id)

    async def cleanup_old_recipes(self, user_id: str, retention_days: int) -> int:
        cutoff = datetime.now(UTC) - timedelta(days=retention_days)
        keep = [r for r in self.recipes if r.user_id != user_id or r.created_at >= cutoff]
        deleted = len(self.recipes) - len(keep)
        self.recipes = keep
        return deleted

    async def list_user_ids(self) -> list[str]:
        return sorted({r.user_id for r in self.recipes})

    async def save_diversity_metrics(self, metrics: DiversityMetrics) -> None:
        self.metrics.append(metrics)

    async def get_latest_diversity_metrics(self, user_id: str) -> DiversityMetrics | None:
        mine = [m for m in self.metrics if m.user_id == user_id]
        return max(mine, key=lambda m: m.calculated_at, default=None)

    async def get_preferences(self, user_id: str) -> UserPreferences | None:
        return self.preferences.get(user_id)

    async def save_preferences(self, preferences: UserPreferences) -> UserPreferences:
        self.preferences[preferences.user_id] = preferences
        return preferences

    async def delete_preferences(self, user_id: str) -> bool:
        return self.preferences.pop(user_id, None) is not None


def build_draft(
    name: str = "Test Recipe",
    *,
    cuisine: str | None = "turkish",
    protein: str | None = "chicken",
    method: str | None = "baking",
    ingredients: list | None = None,
    notes: str = "",
) -> RecipeDraft:
    return RecipeDraft(
        name=name,
        notes=notes,
        ingredients=ingredients if ingredients is not None else ["tavuk", "domates"],
        instructions=["Prepare", "Cook"],
        metadata=RecipeMetadata(cuisine=cuisine, primary_protein=protein, cooking_method=method),
    )


def build_memory(
    name: str = "Old Recipe",
    *,
    user_id: str = "user-1",
    days_ago: float = 1.0,
    embedding: list[float] | None = None,
    diversity_score: float | None = None,
    recipe_id: str | None = None,
    **draft_fields,
) -> RecipeMemory:
    created_at = datetime.now(UTC) - timedelta(days=days_ago)
    return RecipeMemory(
        id=recipe_id or f"mem-{name.lower().replace(' ', '-')}-{days_ago}",
        user_id=user_id,
        conversation_id="conv-1",
        recipe=build_draft(name, **draft_fields),
        embedding=embedding if embedding is not None else [1.0, 0.0, 0.0],
        embedding_model="text-embedding-3-small",
        diversity_score=diversity_score,
        created_at=created_at,
        last_accessed_at=created_at,
    )


@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def make_draft():
    return build_draft


@pytest.fixture
def make_memory():
    return build_memory
