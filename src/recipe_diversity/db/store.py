"""
Memory Store Protocol.

Defines the abstract interface for everything the engine persists:
- Recipe memories (accepted recipes with their embeddings)
- Diversity metrics snapshots
- User preferences

The generation path only reads recent history and writes accepted
recipes. Retention cleanup, metrics and preferences are used by
analytics, maintenance jobs and the HTTP layer.
"""

from abc import ABC, abstractmethod

from recipe_diversity.models.entities import (
    DiversityMetrics,
    NewRecipeMemory,
    RecipeMemory,
    UserPreferences,
)


class MemoryStore(ABC):
    """
    Abstract document store for recipe history.

    Implementations must support range queries by (user_id, created_at)
    and atomic single-document creation. Read/write failures surface as
    StoreError.
    """

    # -------------------------------------------------------------------------
    # Recipe memories
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_recent_recipes(self, user_id: str, window_days: int) -> list[RecipeMemory]:
        """
        All of a user's recipes created within the last window_days, newest first.

        An empty result is not an error.
        """
        ...

    @abstractmethod
    async def save_recipe_memory(self, params: NewRecipeMemory) -> str:
        """
        Persist an accepted recipe.

        Assigns a new unique id and stamps created_at/last_accessed_at to now.
        Never called for rejected generation attempts.

        Returns:
            The new recipe id
        """
        ...

    @abstractmethod
    async def get_recipe_by_id(self, recipe_id: str) -> RecipeMemory | None:
        """Get a single recipe memory, or None if it does not exist."""
        ...

    @abstractmethod
    async def mark_accessed(self, recipe_id: str) -> None:
        """Update last_accessed_at (the only field that changes after creation)."""
        ...

    @abstractmethod
    async def cleanup_old_recipes(self, user_id: str, retention_days: int) -> int:
        """
        Delete a user's recipes older than retention_days.

        Returns:
            Number of deleted records
        """
        ...

    @abstractmethod
    async def list_user_ids(self) -> list[str]:
        """Every user with at least one stored recipe (for batch jobs)."""
        ...

    # -------------------------------------------------------------------------
    # Diversity metrics
    # -------------------------------------------------------------------------

    @abstractmethod
    async def save_diversity_metrics(self, metrics: DiversityMetrics) -> None:
        """Store a metrics snapshot."""
        ...

    @abstractmethod
    async def get_latest_diversity_metrics(self, user_id: str) -> DiversityMetrics | None:
        """Most recently calculated snapshot for the user, if any."""
        ...

    # -------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Stored preferences, or None if the user has never saved any."""
        ...

    @abstractmethod
    async def save_preferences(self, preferences: UserPreferences) -> UserPreferences:
        """Create or replace a user's preferences."""
        ...

    @abstractmethod
    async def delete_preferences(self, user_id: str) -> bool:
        """Delete a user's preferences. Returns False if there were none."""
        ...
