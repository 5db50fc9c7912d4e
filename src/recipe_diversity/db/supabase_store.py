"""
Recipe Diversity - Supabase Memory Store.

MemoryStore implementation on three Supabase tables:
- recipe_memory: accepted recipes (recipe jsonb, embedding vector)
- diversity_metrics: analytics snapshots
- user_preferences: one row per user (unique on user_id)
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import ValidationError
from supabase import Client

from recipe_diversity.db.store import MemoryStore
from recipe_diversity.errors import StoreError
from recipe_diversity.models.entities import (
    DiversityMetrics,
    NewRecipeMemory,
    RecipeMemory,
    UserPreferences,
)

logger = logging.getLogger(__name__)

RECIPE_TABLE = "recipe_memory"
METRICS_TABLE = "diversity_metrics"
PREFERENCES_TABLE = "user_preferences"


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SupabaseMemoryStore(MemoryStore):
    """MemoryStore backed by Supabase (PostgREST + pgvector)."""

    def __init__(self, client: Client | None = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            from recipe_diversity.db.client import get_client

            self._client = get_client()
        return self._client

    def _execute(self, operation: str, query) -> Any:
        """Run a query builder, converting client failures into StoreError."""
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"Supabase {operation} failed: {e}")
            raise StoreError(operation, str(e)) from e

    @staticmethod
    def _parse_memory(row: dict) -> RecipeMemory | None:
        """Parse one recipe_memory row; a malformed row is logged and dropped."""
        try:
            return RecipeMemory.model_validate(row)
        except ValidationError as e:
            logger.warning(f"Skipping malformed recipe memory {row.get('id')}: {e.error_count()} invalid field(s)")
            return None

    # =========================================================================
    # Recipe memories
    # =========================================================================

    async def get_recent_recipes(self, user_id: str, window_days: int) -> list[RecipeMemory]:
        cutoff = (_utc_now() - timedelta(days=window_days)).isoformat()
        result = self._execute(
            "get_recent_recipes",
            self.client.table(RECIPE_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .gte("created_at", cutoff)
            .order("created_at", desc=True),
        )
        memories = (self._parse_memory(row) for row in result.data or [])
        return [memory for memory in memories if memory is not None]

    async def save_recipe_memory(self, params: NewRecipeMemory) -> str:
        now = _utc_now().isoformat()
        recipe_id = str(uuid.uuid4())
        row = {
            "id": recipe_id,
            **params.model_dump(mode="json"),
            "created_at": now,
            "last_accessed_at": now,
        }
        self._execute("save_recipe_memory", self.client.table(RECIPE_TABLE).insert(row))
        logger.info(f"Saved recipe memory {recipe_id} for user {params.user_id}")
        return recipe_id

    async def get_recipe_by_id(self, recipe_id: str) -> RecipeMemory | None:
        result = self._execute(
            "get_recipe_by_id",
            self.client.table(RECIPE_TABLE).select("*").eq("id", recipe_id).limit(1),
        )
        if not result.data:
            return None
        return self._parse_memory(result.data[0])

    async def mark_accessed(self, recipe_id: str) -> None:
        self._execute(
            "mark_accessed",
            self.client.table(RECIPE_TABLE)
            .update({"last_accessed_at": _utc_now().isoformat()})
            .eq("id", recipe_id),
        )

    async def cleanup_old_recipes(self, user_id: str, retention_days: int) -> int:
        cutoff = (_utc_now() - timedelta(days=retention_days)).isoformat()
        result = self._execute(
            "cleanup_old_recipes",
            self.client.table(RECIPE_TABLE)
            .delete()
            .eq("user_id", user_id)
            .lt("created_at", cutoff),
        )
        deleted = len(result.data or [])
        if deleted:
            logger.info(f"Deleted {deleted} recipe memories older than {retention_days}d for user {user_id}")
        return deleted

    async def list_user_ids(self) -> list[str]:
        result = self._execute(
            "list_user_ids",
            self.client.table(RECIPE_TABLE).select("user_id"),
        )
        return sorted({row["user_id"] for row in result.data or []})

    # =========================================================================
    # Diversity metrics
    # =========================================================================

    async def save_diversity_metrics(self, metrics: DiversityMetrics) -> None:
        self._execute(
            "save_diversity_metrics",
            self.client.table(METRICS_TABLE).insert(metrics.model_dump(mode="json")),
        )

    async def get_latest_diversity_metrics(self, user_id: str) -> DiversityMetrics | None:
        result = self._execute(
            "get_latest_diversity_metrics",
            self.client.table(METRICS_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("calculated_at", desc=True)
            .limit(1),
        )
        if not result.data:
            return None
        return DiversityMetrics.model_validate(result.data[0])

    # =========================================================================
    # Preferences
    # =========================================================================

    async def get_preferences(self, user_id: str) -> UserPreferences | None:
        result = self._execute(
            "get_preferences",
            self.client.table(PREFERENCES_TABLE).select("*").eq("user_id", user_id).limit(1),
        )
        if not result.data:
            return None
        return UserPreferences.model_validate(result.data[0])

    async def save_preferences(self, preferences: UserPreferences) -> UserPreferences:
        result = self._execute(
            "save_preferences",
            self.client.table(PREFERENCES_TABLE).upsert(
                preferences.model_dump(mode="json"),
                on_conflict="user_id",
            ),
        )
        if result.data:
            return UserPreferences.model_validate(result.data[0])
        return preferences

    async def delete_preferences(self, user_id: str) -> bool:
        result = self._execute(
            "delete_preferences",
            self.client.table(PREFERENCES_TABLE).delete().eq("user_id", user_id),
        )
        return bool(result.data)
