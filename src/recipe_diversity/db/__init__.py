"""Recipe Diversity - Storage (MemoryStore interface and Supabase implementation)."""

from recipe_diversity.db.store import MemoryStore

__all__ = ["MemoryStore"]
