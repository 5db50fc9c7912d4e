"""
Recipe Diversity - FastAPI dependency providers.

Each collaborator is built once per process from settings. Tests swap
them out with app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends

from recipe_diversity.analytics.aggregator import AnalyticsAggregator
from recipe_diversity.config import Settings, get_settings
from recipe_diversity.db.store import MemoryStore
from recipe_diversity.db.supabase_store import SupabaseMemoryStore
from recipe_diversity.generation.orchestrator import GenerationOrchestrator
from recipe_diversity.llm.client import OpenAIEmbedder, OpenAIRecipeGenerator


@lru_cache
def get_store() -> MemoryStore:
    return SupabaseMemoryStore()


@lru_cache
def get_generator() -> OpenAIRecipeGenerator:
    return OpenAIRecipeGenerator()


@lru_cache
def get_embedder() -> OpenAIEmbedder:
    return OpenAIEmbedder()


def get_orchestrator(
    store: MemoryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        store,
        get_generator(),
        get_embedder(),
        use_temporal_decay=settings.use_temporal_decay,
        decay_factor=settings.decay_factor,
    )


def get_aggregator(
    store: MemoryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> AnalyticsAggregator:
    return AnalyticsAggregator(store, stale_after_days=settings.metrics_stale_days)
