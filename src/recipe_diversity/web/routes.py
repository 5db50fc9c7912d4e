"""
Recipe Diversity - HTTP routes.

- /api/recipes: generate a diverse recipe, fetch a stored one
- /api/users/{user_id}: preferences and diversity summary
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from recipe_diversity import preferences as prefs
from recipe_diversity.analytics.aggregator import AnalyticsAggregator, DiversitySummary
from recipe_diversity.config import Settings, get_settings
from recipe_diversity.db.store import MemoryStore
from recipe_diversity.errors import RequestValidationError
from recipe_diversity.generation.models import DiversityExhausted, parse_generation_request
from recipe_diversity.generation.orchestrator import GenerationOrchestrator
from recipe_diversity.models.entities import PreferencesUpdate, UserPreferences
from recipe_diversity.web.dependencies import get_aggregator, get_orchestrator, get_store

logger = logging.getLogger(__name__)

recipes_router = APIRouter(prefix="/api/recipes", tags=["recipes"])
users_router = APIRouter(prefix="/api/users/{user_id}", tags=["users"])


# =============================================================================
# Recipes
# =============================================================================


@recipes_router.post("/generate")
async def generate_recipe(
    request: Request,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
):
    """
    Generate a recipe that differs enough from the user's recent ones.

    200 on success, 409 when every attempt was too close to history,
    504 when the overall deadline passes. Other failures are mapped by
    the app's exception handlers.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        raise RequestValidationError("body", "Request body must be a JSON object") from e
    if not isinstance(payload, dict):
        raise RequestValidationError("body", "Request body must be a JSON object")

    payload.setdefault("max_retries", settings.default_max_retries)
    payload.setdefault("similarity_threshold", settings.default_similarity_threshold)
    payload.setdefault("temporal_window_days", settings.default_temporal_window_days)
    generation_request = parse_generation_request(payload)

    try:
        outcome = await asyncio.wait_for(
            orchestrator.generate(generation_request),
            timeout=settings.generation_timeout_seconds,
        )
    except TimeoutError:
        logger.error(
            f"Generation for user {generation_request.user_id} exceeded "
            f"{settings.generation_timeout_seconds}s"
        )
        return JSONResponse(
            status_code=504,
            content={
                "success": False,
                "error": {
                    "kind": "timeout",
                    "message": "Recipe generation took too long. Please try again.",
                },
            },
        )

    if isinstance(outcome, DiversityExhausted):
        return JSONResponse(
            status_code=409,
            content={"success": False, "error": outcome.model_dump(mode="json", exclude={"success"})},
        )
    return outcome.model_dump(mode="json")


@recipes_router.get("/{recipe_id}")
async def get_recipe(recipe_id: str, store: MemoryStore = Depends(get_store)) -> dict[str, Any]:
    """Fetch a stored recipe and mark it accessed."""
    memory = await store.get_recipe_by_id(recipe_id)
    if memory is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    await store.mark_accessed(recipe_id)
    return memory.model_dump(mode="json", exclude={"embedding"})


# =============================================================================
# Users
# =============================================================================


@users_router.get("/preferences")
async def get_preferences(user_id: str, store: MemoryStore = Depends(get_store)) -> UserPreferences:
    return await prefs.get_or_default(store, user_id)


@users_router.patch("/preferences")
async def patch_preferences(
    user_id: str,
    update: PreferencesUpdate,
    store: MemoryStore = Depends(get_store),
) -> UserPreferences:
    return await prefs.update_preferences(store, user_id, update)


@users_router.delete("/preferences")
async def delete_preferences(user_id: str, store: MemoryStore = Depends(get_store)):
    if not await prefs.delete_preferences(store, user_id):
        raise HTTPException(status_code=404, detail="No preferences stored")
    return {"success": True}


@users_router.get("/diversity-summary")
async def get_diversity_summary(
    user_id: str,
    aggregator: AnalyticsAggregator = Depends(get_aggregator),
) -> DiversitySummary:
    return await aggregator.get_user_diversity_summary(user_id)
