"""
Recipe Diversity - Generation Orchestrator.

The retry loop behind every generated recipe:

    IDLE -> ATTEMPTING(1) -> ACCEPTED
                          -> ATTEMPTING(2) -> ... -> EXHAUSTED

Each attempt generates a draft, embeds it, checks it against the user's
recent history and scores its diversity. Rejected drafts are thrown away
and the next attempt runs hotter (0.7, 0.9, 1.1, ...) with the same
constraints. Only an accepted draft is ever written to the store.

Attempts are strictly sequential: whether to spend another LLM call
depends on the verdict for the previous one.
"""

import logging
import time

from recipe_diversity.db.store import MemoryStore
from recipe_diversity.errors import GenerationError
from recipe_diversity.generation.categories import CategoryConfig, resolve_category_config
from recipe_diversity.generation.models import (
    AcceptedRecipe,
    DiversityExhausted,
    GenerationMetadata,
    GenerationOutcome,
    GenerationRequest,
    GenerationState,
    GenerationSuccess,
)
from recipe_diversity.llm.adapter import Embedder, RecipeGenerator
from recipe_diversity.models.entities import (
    DiversityConstraints,
    DiversityScore,
    NewRecipeMemory,
    RecipeDraft,
    RecipeMemory,
    SimilarityResult,
    UserPreferences,
)
from recipe_diversity.preferences import PreferenceCheck, validate_recipe_against_preferences
from recipe_diversity.scoring.diversity import CONSTRAINT_WINDOW, DiversityScorer
from recipe_diversity.scoring.similarity import (
    DEFAULT_DECAY_FACTOR,
    check_similarity,
    check_similarity_with_decay,
)

logger = logging.getLogger(__name__)

BASE_TEMPERATURE = 0.5
TEMPERATURE_STEP = 0.2
EMBEDDING_NOTES_CHARS = 200

EXHAUSTED_MESSAGE = (
    "Couldn't find a recipe different enough from your recent ones. "
    "Try again, or pick another category."
)


def attempt_temperature(attempt: int) -> float:
    """Sampling temperature for a 1-based attempt: 0.7, 0.9, 1.1, ..."""
    return round(BASE_TEMPERATURE + attempt * TEMPERATURE_STEP, 2)


def build_embedding_text(draft: RecipeDraft) -> str:
    """Short text that identifies a recipe: its name plus the start of its notes."""
    # Stored embeddings use this exact format; changing it needs a backfill
    return f"{draft.name}. {draft.notes[:EMBEDDING_NOTES_CHARS]}"


class GenerationOrchestrator:
    """
    Runs the accept/retry loop for one request at a time.

    Holds no per-request state, so one instance can serve concurrent
    requests for different users.
    """

    def __init__(
        self,
        store: MemoryStore,
        generator: RecipeGenerator,
        embedder: Embedder,
        scorer: DiversityScorer | None = None,
        *,
        use_temporal_decay: bool = False,
        decay_factor: float = DEFAULT_DECAY_FACTOR,
    ):
        self.store = store
        self.generator = generator
        self.embedder = embedder
        self.scorer = scorer or DiversityScorer()
        self.use_temporal_decay = use_temporal_decay
        self.decay_factor = decay_factor

    async def generate(self, request: GenerationRequest) -> GenerationOutcome:
        """
        Generate and persist a recipe that is different enough from recent history.

        Returns:
            GenerationSuccess, or DiversityExhausted when every attempt was rejected

        Raises:
            GenerationError: The generator or embedder failed (not retried here)
            StoreError: History could not be read or the recipe could not be saved
        """
        started = time.perf_counter()
        state = GenerationState.IDLE

        config = resolve_category_config(
            request.meal_type,
            request.style_type,
            request.similarity_threshold,
        )
        recent = await self.store.get_recent_recipes(request.user_id, request.temporal_window_days)
        constraints = self.scorer.build_constraints(recent, CONSTRAINT_WINDOW) if recent else None
        preferences = await self.store.get_preferences(request.user_id)

        logger.info(
            f"Generating {request.meal_type}/{request.style_type} for user {request.user_id}: "
            f"{len(recent)} recent recipes, thresholds sim<{config.similarity_threshold} "
            f"div>={config.diversity_threshold} ({config.name})"
        )

        similarity = SimilarityResult()
        diversity: DiversityScore | None = None
        check = PreferenceCheck()

        for attempt in range(1, request.max_retries + 1):
            state = GenerationState.ATTEMPTING
            temperature = attempt_temperature(attempt)
            logger.debug(f"State {state.value}({attempt}), temperature={temperature}")

            draft = await self._generate_draft(request, constraints, temperature, preferences)
            embedding = await self._embed(draft)

            similarity = self._check_similarity(embedding, recent, config.similarity_threshold)
            diversity = self.scorer.calculate_diversity_score(draft, recent, similarity.max_similarity)
            check = validate_recipe_against_preferences(draft, preferences)

            if (
                not similarity.is_similar
                and diversity.overall_score >= config.diversity_threshold
                and check.is_valid
            ):
                recipe_id = await self.store.save_recipe_memory(
                    NewRecipeMemory(
                        user_id=request.user_id,
                        conversation_id=request.conversation_id,
                        recipe=draft,
                        embedding=embedding,
                        embedding_model=self.embedder.model,
                        attempt_number=attempt,
                        was_retried=attempt > 1,
                        similarity_score=similarity.max_similarity,
                        diversity_score=diversity.overall_score,
                    )
                )
                state = GenerationState.ACCEPTED
                latency_ms = _elapsed_ms(started)
                logger.info(
                    f"State {state.value}: '{draft.name}' on attempt {attempt} "
                    f"(similarity={similarity.max_similarity:.3f}, diversity={diversity.overall_score:.3f}, "
                    f"{latency_ms}ms)"
                )
                return GenerationSuccess(
                    recipe=AcceptedRecipe(id=recipe_id, **draft.model_dump()),
                    recipe_id=recipe_id,
                    metadata=GenerationMetadata(
                        was_retried=attempt > 1,
                        attempts=attempt,
                        similarity_score=similarity.max_similarity,
                        diversity_score=diversity.overall_score,
                        latency_ms=latency_ms,
                        recent_recipes_checked=len(recent),
                        temperature=temperature,
                    ),
                )

            self._log_rejection(attempt, draft, similarity, diversity, check, config)

        state = GenerationState.EXHAUSTED
        logger.warning(
            f"State {state.value}: no acceptable recipe for user {request.user_id} "
            f"after {request.max_retries} attempts"
        )
        return self._exhausted(request, config, similarity, diversity, check, len(recent), started)

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    async def _generate_draft(
        self,
        request: GenerationRequest,
        constraints: DiversityConstraints | None,
        temperature: float,
        preferences: UserPreferences | None,
    ) -> RecipeDraft:
        try:
            draft = await self.generator.generate(
                request.meal_type,
                request.style_type,
                constraints,
                temperature,
                preferences=preferences,
            )
        except Exception as e:
            logger.exception("Recipe generator raised")
            raise GenerationError(f"Recipe generation failed: {e}") from e

        if draft is None:
            raise GenerationError("Recipe generator returned no recipe")
        if not draft.is_complete():
            raise GenerationError(f"Recipe generator returned an incomplete recipe: '{draft.name}'")
        return draft

    async def _embed(self, draft: RecipeDraft) -> list[float]:
        try:
            return await self.embedder.embed(build_embedding_text(draft))
        except Exception as e:
            logger.exception("Embedding call raised")
            raise GenerationError(f"Embedding failed: {e}") from e

    def _check_similarity(
        self,
        embedding: list[float],
        recent: list[RecipeMemory],
        threshold: float,
    ) -> SimilarityResult:
        if self.use_temporal_decay:
            return check_similarity_with_decay(embedding, recent, threshold, self.decay_factor)
        return check_similarity(embedding, recent, threshold)

    def _log_rejection(
        self,
        attempt: int,
        draft: RecipeDraft,
        similarity: SimilarityResult,
        diversity: DiversityScore,
        check: PreferenceCheck,
        config: CategoryConfig,
    ) -> None:
        reasons = []
        if not check.is_valid:
            reasons.append(f"breaks preferences ({', '.join(check.violations)})")
        if similarity.is_similar:
            match = similarity.most_similar_match
            match_name = f" to '{match.recipe.name}'" if match else ""
            reasons.append(
                f"too similar{match_name} ({similarity.max_similarity:.3f} >= {config.similarity_threshold})"
            )
        if diversity.overall_score < config.diversity_threshold:
            reasons.append(
                f"not diverse enough ({diversity.overall_score:.3f} < {config.diversity_threshold}; "
                f"{', '.join(diversity.weaknesses) or 'no specific weakness'})"
            )
        logger.info(f"Attempt {attempt} rejected '{draft.name}': {'; '.join(reasons)}")

    def _exhausted(
        self,
        request: GenerationRequest,
        config: CategoryConfig,
        similarity: SimilarityResult,
        diversity: DiversityScore | None,
        check: PreferenceCheck,
        recent_count: int,
        started: float,
    ) -> DiversityExhausted:
        weaknesses = diversity.weaknesses if diversity else []
        suggestions = [
            "Try a different category or style",
            "Try again later, after a few other recipes",
        ]
        if similarity.is_similar:
            suggestions.append("Ask for a different main protein or cooking method")
        if not check.is_valid:
            suggestions.append("Check that your dietary preferences fit this category")

        return DiversityExhausted(
            message=EXHAUSTED_MESSAGE,
            attempts=request.max_retries,
            final_similarity=similarity.max_similarity,
            final_diversity=diversity.overall_score if diversity else 0.0,
            similarity_threshold=config.similarity_threshold,
            diversity_threshold=config.diversity_threshold,
            quality_bar=config.quality_bar,
            weaknesses=weaknesses,
            preference_violations=check.violations,
            suggestions=suggestions,
            recent_recipes_checked=recent_count,
            latency_ms=_elapsed_ms(started),
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
