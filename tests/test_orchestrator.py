"""
Tests for the generation orchestrator.

Covers the accept/retry loop:
- Acceptance on first and later attempts
- Exhaustion returns a result and never persists
- Temperature schedule and constraint reuse
- Collaborator failures surface as GenerationError
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from recipe_diversity.errors import GenerationError
from recipe_diversity.generation.categories import resolve_category_config
from recipe_diversity.generation.models import (
    DiversityExhausted,
    GenerationRequest,
    GenerationSuccess,
)
from recipe_diversity.generation.orchestrator import (
    GenerationOrchestrator,
    attempt_temperature,
    build_embedding_text,
)
from recipe_diversity.models.entities import UserPreferences


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


def _request(**overrides) -> GenerationRequest:
    fields = {
        "meal_type": "dinner",
        "style_type": "weeknight",
        "user_id": "user-1",
        "conversation_id": "conv-1",
    }
    fields.update(overrides)
    return GenerationRequest(**fields)


def _embedder(*vectors) -> MagicMock:
    embedder = MagicMock()
    embedder.model = "text-embedding-3-small"
    embedder.embed = AsyncMock(side_effect=list(vectors))
    return embedder


def _generator(*drafts) -> MagicMock:
    generator = MagicMock()
    generator.generate = AsyncMock(side_effect=list(drafts))
    return generator


def _novel_draft(make_draft, name="Fırında Somon"):
    return make_draft(
        name,
        cuisine="mediterranean",
        protein="salmon",
        method="baking",
        ingredients=["somon", "kuşkonmaz", "limon"],
    )


@pytest.fixture
def history_store(store, make_memory):
    store.recipes.append(
        make_memory(
            "Izgara Tavuk",
            embedding=[1.0, 0.0, 0.0],
            protein="chicken",
            method="grilling",
            ingredients=["tavuk", "domates"],
        )
    )
    return store


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_temperature_schedule(self):
        assert [attempt_temperature(n) for n in (1, 2, 3)] == [0.7, 0.9, 1.1]

    def test_embedding_text_truncates_notes(self, make_draft):
        draft = make_draft("Menemen", notes="x" * 500)
        text = build_embedding_text(draft)
        assert text.startswith("Menemen. ")
        assert len(text) == len("Menemen. ") + 200

    def test_embedding_text_format(self, make_draft):
        draft = make_draft("Menemen", notes="Soft scrambled")
        assert build_embedding_text(draft) == "Menemen. Soft scrambled"

    def test_embedding_text_without_notes(self, make_draft):
        assert build_embedding_text(make_draft("Menemen")) == "Menemen. "


class TestFirstRecipe:
    """A user with no history."""

    def test_accepted_on_first_attempt(self, store, make_draft):
        draft = _novel_draft(make_draft)
        generator = _generator(draft)
        orchestrator = GenerationOrchestrator(store, generator, _embedder([0.0, 1.0, 0.0]))

        result = _run(orchestrator.generate(_request()))

        assert isinstance(result, GenerationSuccess)
        assert result.metadata.attempts == 1
        assert result.metadata.was_retried is False
        assert result.metadata.recent_recipes_checked == 0
        assert result.metadata.temperature == 0.7
        assert result.recipe.id == result.recipe_id
        assert result.recipe.name == draft.name

    def test_empty_history_defaults(self, store, make_draft):
        """Similarity auto-passes; untagged protein scores neutral, the rest fully novel."""
        draft = make_draft("Sebze Çorbası", protein=None, ingredients=["havuç", "pırasa"])
        orchestrator = GenerationOrchestrator(store, _generator(draft), _embedder([0.0, 1.0, 0.0]))

        result = _run(orchestrator.generate(_request()))

        assert result.metadata.attempts == 1
        assert result.metadata.similarity_score == 0.0
        # 0.2 semantic + 0.2 * 0.5 protein + 0.2 method + 0.4 ingredients
        assert result.metadata.diversity_score == pytest.approx(0.9)

    def test_no_constraints_without_history(self, store, make_draft):
        generator = _generator(_novel_draft(make_draft))
        orchestrator = GenerationOrchestrator(store, generator, _embedder([0.0, 1.0, 0.0]))

        _run(orchestrator.generate(_request()))

        assert generator.generate.call_args.args[2] is None

    def test_saved_recipe_becomes_history(self, store, make_draft):
        orchestrator = GenerationOrchestrator(
            store,
            _generator(_novel_draft(make_draft)),
            _embedder([0.0, 1.0, 0.0]),
        )

        result = _run(orchestrator.generate(_request()))
        recent = _run(store.get_recent_recipes("user-1", 14))

        assert [r.id for r in recent] == [result.recipe_id]
        saved = store.saved[0]
        assert saved.attempt_number == 1
        assert saved.was_retried is False
        assert saved.embedding == [0.0, 1.0, 0.0]
        assert saved.embedding_model == "text-embedding-3-small"
        assert saved.diversity_score == result.metadata.diversity_score


class TestRetryLoop:
    """Rejection, retry and exhaustion."""

    def test_accepts_on_second_attempt(self, history_store, make_draft):
        generator = _generator(_novel_draft(make_draft, "A"), _novel_draft(make_draft, "B"))
        # First draft embeds onto the stored recipe, second is orthogonal
        embedder = _embedder([1.0, 0.0, 0.0], [0.0, 1.0, 0.0])
        orchestrator = GenerationOrchestrator(history_store, generator, embedder)

        result = _run(orchestrator.generate(_request()))

        assert isinstance(result, GenerationSuccess)
        assert result.recipe.name == "B"
        assert result.metadata.attempts == 2
        assert result.metadata.was_retried is True
        assert result.metadata.temperature == 0.9
        assert len(history_store.saved) == 1
        assert history_store.saved[0].attempt_number == 2
        assert history_store.saved[0].was_retried is True

    def test_exhaustion_never_persists(self, history_store, make_draft):
        drafts = [_novel_draft(make_draft, f"Copy {n}") for n in range(3)]
        embedder = _embedder(*[[1.0, 0.0, 0.0]] * 3)
        orchestrator = GenerationOrchestrator(history_store, _generator(*drafts), embedder)

        result = _run(orchestrator.generate(_request(max_retries=3)))

        assert isinstance(result, DiversityExhausted)
        assert result.kind == "diversity_exhaustion"
        assert result.attempts == 3
        assert result.final_similarity == pytest.approx(1.0)
        assert result.similarity_threshold == 0.85
        assert result.diversity_threshold == 0.55
        assert result.quality_bar == "interesting & worth making"
        assert result.recent_recipes_checked == 1
        assert result.suggestions
        assert history_store.saved == []
        assert len(history_store.recipes) == 1

    def test_temperature_rises_each_attempt(self, history_store, make_draft):
        drafts = [_novel_draft(make_draft, f"Copy {n}") for n in range(3)]
        generator = _generator(*drafts)
        orchestrator = GenerationOrchestrator(history_store, generator, _embedder(*[[1.0, 0.0, 0.0]] * 3))

        _run(orchestrator.generate(_request(max_retries=3)))

        temperatures = [call.args[3] for call in generator.generate.call_args_list]
        assert temperatures == [0.7, 0.9, 1.1]

    def test_constraints_reused_across_attempts(self, history_store, make_draft):
        drafts = [_novel_draft(make_draft, f"Copy {n}") for n in range(2)]
        generator = _generator(*drafts)
        orchestrator = GenerationOrchestrator(history_store, generator, _embedder(*[[1.0, 0.0, 0.0]] * 2))

        _run(orchestrator.generate(_request(max_retries=2)))

        first, second = generator.generate.call_args_list
        assert first.args[2] is not None
        assert first.args[2] == second.args[2]

    def test_low_diversity_rejected_even_when_not_similar(self, store, make_memory, make_draft):
        # Same protein, method and ingredients as the last five recipes
        for i in range(5):
            store.recipes.append(make_memory(f"R{i}", days_ago=i + 1, embedding=[0.0, 0.0, 1.0]))
        orchestrator = GenerationOrchestrator(
            store,
            _generator(make_draft("Again")),
            _embedder([0.0, 1.0, 0.0]),
        )

        result = _run(orchestrator.generate(_request(max_retries=1)))

        assert isinstance(result, DiversityExhausted)
        assert result.final_similarity == 0.0
        assert result.final_diversity < result.diversity_threshold
        assert result.weaknesses
        assert store.saved == []

    def test_category_thresholds_applied(self, history_store, make_draft):
        """Breakfast tolerates more similarity than desserts."""
        embedding = [0.82, 0.5723635, 0.0]  # cosine ~0.82 with the stored recipe
        dessert = GenerationOrchestrator(history_store, _generator(_novel_draft(make_draft)), _embedder(embedding))
        breakfast = GenerationOrchestrator(history_store, _generator(_novel_draft(make_draft)), _embedder(embedding))

        dessert_result = _run(dessert.generate(_request(meal_type="Tatlılar", max_retries=1)))
        breakfast_result = _run(breakfast.generate(_request(meal_type="Kahvaltı", max_retries=1)))

        assert isinstance(dessert_result, DiversityExhausted)
        assert isinstance(breakfast_result, GenerationSuccess)

    def test_temporal_decay_forgives_old_duplicates(self, store, make_memory, make_draft):
        store.recipes.append(make_memory("Old Copy", days_ago=60, embedding=[1.0, 0.0, 0.0]))
        request = _request(temporal_window_days=90, max_retries=1)

        plain = GenerationOrchestrator(store, _generator(_novel_draft(make_draft)), _embedder([1.0, 0.0, 0.0]))
        decayed = GenerationOrchestrator(
            store,
            _generator(_novel_draft(make_draft)),
            _embedder([1.0, 0.0, 0.0]),
            use_temporal_decay=True,
        )

        assert isinstance(_run(plain.generate(request)), DiversityExhausted)
        assert isinstance(_run(decayed.generate(request)), GenerationSuccess)


class TestHistoryWithBadEmbeddings:
    def test_records_without_embedding_are_skipped(self, store, make_memory, make_draft):
        broken = make_memory("Broken", embedding=[1.0, 0.0, 0.0])
        broken.embedding = None
        store.recipes.append(broken)
        orchestrator = GenerationOrchestrator(store, _generator(_novel_draft(make_draft)), _embedder([1.0, 0.0, 0.0]))

        result = _run(orchestrator.generate(_request()))

        assert isinstance(result, GenerationSuccess)
        assert result.metadata.similarity_score == 0.0
        assert result.metadata.recent_recipes_checked == 1


class TestPreferences:
    """Stored preferences steer the generator and veto drafts."""

    def test_preferences_passed_to_generator(self, store, make_draft):
        prefs = UserPreferences(user_id="user-1", allergens=["fıstık"])
        store.preferences["user-1"] = prefs
        generator = _generator(_novel_draft(make_draft))
        orchestrator = GenerationOrchestrator(store, generator, _embedder([0.0, 1.0, 0.0]))

        _run(orchestrator.generate(_request()))

        assert generator.generate.call_args.kwargs["preferences"] == prefs

    def test_no_preferences_passes_none(self, store, make_draft):
        generator = _generator(_novel_draft(make_draft))
        orchestrator = GenerationOrchestrator(store, generator, _embedder([0.0, 1.0, 0.0]))

        _run(orchestrator.generate(_request()))

        assert generator.generate.call_args.kwargs["preferences"] is None

    def test_violating_draft_rejected_then_retried(self, store, make_draft):
        store.preferences["user-1"] = UserPreferences(user_id="user-1", dietary_restrictions=["Vejetaryen"])
        meaty = make_draft("Tavuk Sote", ingredients=["tavuk göğsü", "biber"])
        veggie = make_draft("Mercimek Köftesi", protein="lentils", ingredients=["kırmızı mercimek", "bulgur"])
        orchestrator = GenerationOrchestrator(
            store,
            _generator(meaty, veggie),
            _embedder([0.0, 1.0, 0.0], [0.0, 0.0, 1.0]),
        )

        result = _run(orchestrator.generate(_request()))

        assert isinstance(result, GenerationSuccess)
        assert result.recipe.name == "Mercimek Köftesi"
        assert result.metadata.attempts == 2
        assert [s.recipe.name for s in store.saved] == ["Mercimek Köftesi"]

    def test_exhaustion_reports_violations(self, store, make_draft):
        store.preferences["user-1"] = UserPreferences(user_id="user-1", allergens=["domates"])
        orchestrator = GenerationOrchestrator(
            store,
            _generator(make_draft("Menemen", ingredients=["domates", "yumurta"])),
            _embedder([0.0, 1.0, 0.0]),
        )

        result = _run(orchestrator.generate(_request(max_retries=1)))

        assert isinstance(result, DiversityExhausted)
        assert result.preference_violations == ["allergen domates (domates)"]
        assert any("dietary preferences" in s for s in result.suggestions)
        assert store.saved == []


class TestFailures:
    """Collaborator failures are errors, not exhaustion."""

    def test_generator_returns_none(self, store):
        orchestrator = GenerationOrchestrator(store, _generator(None), _embedder([0.0, 1.0, 0.0]))

        with pytest.raises(GenerationError):
            _run(orchestrator.generate(_request()))
        assert store.saved == []

    def test_generator_raises(self, store):
        generator = MagicMock()
        generator.generate = AsyncMock(side_effect=RuntimeError("rate limited"))
        orchestrator = GenerationOrchestrator(store, generator, _embedder())

        with pytest.raises(GenerationError, match="rate limited"):
            _run(orchestrator.generate(_request()))

    def test_incomplete_draft(self, store, make_draft):
        draft = make_draft(ingredients=[])
        orchestrator = GenerationOrchestrator(store, _generator(draft), _embedder([0.0, 1.0, 0.0]))

        with pytest.raises(GenerationError):
            _run(orchestrator.generate(_request()))

    def test_embedder_raises(self, store, make_draft):
        embedder = _embedder()
        embedder.embed = AsyncMock(side_effect=RuntimeError("embedding service down"))
        orchestrator = GenerationOrchestrator(store, _generator(_novel_draft(make_draft)), embedder)

        with pytest.raises(GenerationError):
            _run(orchestrator.generate(_request()))
        assert store.saved == []


class TestCategoryConfig:
    """Per-category threshold lookup."""

    @pytest.mark.parametrize(
        "meal_type, similarity, diversity, quality_bar",
        [
            ("Kahvaltı", 0.85, 0.50, "practical & diabetes-friendly"),
            ("Akşam Yemeği", 0.85, 0.55, "interesting & worth making"),
            ("Salatalar", 0.85, 0.50, "fresh & complete"),
            ("Tatlılar", 0.80, 0.55, "surprising & delicious"),
            ("Atıştırmalıklar", 0.80, 0.50, "creative & satisfying"),
        ],
    )
    def test_turkish_category(self, meal_type, similarity, diversity, quality_bar):
        config = resolve_category_config(meal_type, "Sana Özel", 0.70)
        assert config.name == meal_type
        assert config.similarity_threshold == similarity
        assert config.diversity_threshold == diversity
        assert config.quality_bar == quality_bar

    @pytest.mark.parametrize(
        "alias, category",
        [
            ("breakfast", "Kahvaltı"),
            ("Dinner", "Akşam Yemeği"),
            ("salad", "Salatalar"),
            ("dessert", "Tatlılar"),
            ("snack", "Atıştırmalıklar"),
        ],
    )
    def test_english_aliases_share_values(self, alias, category):
        assert resolve_category_config(alias, "", 0.70) == resolve_category_config(category, "", 0.70)

    def test_style_word_match(self):
        assert resolve_category_config("Öğle", "Doyurucu salata", 0.85).name == "Salatalar"
        assert resolve_category_config("Öğle", "Çoban Salatası", 0.85).name == "Salatalar"
        assert resolve_category_config("Sana Özel Tatlılar", "", 0.85).name == "Tatlılar"

    def test_pasta_is_not_a_category(self):
        config = resolve_category_config("Ana yemek", "Tam Buğday Makarna", 0.85)
        assert config.name == "default"
        assert config.quality_bar == "good quality"

    def test_unknown_category_uses_request_threshold(self):
        config = resolve_category_config("brunch", "fancy", 0.77)
        assert config.similarity_threshold == 0.77
        assert config.diversity_threshold == 0.60
