"""
Tests for the OpenAI-backed generator and embedder.

The OpenAI client is mocked; Instructor is patched out so the structured
response can be returned directly.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from recipe_diversity.models.entities import DiversityConstraints, StructuredIngredient, UserPreferences


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


def _generated(**overrides):
    from recipe_diversity.llm.client import GeneratedRecipe

    fields = {
        "name": "Mercimek Köftesi",
        "notes": "Serve with lettuce leaves",
        "ingredients": [{"item": "kırmızı mercimek", "quantity": "1 cup"}],
        "instructions": ["Boil lentils", "Knead with bulgur"],
        "cuisine": "turkish",
        "primary_protein": "lentils",
        "cooking_method": "boiling",
    }
    fields.update(overrides)
    return GeneratedRecipe(**fields)


class TestBuildUserPrompt:
    def test_without_constraints(self):
        from recipe_diversity.llm.client import build_user_prompt

        prompt = build_user_prompt("Kahvaltı", "Sana Özel", None)
        assert prompt == "Category: Kahvaltı\nStyle: Sana Özel"

    def test_with_constraints(self):
        from recipe_diversity.llm.client import build_user_prompt

        constraints = DiversityConstraints(avoid_proteins=["chicken"], suggest_vegetables=["pırasa"])
        prompt = build_user_prompt("dinner", "weeknight", constraints)
        assert "Avoid proteins: chicken" in prompt
        assert "Consider vegetables: pırasa" in prompt

    def test_with_preferences(self):
        from recipe_diversity.llm.client import build_user_prompt

        prefs = UserPreferences(user_id="user-1", allergens=["ceviz"], calorie_target=450)
        prompt = build_user_prompt("dinner", "weeknight", None, prefs)

        assert "User preferences:" in prompt
        assert "1. ALLERGEN WARNING: must not contain ceviz" in prompt
        assert "2. Target calories: about 450 kcal per serving" in prompt

    def test_empty_preferences_add_nothing(self):
        from recipe_diversity.llm.client import build_user_prompt

        prompt = build_user_prompt("dinner", "weeknight", None, UserPreferences(user_id="user-1"))
        assert prompt == "Category: dinner\nStyle: weeknight"


class TestGeneratedRecipe:
    def test_to_draft(self):
        draft = _generated().to_draft("Kahvaltı")
        assert draft.ingredients == [StructuredIngredient(item="kırmızı mercimek", quantity="1 cup")]
        assert draft.metadata.meal_type == "Kahvaltı"
        assert draft.metadata.primary_protein == "lentils"
        assert draft.is_complete()


class TestOpenAIRecipeGenerator:
    def test_passes_temperature_and_schema(self):
        instructor_client = MagicMock()
        instructor_client.chat.completions.create = AsyncMock(return_value=_generated())

        with patch("recipe_diversity.llm.client.instructor.from_openai", return_value=instructor_client):
            from recipe_diversity.llm.client import GeneratedRecipe, OpenAIRecipeGenerator

            generator = OpenAIRecipeGenerator(model="gpt-4.1-mini", client=MagicMock())
            draft = _run(generator.generate("dinner", "weeknight", None, 0.9))

        kwargs = instructor_client.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.9
        assert kwargs["response_model"] is GeneratedRecipe
        assert kwargs["model"] == "gpt-4.1-mini"
        assert draft.name == "Mercimek Köftesi"

    def test_reraises_errors(self):
        instructor_client = MagicMock()
        instructor_client.chat.completions.create = AsyncMock(side_effect=Exception("API error"))

        with patch("recipe_diversity.llm.client.instructor.from_openai", return_value=instructor_client):
            from recipe_diversity.llm.client import OpenAIRecipeGenerator

            generator = OpenAIRecipeGenerator(model="gpt-4.1-mini", client=MagicMock())
            with pytest.raises(Exception, match="API error"):
                _run(generator.generate("dinner", "weeknight", None, 0.7))


class TestOpenAIEmbedder:
    def test_embed(self):
        from recipe_diversity.llm.client import OpenAIEmbedder

        raw = MagicMock()
        raw.embeddings.create = AsyncMock(return_value=MagicMock(data=[MagicMock(embedding=[0.1, 0.2])]))

        embedder = OpenAIEmbedder(model="text-embedding-3-small", client=raw)
        vector = _run(embedder.embed("Menemen"))

        assert vector == [0.1, 0.2]
        raw.embeddings.create.assert_called_once_with(model="text-embedding-3-small", input="Menemen")
