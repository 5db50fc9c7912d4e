"""
Recipe Diversity - User Preferences.

Every user has preferences: stored ones, or all-empty defaults until the
first update. Updates are partial merges.

Preferences reach generation two ways:
- As prompt hints (hard: diet, allergens; soft: dislikes, goals, calories)
- As a post-generation check: a draft that contains an allergen or breaks
  a dietary restriction is rejected like a too-similar one
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from recipe_diversity.db.store import MemoryStore
from recipe_diversity.models.entities import PreferencesUpdate, RecipeDraft, UserPreferences, ingredient_name
from recipe_diversity.scoring.normalize import LETTERS, turkish_lower

logger = logging.getLogger(__name__)


# =============================================================================
# Storage
# =============================================================================


async def get_or_default(store: MemoryStore, user_id: str) -> UserPreferences:
    """Stored preferences, or an all-empty set for a user who has none."""
    preferences = await store.get_preferences(user_id)
    return preferences or UserPreferences(user_id=user_id)


async def update_preferences(
    store: MemoryStore,
    user_id: str,
    update: PreferencesUpdate,
) -> UserPreferences:
    """
    Merge the explicitly-set fields of update into the user's preferences.

    Fields left out of the update keep their stored values. Explicitly
    sending null clears calorie_target.
    """
    current = await get_or_default(store, user_id)
    changes = update.model_dump(exclude_unset=True)
    # Lists are never null in storage
    changes = {k: v for k, v in changes.items() if v is not None or k == "calorie_target"}

    merged = current.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
    saved = await store.save_preferences(merged)
    logger.info(f"Updated preferences for user {user_id}: {sorted(changes)}")
    return saved


async def delete_preferences(store: MemoryStore, user_id: str) -> bool:
    """Remove stored preferences. Returns False if there were none."""
    deleted = await store.delete_preferences(user_id)
    if deleted:
        logger.info(f"Deleted preferences for user {user_id}")
    return deleted


# =============================================================================
# Prompt Hints
# =============================================================================


def preferences_to_prompt_text(preferences: UserPreferences | None) -> str:
    """Numbered preference lines for the generator prompt; "" when nothing is set."""
    if preferences is None:
        return ""

    lines = []
    if preferences.dietary_restrictions:
        lines.append(f"IMPORTANT: must fit these diets: {', '.join(preferences.dietary_restrictions)}")
    if preferences.allergens:
        lines.append(f"ALLERGEN WARNING: must not contain {', '.join(preferences.allergens)}")
    if preferences.disliked_ingredients:
        lines.append(f"Avoid if possible: {', '.join(preferences.disliked_ingredients)}")
    if preferences.health_goals:
        lines.append(f"Health goals: {', '.join(preferences.health_goals)}")
    if preferences.calorie_target:
        lines.append(f"Target calories: about {preferences.calorie_target} kcal per serving")

    return "\n".join(f"{n}. {line}" for n, line in enumerate(lines, start=1))


# =============================================================================
# Post-generation Check
# =============================================================================


@dataclass(frozen=True)
class RestrictionRule:
    """
    Ingredient keywords that break one dietary restriction.

    A rule applies when any trigger appears in the user's restriction text.
    Keywords match whole words, optionally with a plural or possessive
    ending ("eggs", "kuzu eti"). Exempt names never count as a violation.
    """

    label: str
    triggers: tuple[str, ...]
    keywords: tuple[str, ...]
    exempt: frozenset[str] = field(default_factory=frozenset)

    @property
    def pattern(self) -> re.Pattern:
        alternation = "|".join(map(re.escape, self.keywords))
        return re.compile(rf"(?<![{LETTERS}])(?:{alternation})(?:s|es|ı|i|u|ü|sı|si|su|sü)?(?![{LETTERS}])")


MEAT_KEYWORDS = ("chicken", "beef", "pork", "fish", "lamb", "tavuk", "et", "balık")
ANIMAL_PRODUCT_KEYWORDS = (
    "milk", "cheese", "egg", "butter", "honey", "yogurt",
    "süt", "peynir", "yumurta", "tereyağı", "bal", "yoğurt",
)

RESTRICTION_RULES: tuple[RestrictionRule, ...] = (
    RestrictionRule(
        label="vegetarian",
        triggers=("vegetarian", "vejetaryen"),
        keywords=MEAT_KEYWORDS,
    ),
    RestrictionRule(
        label="vegan",
        triggers=("vegan",),
        keywords=MEAT_KEYWORDS + ANIMAL_PRODUCT_KEYWORDS,
        exempt=frozenset({"bal kabağı", "peanut butter", "almond milk", "badem sütü"}),
    ),
    RestrictionRule(
        label="gluten-free",
        triggers=("gluten-free", "gluten free", "glutensiz"),
        keywords=("wheat", "flour", "bread", "pasta", "buğday", "un", "ekmek", "makarna"),
        exempt=frozenset({"almond flour", "rice flour", "badem unu", "pirinç unu"}),
    ),
)


class PreferenceCheck(BaseModel):
    """Outcome of checking one draft against a user's preferences."""

    violations: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations


def validate_recipe_against_preferences(
    draft: RecipeDraft,
    preferences: UserPreferences | None,
) -> PreferenceCheck:
    """
    Check a draft's ingredients against allergens and dietary restrictions.

    Allergens match as plain substrings so "peanut" also catches
    "peanut oil". Disliked ingredients are prompt hints only and never
    reject a draft.
    """
    if preferences is None:
        return PreferenceCheck()

    names = [" ".join(turkish_lower(ingredient_name(entry)).split()) for entry in draft.ingredients]
    violations = []

    for allergen in preferences.allergens:
        needle = turkish_lower(allergen).strip()
        if not needle:
            continue
        for name in names:
            if needle in name:
                violations.append(f"allergen {allergen} ({name})")

    restrictions = [turkish_lower(r) for r in preferences.dietary_restrictions]
    for rule in RESTRICTION_RULES:
        if not any(trigger in r for r in restrictions for trigger in rule.triggers):
            continue
        pattern = rule.pattern
        for name in names:
            if name not in rule.exempt and pattern.search(name):
                violations.append(f"not {rule.label} ({name})")

    return PreferenceCheck(violations=violations)
