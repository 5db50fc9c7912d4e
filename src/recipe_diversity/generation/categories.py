"""
Recipe Diversity - Category Configuration.

Per-category acceptance thresholds. Categories with little natural
variety (breakfast, salads, snacks, diabetes-friendly desserts) get
looser similarity thresholds so the loop can accept something; dinner
keeps a moderate diversity bar.

These values are empirically tuned product data. Change them with
product input, not as a code fix.
"""

from dataclasses import dataclass

from recipe_diversity.scoring.normalize import normalize_tag

DEFAULT_DIVERSITY_THRESHOLD = 0.60
DEFAULT_QUALITY_BAR = "good quality"


@dataclass(frozen=True)
class CategoryConfig:
    """Acceptance thresholds for one meal category."""

    similarity_threshold: float
    diversity_threshold: float
    # Short description of what an acceptable recipe looks like
    quality_bar: str
    name: str = "default"


_BREAKFAST = CategoryConfig(0.85, 0.50, "practical & diabetes-friendly", name="Kahvaltı")
_DINNER = CategoryConfig(0.85, 0.55, "interesting & worth making", name="Akşam Yemeği")
_SALADS = CategoryConfig(0.85, 0.50, "fresh & complete", name="Salatalar")
_DESSERTS = CategoryConfig(0.80, 0.55, "surprising & delicious", name="Tatlılar")
_SNACKS = CategoryConfig(0.80, 0.50, "creative & satisfying", name="Atıştırmalıklar")

# Keys are matched against normalized meal/style types: exact first, then as a word
CATEGORY_CONFIGS: dict[str, CategoryConfig] = {
    "kahvaltı": _BREAKFAST,
    "breakfast": _BREAKFAST,
    "akşam yemeği": _DINNER,
    "dinner": _DINNER,
    "salatalar": _SALADS,
    "salata": _SALADS,
    "salatası": _SALADS,
    "salad": _SALADS,
    "tatlılar": _DESSERTS,
    "tatlı": _DESSERTS,
    "dessert": _DESSERTS,
    "atıştırmalıklar": _SNACKS,
    "atıştırmalık": _SNACKS,
    "snack": _SNACKS,
}


def _lookup(category: str | None) -> CategoryConfig | None:
    normalized = normalize_tag(category)
    if normalized is None:
        return None
    if normalized in CATEGORY_CONFIGS:
        return CATEGORY_CONFIGS[normalized]
    # "Doyurucu salata", "Sana Özel Tatlılar"
    words = normalized.split()
    for key, config in CATEGORY_CONFIGS.items():
        if " " not in key and key in words:
            return config
    return None


def resolve_category_config(
    meal_type: str,
    style_type: str | None,
    default_similarity_threshold: float,
) -> CategoryConfig:
    """
    Thresholds for a request.

    The meal type is checked first, then the style type. Unlisted
    categories keep the request's similarity threshold with a 0.60
    diversity threshold.
    """
    config = _lookup(meal_type) or _lookup(style_type)
    if config is not None:
        return config
    return CategoryConfig(
        similarity_threshold=default_similarity_threshold,
        diversity_threshold=DEFAULT_DIVERSITY_THRESHOLD,
        quality_bar=DEFAULT_QUALITY_BAR,
    )
