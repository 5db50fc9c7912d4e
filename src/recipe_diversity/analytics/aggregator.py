"""
Recipe Diversity - Analytics Aggregator.

Rolling-window diversity metrics per user:
- Cuisine / protein / cooking-method distributions
- Average diversity at acceptance time and its trend
- Underrepresented categories against reference vocabularies

Plus human-readable insights, and a cache-or-recompute summary that
reuses snapshots younger than a week.
"""

import logging
from collections import Counter
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field

from recipe_diversity.db.store import MemoryStore
from recipe_diversity.models.entities import DiversityMetrics, RecipeMemory, Trend
from recipe_diversity.scoring.normalize import (
    REFERENCE_COOKING_METHODS,
    REFERENCE_CUISINES,
    REFERENCE_PROTEINS,
    normalize_cooking_method,
    normalize_protein,
    normalize_tag,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
STALE_AFTER_DAYS = 7

TREND_MIN_POINTS = 4
TREND_DELTA = 0.05

UNDERREPRESENTED_MIN_RECIPES = 5
UNDERREPRESENTED_SHARE = 0.10

EXCELLENT_SCORE = 0.7
GOOD_SCORE = 0.5
CUISINE_ACHIEVEMENT = 10
PROTEIN_ACHIEVEMENT = 6
OVER_INDEX_SHARE = 0.4
MAX_RECOMMENDED = 3


class DiversityInsights(BaseModel):
    summary: str
    recommendations: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)


class DiversitySummary(BaseModel):
    metrics: DiversityMetrics
    insights: DiversityInsights
    cached: bool = False


# =============================================================================
# Pure Helpers
# =============================================================================


def distribution(values: list[str | None]) -> dict[str, int]:
    """Count defined values, most common first."""
    return dict(Counter(v for v in values if v).most_common())


def detect_trend(scores: list[float]) -> Trend:
    """
    Compare the mean of the later half of a chronological series to the earlier half.

    Fewer than 4 points is always "stable".
    """
    if len(scores) < TREND_MIN_POINTS:
        return "stable"

    half = len(scores) // 2
    first, second = scores[:half], scores[half:]
    delta = sum(second) / len(second) - sum(first) / len(first)

    if delta > TREND_DELTA:
        return "improving"
    if delta < -TREND_DELTA:
        return "declining"
    return "stable"


def find_underrepresented(
    counts: dict[str, int],
    reference: tuple[str, ...],
    total_recipes: int,
) -> list[str]:
    """
    Reference values seen in fewer than 10% of recipes (at least once).

    Returns nothing for fewer than 5 recipes: too little data to recommend.
    """
    if total_recipes < UNDERREPRESENTED_MIN_RECIPES:
        return []
    threshold = max(1.0, UNDERREPRESENTED_SHARE * total_recipes)
    return [value for value in reference if counts.get(value, 0) < threshold]


# =============================================================================
# Aggregator
# =============================================================================


class AnalyticsAggregator:
    """Computes, caches and explains per-user diversity metrics."""

    def __init__(self, store: MemoryStore, stale_after_days: int = STALE_AFTER_DAYS):
        self.store = store
        self.stale_after = timedelta(days=stale_after_days)

    async def calculate_diversity_metrics(
        self,
        user_id: str,
        window_days: int = DEFAULT_WINDOW_DAYS,
        now: datetime | None = None,
    ) -> DiversityMetrics:
        """
        Compute a fresh metrics snapshot over the last window_days.

        Does not persist it; see get_user_diversity_summary.
        """
        now = now or datetime.now(UTC)
        recipes = await self.store.get_recent_recipes(user_id, window_days)
        return build_metrics(user_id, recipes, now - timedelta(days=window_days), now)

    def generate_insights(self, metrics: DiversityMetrics) -> DiversityInsights:
        """Turn a metrics snapshot into a summary, recommendations and achievements."""
        window_days = max(1, (metrics.window_end - metrics.window_start).days)

        if metrics.total_recipes == 0:
            summary = f"No recipes in the last {window_days} days yet."
        else:
            score = metrics.average_diversity_score
            if score >= EXCELLENT_SCORE:
                band = "excellent"
            elif score >= GOOD_SCORE:
                band = "good"
            else:
                band = "moderate"
            summary = (
                f"Your recipe variety over the last {window_days} days is {band}: "
                f"{metrics.total_recipes} recipes across {metrics.unique_cuisines} cuisines "
                f"and {metrics.unique_proteins} proteins (average diversity {score:.2f})."
            )

        achievements = []
        if metrics.unique_cuisines >= CUISINE_ACHIEVEMENT:
            achievements.append(f"Explored {metrics.unique_cuisines} different cuisines")
        if metrics.unique_proteins >= PROTEIN_ACHIEVEMENT:
            achievements.append(f"Cooked with {metrics.unique_proteins} different proteins")
        if metrics.trend == "improving":
            achievements.append("Your recipe variety is improving")

        recommendations = []
        if metrics.underrepresented_cuisines:
            names = ", ".join(metrics.underrepresented_cuisines[:MAX_RECOMMENDED])
            recommendations.append(f"Try cuisines you rarely cook: {names}")
        if metrics.underrepresented_proteins:
            names = ", ".join(metrics.underrepresented_proteins[:MAX_RECOMMENDED])
            recommendations.append(f"Try proteins you rarely use: {names}")
        if metrics.trend == "declining":
            recommendations.append(
                "Your recent recipes are getting more alike; try a new category or main protein"
            )
        if metrics.total_recipes and metrics.cuisine_distribution:
            top_cuisine, top_count = next(iter(metrics.cuisine_distribution.items()))
            share = top_count / metrics.total_recipes
            if share > OVER_INDEX_SHARE:
                recommendations.append(
                    f"You're over-indexed on {top_cuisine} ({share:.0%} of recipes); mix in other cuisines"
                )

        return DiversityInsights(
            summary=summary,
            recommendations=recommendations,
            achievements=achievements,
        )

    async def get_user_diversity_summary(
        self,
        user_id: str,
        now: datetime | None = None,
    ) -> DiversitySummary:
        """
        Latest metrics with insights.

        Reuses the stored snapshot if it is younger than a week; otherwise
        recalculates and saves a fresh one first.
        """
        now = now or datetime.now(UTC)
        latest = await self.store.get_latest_diversity_metrics(user_id)

        if latest is not None and now - latest.calculated_at < self.stale_after:
            logger.debug(f"Using cached diversity metrics for user {user_id} from {latest.calculated_at}")
            return DiversitySummary(metrics=latest, insights=self.generate_insights(latest), cached=True)

        metrics = await self.calculate_diversity_metrics(user_id, now=now)
        await self.store.save_diversity_metrics(metrics)
        logger.info(f"Recalculated diversity metrics for user {user_id}: {metrics.total_recipes} recipes")
        return DiversitySummary(metrics=metrics, insights=self.generate_insights(metrics), cached=False)


def build_metrics(
    user_id: str,
    recipes: list[RecipeMemory],
    window_start: datetime,
    window_end: datetime,
) -> DiversityMetrics:
    """Metrics for a newest-first list of recipes."""
    cuisines = distribution([normalize_tag(r.metadata.cuisine) for r in recipes])
    proteins = distribution([normalize_protein(r.metadata.primary_protein) for r in recipes])
    methods = distribution([normalize_cooking_method(r.metadata.cooking_method) for r in recipes])

    # Oldest first for trend detection
    scores = [r.diversity_score for r in reversed(recipes) if r.diversity_score is not None]
    average = sum(scores) / len(scores) if scores else 0.0
    total = len(recipes)

    return DiversityMetrics(
        user_id=user_id,
        window_start=window_start,
        window_end=window_end,
        cuisine_distribution=cuisines,
        protein_distribution=proteins,
        method_distribution=methods,
        average_diversity_score=average,
        trend=detect_trend(scores),
        underrepresented_cuisines=find_underrepresented(cuisines, REFERENCE_CUISINES, total),
        underrepresented_proteins=find_underrepresented(proteins, REFERENCE_PROTEINS, total),
        underrepresented_methods=find_underrepresented(methods, REFERENCE_COOKING_METHODS, total),
        total_recipes=total,
        unique_cuisines=len(cuisines),
        unique_proteins=len(proteins),
        calculated_at=window_end,
    )
