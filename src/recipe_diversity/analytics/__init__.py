"""
Recipe Diversity - Analytics Package.

Per-user diversity metrics over a rolling window, insights built from
them, and the cache-or-recompute summary served to clients.
"""

from recipe_diversity.analytics.aggregator import (
    AnalyticsAggregator,
    DiversityInsights,
    DiversitySummary,
    detect_trend,
    find_underrepresented,
)

__all__ = [
    "AnalyticsAggregator",
    "DiversityInsights",
    "DiversitySummary",
    "detect_trend",
    "find_underrepresented",
]
