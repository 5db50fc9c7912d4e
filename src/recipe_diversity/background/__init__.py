"""
Recipe Diversity - Background Jobs Package.

Batch maintenance over all users:
- Diversity metrics aggregation
- Retention cleanup of old recipe memories
"""

from recipe_diversity.background.maintenance import (
    BatchReport,
    aggregate_all_users,
    cleanup_all_users,
)

__all__ = [
    "BatchReport",
    "aggregate_all_users",
    "cleanup_all_users",
]
