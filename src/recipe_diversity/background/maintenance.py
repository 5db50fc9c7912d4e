"""
Recipe Diversity - Maintenance Jobs.

Batch operations run outside the request path (cron, CLI):
- Recompute and store diversity metrics for every user
- Delete recipe memories past the retention period

Each user is processed independently. A failure is recorded in the
report and the job moves on to the next user.
"""

import logging
from dataclasses import dataclass, field

from recipe_diversity.analytics.aggregator import AnalyticsAggregator
from recipe_diversity.db.store import MemoryStore

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Outcome of one batch run."""

    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    deleted: int = 0
    errors: dict[str, str] = field(default_factory=dict)  # user_id -> message

    def record_failure(self, user_id: str, error: Exception) -> None:
        self.failed += 1
        self.errors[user_id] = str(error) or type(error).__name__


async def aggregate_all_users(
    store: MemoryStore,
    aggregator: AnalyticsAggregator | None = None,
    window_days: int = 30,
) -> BatchReport:
    """
    Recalculate and save a metrics snapshot for every user with history.

    Raises:
        StoreError: Only if the user list itself cannot be read
    """
    aggregator = aggregator or AnalyticsAggregator(store)
    report = BatchReport()

    for user_id in await store.list_user_ids():
        report.processed += 1
        try:
            metrics = await aggregator.calculate_diversity_metrics(user_id, window_days)
            await store.save_diversity_metrics(metrics)
            report.succeeded += 1
        except Exception as e:
            logger.exception(f"Metrics aggregation failed for user {user_id}")
            report.record_failure(user_id, e)

    logger.info(
        f"Aggregated diversity metrics: {report.succeeded}/{report.processed} users "
        f"({report.failed} failed)"
    )
    return report


async def cleanup_all_users(store: MemoryStore, retention_days: int) -> BatchReport:
    """
    Delete every user's recipe memories older than retention_days.

    Raises:
        StoreError: Only if the user list itself cannot be read
    """
    report = BatchReport()

    for user_id in await store.list_user_ids():
        report.processed += 1
        try:
            report.deleted += await store.cleanup_old_recipes(user_id, retention_days)
            report.succeeded += 1
        except Exception as e:
            logger.exception(f"Retention cleanup failed for user {user_id}")
            report.record_failure(user_id, e)

    logger.info(
        f"Retention cleanup ({retention_days}d): deleted {report.deleted} recipes "
        f"across {report.succeeded}/{report.processed} users ({report.failed} failed)"
    )
    return report
