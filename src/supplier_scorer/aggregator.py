"""Job History Aggregator - Phase 1 of the Scoring Engine.

Reduces a supplier's raw job records into the fixed set of statistics the
score components are computed from.
"""

import logging
import math
from typing import Iterable, Optional

from .schema import AggregatedMetrics, JobRecord

logger = logging.getLogger(__name__)


class JobHistoryAggregator:
    """Aggregates job records for a single supplier.

    Principles:
    - The caller supplies only relevant records; no supplier filtering here
    - No history means undefined rates, never zero rates
    - Anomalous durations are dropped from rates but still count as completed
    """

    def aggregate(self, supplier_id: int, job_records: Iterable[JobRecord]) -> AggregatedMetrics:
        """Aggregate job records into metrics.

        Args:
            supplier_id: Supplier the records belong to
            job_records: All job records to consider for this supplier

        Returns:
            Aggregated metrics for the supplier
        """
        records = list(job_records)

        completed = [r for r in records if r.is_completed]
        current_load = sum(1 for r in records if r.is_open)

        durations = []  # (actual_days, promised_days) for valid completed jobs
        anomalous = 0
        for record in completed:
            actual = record.actual_days
            if actual is None or record.promised_delivery_days is None:
                continue
            if actual < 0:
                anomalous += 1
                logger.debug(
                    "Supplier %s: job %s has negative duration (%s days), excluded from rates",
                    supplier_id, record.id, actual,
                )
                continue
            durations.append((actual, record.promised_delivery_days))

        promise_rate = None
        early_rate = None
        if completed and durations:
            kept = sum(1 for actual, promised in durations if actual <= promised)
            early = sum(1 for actual, promised in durations if actual < promised)
            promise_rate = kept / len(durations)
            early_rate = early / len(durations)

        evaluated = [r for r in completed if r.courier_confirmed_ready is not None]
        courier_rate = None
        if evaluated:
            confirmed = sum(1 for r in evaluated if r.courier_confirmed_ready)
            courier_rate = confirmed / len(evaluated)

        ratings = [r.rating for r in records if r.rating is not None]
        cancelled = sum(1 for r in records if r.is_cancelled)

        days = [actual for actual, _ in durations]

        return AggregatedMetrics(
            supplier_id=supplier_id,
            completed_jobs=len(completed),
            promise_keeping_rate=promise_rate,
            courier_confirmation_rate=courier_rate,
            early_delivery_rate=early_rate,
            current_load=current_load,
            timed_jobs=len(durations),
            courier_evaluated_jobs=len(evaluated),
            anomalous_jobs=anomalous,
            rated_jobs=len(ratings),
            average_rating=_mean(ratings),
            total_jobs=len(records),
            cancelled_jobs=cancelled,
            cancellation_rate=(cancelled / len(records)) if records else None,
            average_delivery_days=_mean(days),
            delivery_days_stddev=_stddev(days),
        )


def _mean(values: list[int]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def _stddev(values: list[int]) -> Optional[float]:
    """Population standard deviation."""
    if not values:
        return None
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))
