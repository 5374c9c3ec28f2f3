"""Composite Scorer - Phase 3 of the Scoring Engine.

Sums the score components into a total and assembles the transparent
breakdown for one supplier.
"""

from typing import Optional

from .components import ScoreComponentCalculator
from .config import ScorerConfig, get_config
from .schema import (
    AggregatedMetrics,
    QualityTier,
    ScoreBreakdown,
    Supplier,
)


class CompositeScorer:
    """Scores a single supplier from its aggregated metrics.

    The scorer is a pure function of its inputs: identical supplier and
    metrics always give an identical breakdown.
    """

    def __init__(
        self,
        config: Optional[ScorerConfig] = None,
        calculator: Optional[ScoreComponentCalculator] = None,
    ):
        self.config = config or get_config()
        self.calculator = calculator or ScoreComponentCalculator(self.config)

    def score(
        self,
        supplier: Supplier,
        metrics: AggregatedMetrics,
        price_position: Optional[float] = None,
    ) -> ScoreBreakdown:
        """Score one supplier.

        Args:
            supplier: The supplier being scored
            metrics: Its aggregated job statistics
            price_position: Fraction cheaper than the comparison reference

        Returns:
            Breakdown with every component and the total score
        """
        components = self.calculator.compute_components(metrics, price_position)

        total = components.base.value + sum(c.value for c in components.deltas())
        total = round(total, 1)

        return ScoreBreakdown(
            supplier_id=supplier.id,
            base=components.base,
            price=components.price,
            promise=components.promise,
            courier=components.courier,
            early=components.early,
            workload=components.workload,
            total_score=total,
            is_new_supplier=metrics.completed_jobs == 0,
            quality_tier=self.quality_tier(total),
        )

    def quality_tier(self, total_score: float) -> QualityTier:
        """Classify a total score into its display tier."""
        thresholds = self.config.quality_thresholds
        if total_score >= thresholds.excellent:
            return QualityTier.EXCELLENT
        if total_score >= thresholds.good:
            return QualityTier.GOOD
        if total_score >= thresholds.fair:
            return QualityTier.FAIR
        return QualityTier.POOR
