"""Score Component Calculator - Phase 2 of the Scoring Engine.

Maps aggregated job statistics into named, bounded score deltas. Every
component carries a human-readable description of how it was computed.
"""

import math
from typing import Optional

from .config import ClampRange, ScorerConfig, get_config
from .schema import AggregatedMetrics, ScoreComponent, ScoreComponents


def _finalize(value: float, bounds: ClampRange) -> float:
    """Clamp to the component range and round to one decimal place."""
    # + 0.0 turns -0.0 into 0.0
    return round(bounds.clamp(value), 1) + 0.0


def _pct(rate: float) -> float:
    return rate * 100


class ScoreComponentCalculator:
    """Computes the score components for one supplier.

    Principles:
    - Undefined rates (no history) contribute zero, never a penalty
    - Every delta is clamped to its own range
    - Descriptions are part of the output, not telemetry
    """

    def __init__(self, config: Optional[ScorerConfig] = None):
        """Initialize calculator with optional custom configuration."""
        self.config = config or get_config()

    def overall_band(self) -> tuple[float, float]:
        """Lowest and highest total score the components can produce."""
        cfg = self.config
        ranges = [cfg.price.range, cfg.promise.range, cfg.courier.range, cfg.early.range, cfg.workload.range]
        return (
            cfg.base_score + sum(r.min for r in ranges),
            cfg.base_score + sum(r.max for r in ranges),
        )

    def compute_components(
        self,
        metrics: AggregatedMetrics,
        price_position: Optional[float] = None,
    ) -> ScoreComponents:
        """Compute every score component.

        Args:
            metrics: Aggregated job statistics for the supplier
            price_position: Fraction cheaper than the comparison reference
                (positive = cheaper), or None when no price is known

        Returns:
            Base plus the five bounded deltas
        """
        has_history = metrics.completed_jobs > 0

        return ScoreComponents(
            base=self._base(),
            price=self._price(price_position),
            promise=self._promise(metrics if has_history else None),
            courier=self._courier(metrics if has_history else None),
            early=self._early(metrics if has_history else None),
            workload=self._workload(metrics, has_history),
        )

    def _base(self) -> ScoreComponent:
        base = self.config.base_score
        return ScoreComponent(
            name="base",
            value=base,
            description=f"Base score {base:g} for an active supplier",
            min_value=base,
            max_value=base,
        )

    def _price(self, position: Optional[float]) -> ScoreComponent:
        cfg = self.config.price
        if position is None or not math.isfinite(position):
            value = 0.0
            description = "No price comparison available"
        else:
            pct = position * 100
            value = _finalize(pct * cfg.points_per_percent, cfg.range)
            if pct > 0:
                description = f"{pct:.0f}% below {_reference_label(cfg.comparison)}"
            elif pct < 0:
                description = f"{-pct:.0f}% above {_reference_label(cfg.comparison)}"
            else:
                description = f"At {_reference_label(cfg.comparison)}"

        return ScoreComponent(
            name="price",
            value=value,
            description=description,
            min_value=cfg.range.min,
            max_value=cfg.range.max,
        )

    def _promise(self, metrics: Optional[AggregatedMetrics]) -> ScoreComponent:
        cfg = self.config.promise
        rate = metrics.promise_keeping_rate if metrics else None
        if rate is None:
            value = 0.0
            description = "No delivery history"
        else:
            value = _finalize((_pct(rate) - cfg.reference_pct) * cfg.points_per_percent, cfg.range)
            description = f"{_pct(rate):.0f}% promise-keeping over {metrics.timed_jobs} jobs"

        return ScoreComponent(
            name="promise",
            value=value,
            description=description,
            min_value=cfg.range.min,
            max_value=cfg.range.max,
        )

    def _courier(self, metrics: Optional[AggregatedMetrics]) -> ScoreComponent:
        cfg = self.config.courier
        rate = metrics.courier_confirmation_rate if metrics else None
        if rate is None:
            value = 0.0
            description = "No courier confirmations recorded"
        else:
            value = _finalize((_pct(rate) - cfg.reference_pct) * cfg.points_per_percent, cfg.range)
            description = (
                f"{_pct(rate):.0f}% confirmed ready by courier "
                f"over {metrics.courier_evaluated_jobs} jobs"
            )

        return ScoreComponent(
            name="courier",
            value=value,
            description=description,
            min_value=cfg.range.min,
            max_value=cfg.range.max,
        )

    def _early(self, metrics: Optional[AggregatedMetrics]) -> ScoreComponent:
        cfg = self.config.early
        rate = metrics.early_delivery_rate if metrics else None
        if rate is None:
            value = 0.0
            description = "No delivery history"
        else:
            value = _finalize(_pct(rate) * cfg.points_per_percent, cfg.range)
            description = f"{_pct(rate):.0f}% finished ahead of schedule over {metrics.timed_jobs} jobs"

        return ScoreComponent(
            name="early",
            value=value,
            description=description,
            min_value=cfg.range.min,
            max_value=cfg.range.max,
        )

    def _workload(self, metrics: AggregatedMetrics, has_history: bool) -> ScoreComponent:
        cfg = self.config.workload
        load = metrics.current_load
        if not has_history:
            # New suppliers score base + price only
            return ScoreComponent(
                name="workload",
                value=0.0,
                description=f"New supplier, {load} open jobs not penalized",
                min_value=cfg.range.min,
                max_value=cfg.range.max,
            )

        excess = max(0, load - cfg.free_allowance)
        value = _finalize(-(excess * cfg.penalty_per_job), cfg.range)

        if excess == 0:
            description = f"{load} open jobs (within allowance of {cfg.free_allowance})"
        else:
            description = f"{load} open jobs, {excess} over allowance of {cfg.free_allowance}"

        return ScoreComponent(
            name="workload",
            value=value,
            description=description,
            min_value=cfg.range.min,
            max_value=cfg.range.max,
        )


def _reference_label(comparison: str) -> str:
    return {
        "market_average": "market average price",
        "best_price": "best competing price",
        "price_range": "price range midpoint",
    }.get(comparison, "reference price")
