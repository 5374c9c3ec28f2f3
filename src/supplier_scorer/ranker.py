"""Recommendation Ranker - Phase 4 of the Scoring Engine.

Filters the candidate pool to eligible suppliers, scores each one from its
current job history and returns a densely ranked recommendation list.
"""

import logging
from typing import Iterable, Optional

from .aggregator import JobHistoryAggregator
from .config import ScorerConfig, get_config
from .pricing import PriceComparison, get_price_comparison
from .schema import (
    AggregatedMetrics,
    CategoryRecommendation,
    ExcludedSupplier,
    ItemContext,
    ItemRecommendation,
    JobRecord,
    RecommendationEntry,
    RecommendationMetrics,
    RecommendationResult,
    RecommendationStatus,
    ScoreBreakdown,
    Supplier,
)
from .scorer import CompositeScorer
from .sources import JobRecordSource

logger = logging.getLogger(__name__)


def _round(value: Optional[float], digits: int) -> Optional[float]:
    return round(value, digits) if value is not None else None


class RecommendationRanker:
    """Ranks suppliers for assignment to a quote item.

    Principles:
    - Only active suppliers are ever recommended
    - Job history is re-read on every call; nothing is cached
    - One supplier's data failure never aborts the rest of the ranking
    - Ties are broken by lower supplier id, so rankings are repeatable
    """

    def __init__(
        self,
        job_source: JobRecordSource,
        config: Optional[ScorerConfig] = None,
        aggregator: Optional[JobHistoryAggregator] = None,
        scorer: Optional[CompositeScorer] = None,
        price_comparison: Optional[PriceComparison] = None,
    ):
        self.job_source = job_source
        self.config = config or get_config()
        self.aggregator = aggregator or JobHistoryAggregator()
        self.scorer = scorer or CompositeScorer(self.config)
        self.price_comparison = price_comparison or get_price_comparison(self.config.price.comparison)

    def recommend(
        self,
        candidate_suppliers: Iterable[Supplier],
        item_context: Optional[ItemContext] = None,
        top_k: Optional[int] = None,
    ) -> list[RecommendationEntry]:
        """Return the ranked recommendation list.

        An empty list means no eligible supplier could be ranked. Use
        evaluate() to tell an empty pool apart from fetch failures.
        """
        return self.evaluate(candidate_suppliers, item_context, top_k).recommendations

    def evaluate(
        self,
        candidate_suppliers: Iterable[Supplier],
        item_context: Optional[ItemContext] = None,
        top_k: Optional[int] = None,
    ) -> RecommendationResult:
        """Score and rank candidate suppliers.

        Args:
            candidate_suppliers: Suppliers that could take the item
            item_context: Item being assigned, with price and load snapshots
            top_k: Maximum entries to return (None returns all)

        Returns:
            Ranked recommendations plus exclusions and warnings
        """
        if top_k is None:
            top_k = self.config.ranking.default_top_k
        return self._rank(candidate_suppliers, item_context, top_k)

    def _rank(
        self,
        candidate_suppliers: Iterable[Supplier],
        item_context: Optional[ItemContext],
        top_k: Optional[int],
    ) -> RecommendationResult:
        """Rank the pool; a top_k of None keeps every entry."""
        context = item_context or ItemContext()
        if top_k is not None and top_k < 0:
            raise ValueError(f"top_k must be non-negative, got {top_k}")

        eligible, excluded = self._filter_active(candidate_suppliers)

        scored: list[tuple[Supplier, ScoreBreakdown, AggregatedMetrics]] = []
        warnings: list[str] = []
        failures = 0

        for supplier in eligible:
            try:
                records = self.job_source.fetch_job_records(supplier.id)
            except Exception as e:
                failures += 1
                self._exclude_failed(
                    supplier, "fetch_failed",
                    f"Job history unavailable for supplier {supplier.id}: {e}",
                    excluded, warnings,
                )
                continue

            try:
                metrics = self._aggregate(supplier, records, context)
                position = self.price_comparison.position(supplier.id, context.supplier_prices)
                breakdown = self.scorer.score(supplier, metrics, position)
            except Exception as e:
                failures += 1
                self._exclude_failed(
                    supplier, "scoring_failed",
                    f"Could not score supplier {supplier.id}: {e}",
                    excluded, warnings,
                )
                continue

            scored.append((supplier, breakdown, metrics))

        scored.sort(key=lambda s: (-s[1].total_score, s[0].id))

        entries = [
            self._build_entry(supplier, breakdown, metrics, rank)
            for rank, (supplier, breakdown, metrics) in enumerate(scored, 1)
        ]
        if top_k is not None:
            entries = entries[:top_k]

        return RecommendationResult(
            item_context=item_context,
            status=self._status(len(eligible), failures),
            recommendations=entries,
            excluded=excluded,
            eligible_count=len(eligible),
            processing_warnings=warnings,
        )

    def top_recommendations(
        self,
        candidate_suppliers: Iterable[Supplier],
        item_context: Optional[ItemContext] = None,
        limit: int = 3,
    ) -> list[RecommendationEntry]:
        """Return the first ``limit`` recommendations."""
        return self.recommend(candidate_suppliers, item_context, top_k=limit)

    def supplier_score(
        self,
        supplier_id: int,
        candidate_suppliers: Iterable[Supplier],
        item_context: Optional[ItemContext] = None,
    ) -> Optional[RecommendationEntry]:
        """Return one supplier's ranked entry, or None if it was not ranked."""
        entries = self._rank(candidate_suppliers, item_context, top_k=None).recommendations
        for entry in entries:
            if entry.supplier_id == supplier_id:
                return entry
        return None

    def recommend_by_item(
        self,
        candidate_suppliers: Iterable[Supplier],
        items: Iterable[ItemContext],
        top_k: Optional[int] = None,
    ) -> list[ItemRecommendation]:
        """Rank suppliers separately for each quote item.

        When an item carries a price snapshot, only suppliers that priced
        the item are ranked for it.
        """
        if top_k is None:
            top_k = self.config.ranking.per_item_top_k
        candidates = list(candidate_suppliers)

        results = []
        for item in items:
            pool = candidates
            if item.supplier_prices:
                pool = [s for s in candidates if s.id in item.supplier_prices]
            results.append(ItemRecommendation(
                item=item,
                result=self.evaluate(pool, item, top_k),
            ))
        return results

    def recommend_by_category(
        self,
        candidate_suppliers: Iterable[Supplier],
        items: Iterable[ItemContext],
        top_k: Optional[int] = None,
    ) -> list[CategoryRecommendation]:
        """Rank suppliers once per product category of a quote.

        Items are grouped on category_id and job history is scoped to the
        category. A supplier's price for the group is its total over the
        priced items (unit price times quantity). Only suppliers that priced
        every priced item are ranked; when nobody did, the suppliers covering
        the most items are ranked without a price comparison.
        """
        if top_k is None:
            top_k = self.config.ranking.per_item_top_k
        candidates = list(candidate_suppliers)

        groups: dict[Optional[int], list[ItemContext]] = {}
        for item in items:
            groups.setdefault(item.category_id, []).append(item)

        results = []
        for category_id, group in groups.items():
            pool, prices, full_coverage = self._category_pool(candidates, group)
            open_job_counts: dict[int, int] = {}
            for item in group:
                open_job_counts.update(item.open_job_counts)

            context = ItemContext(
                category_id=category_id,
                supplier_prices=prices,
                open_job_counts=open_job_counts,
                scope_history_to_category=category_id is not None,
            )
            results.append(CategoryRecommendation(
                category_id=category_id,
                items=group,
                full_coverage=full_coverage,
                result=self.evaluate(pool, context, top_k),
            ))
        return results

    @staticmethod
    def _category_pool(
        candidates: list[Supplier], group: list[ItemContext]
    ) -> tuple[list[Supplier], dict[int, float], bool]:
        """Suppliers to rank for one category, their total prices, and coverage."""
        priced = [item for item in group if item.supplier_prices]
        if not priced:
            return candidates, {}, True

        coverage: dict[int, int] = {}
        totals: dict[int, float] = {}
        for item in priced:
            for supplier_id, price in item.supplier_prices.items():
                coverage[supplier_id] = coverage.get(supplier_id, 0) + 1
                totals[supplier_id] = totals.get(supplier_id, 0.0) + price * (item.quantity or 1)

        best = max(coverage.values())
        full_coverage = best == len(priced)
        covering = {supplier_id for supplier_id, count in coverage.items() if count == best}

        pool = [s for s in candidates if s.id in covering]
        prices = {supplier_id: totals[supplier_id] for supplier_id in covering} if full_coverage else {}
        return pool, prices, full_coverage

    def _filter_active(
        self, candidate_suppliers: Iterable[Supplier]
    ) -> tuple[list[Supplier], list[ExcludedSupplier]]:
        eligible = []
        excluded = []
        seen: set[int] = set()
        for supplier in candidate_suppliers:
            if supplier.id in seen:
                logger.debug("Ignoring duplicate candidate supplier %s", supplier.id)
                continue
            seen.add(supplier.id)
            if supplier.is_active:
                eligible.append(supplier)
            else:
                excluded.append(ExcludedSupplier(
                    supplier_id=supplier.id,
                    supplier_name=supplier.display_name,
                    reason_type="inactive",
                    description=f"Supplier status is {supplier.status.value}",
                ))
        return eligible, excluded

    @staticmethod
    def _exclude_failed(
        supplier: Supplier,
        reason_type: str,
        message: str,
        excluded: list[ExcludedSupplier],
        warnings: list[str],
    ) -> None:
        """Drop a supplier whose data could not be used; the rest of the pool is still ranked."""
        logger.warning("%s", message)
        warnings.append(message)
        excluded.append(ExcludedSupplier(
            supplier_id=supplier.id,
            supplier_name=supplier.display_name,
            reason_type=reason_type,
            description=message,
        ))

    def _aggregate(
        self,
        supplier: Supplier,
        records: list[JobRecord],
        context: ItemContext,
    ) -> AggregatedMetrics:
        """Aggregate history, applying category scoping and load snapshots."""
        history = records
        if context.scope_history_to_category and context.category_id is not None:
            history = [r for r in records if r.category_id == context.category_id]

        metrics = self.aggregator.aggregate(supplier.id, history)

        # Load reflects the whole supplier, not just the scoped category
        if supplier.id in context.open_job_counts:
            current_load = context.open_job_counts[supplier.id]
        else:
            current_load = sum(1 for r in records if r.is_open)

        if current_load != metrics.current_load:
            metrics = metrics.model_copy(update={"current_load": current_load})
        return metrics

    def _build_entry(
        self,
        supplier: Supplier,
        breakdown: ScoreBreakdown,
        metrics: AggregatedMetrics,
        rank: int,
    ) -> RecommendationEntry:
        promise_pct = None
        if metrics.promise_keeping_rate is not None:
            promise_pct = round(metrics.promise_keeping_rate * 100, 1)
        cancellation_pct = None
        if metrics.cancellation_rate is not None:
            cancellation_pct = round(metrics.cancellation_rate * 100, 1)

        return RecommendationEntry(
            supplier_id=supplier.id,
            supplier_name=supplier.name,
            supplier_company=supplier.company_name,
            supplier_number=supplier.supplier_number,
            rank=rank,
            scores=breakdown,
            metrics=RecommendationMetrics(
                completed_jobs=metrics.completed_jobs,
                promise_keeping_pct=promise_pct,
                current_load=metrics.current_load,
                rated_jobs=metrics.rated_jobs,
                average_rating=_round(metrics.average_rating, 2),
                total_jobs=metrics.total_jobs,
                cancelled_jobs=metrics.cancelled_jobs,
                cancellation_pct=cancellation_pct,
                average_delivery_days=_round(metrics.average_delivery_days, 1),
                delivery_days_stddev=_round(metrics.delivery_days_stddev, 2),
            ),
        )

    @staticmethod
    def _status(eligible_count: int, failures: int) -> RecommendationStatus:
        if eligible_count == 0:
            return RecommendationStatus.NO_ELIGIBLE_SUPPLIERS
        if failures == eligible_count:
            return RecommendationStatus.FETCH_FAILED
        if failures:
            return RecommendationStatus.PARTIAL_FAILURE
        return RecommendationStatus.OK
