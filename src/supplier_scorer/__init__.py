"""Supplier performance scoring and recommendation engine."""

from .aggregator import JobHistoryAggregator
from .components import ScoreComponentCalculator
from .config import ScorerConfig, get_config, load_config, reset_config
from .exceptions import JobRecordFetchError, SnapshotError, SupplierScorerError
from .pricing import (
    BestPriceComparison,
    MarketAverageComparison,
    PriceComparison,
    PriceRangeComparison,
    get_price_comparison,
)
from .ranker import RecommendationRanker
from .schema import (
    AggregatedMetrics,
    CategoryRecommendation,
    ItemContext,
    ItemRecommendation,
    JobRecord,
    JobStatus,
    QualityTier,
    RecommendationEntry,
    RecommendationResult,
    RecommendationStatus,
    ScoreBreakdown,
    Supplier,
    SupplierStatus,
)
from .scorer import CompositeScorer
from .sources import InMemoryJobRecordSource, JobRecordSource

__all__ = [
    "AggregatedMetrics",
    "BestPriceComparison",
    "CategoryRecommendation",
    "CompositeScorer",
    "InMemoryJobRecordSource",
    "ItemContext",
    "ItemRecommendation",
    "JobHistoryAggregator",
    "JobRecord",
    "JobRecordFetchError",
    "JobRecordSource",
    "JobStatus",
    "MarketAverageComparison",
    "PriceComparison",
    "PriceRangeComparison",
    "QualityTier",
    "RecommendationEntry",
    "RecommendationRanker",
    "RecommendationResult",
    "RecommendationStatus",
    "ScoreBreakdown",
    "ScoreComponentCalculator",
    "ScorerConfig",
    "SnapshotError",
    "Supplier",
    "SupplierScorerError",
    "SupplierStatus",
    "get_config",
    "get_price_comparison",
    "load_config",
    "reset_config",
]
