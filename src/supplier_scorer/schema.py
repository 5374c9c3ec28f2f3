"""Pydantic models for the Supplier Scoring Engine.

Input schemas for suppliers and their job history, and output schemas for
score breakdowns and ranked recommendations.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class SupplierStatus(str, Enum):
    """Account status of a supplier."""
    ACTIVE = "active"
    PENDING_APPROVAL = "pending_approval"
    REJECTED = "rejected"
    DEACTIVATED = "deactivated"


class JobStatus(str, Enum):
    """Lifecycle status of a supplier job."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    IN_PRODUCTION = "in_production"
    READY = "ready"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    def is_open(self) -> bool:
        """Check if the job is still being worked on."""
        return self in (self.PENDING, self.IN_PROGRESS, self.IN_PRODUCTION)

    def is_completed(self) -> bool:
        """Check if the job reached a ready/delivered terminal state."""
        return self in (self.READY, self.PICKED_UP, self.IN_TRANSIT, self.DELIVERED)


class QualityTier(str, Enum):
    """Display tier for a total score."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class RecommendationStatus(str, Enum):
    """Outcome of a recommendation request."""
    OK = "ok"
    NO_ELIGIBLE_SUPPLIERS = "no_eligible_suppliers"
    PARTIAL_FAILURE = "partial_failure"
    FETCH_FAILED = "fetch_failed"


# =============================================================================
# Input Models
# =============================================================================


class Supplier(BaseModel):
    """A supplier as read from the supplier-management subsystem."""
    id: int
    name: str
    company_name: Optional[str] = None
    status: SupplierStatus = SupplierStatus.ACTIVE
    supplier_number: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == SupplierStatus.ACTIVE

    @property
    def display_name(self) -> str:
        return self.company_name or self.name


class JobRecord(BaseModel):
    """One historical assignment of a supplier to a quote item."""
    id: Optional[int] = None
    supplier_id: int
    status: JobStatus = JobStatus.PENDING
    promised_delivery_days: Optional[int] = Field(default=None, ge=0)
    courier_confirmed_ready: Optional[bool] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    cancelled: bool = False
    cancellation_reason: Optional[str] = None

    created_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    ready_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    # Catalog keys used to scope history to an item or category
    size_quantity_id: Optional[int] = None
    category_id: Optional[int] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("created_at", "accepted_at", "ready_at", "picked_up_at", "delivered_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps are UTC so they can be compared with aware ones
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled or self.status == JobStatus.CANCELLED

    @property
    def is_completed(self) -> bool:
        return self.status.is_completed() and not self.is_cancelled

    @property
    def is_open(self) -> bool:
        return self.status.is_open() and not self.is_cancelled

    @property
    def actual_days(self) -> Optional[int]:
        """Whole days from acceptance to ready; None while the job is open.

        Jobs that were never explicitly accepted are measured from creation.
        """
        if self.ready_at is None or not self.is_completed:
            return None
        start = self.accepted_at or self.created_at
        if start is None:
            return None
        return (self.ready_at - start).days


class ItemContext(BaseModel):
    """The quote item a recommendation is being made for.

    Carries the competing-price snapshot and optional load snapshot
    supplied by the caller.
    """
    quote_item_id: Optional[int] = None
    size_quantity_id: Optional[int] = None
    category_id: Optional[int] = None
    product_name: Optional[str] = None
    quantity: Optional[int] = None

    # supplier_id -> unit price for this item
    supplier_prices: dict[int, float] = Field(default_factory=dict)
    # supplier_id -> open job count, overrides the count derived from records
    open_job_counts: dict[int, int] = Field(default_factory=dict)

    scope_history_to_category: bool = Field(
        default=False,
        description="Only use job history from the item's category for rates"
    )


# =============================================================================
# Aggregation and Scoring Models
# =============================================================================


class AggregatedMetrics(BaseModel):
    """Per-supplier statistics reduced from job history."""
    supplier_id: int
    completed_jobs: int = 0
    promise_keeping_rate: Optional[float] = None
    courier_confirmation_rate: Optional[float] = None
    early_delivery_rate: Optional[float] = None
    current_load: int = 0

    # Supporting statistics for display
    timed_jobs: int = 0  # Completed jobs with a valid duration
    courier_evaluated_jobs: int = 0
    anomalous_jobs: int = 0
    rated_jobs: int = 0
    average_rating: Optional[float] = None
    total_jobs: int = 0
    cancelled_jobs: int = 0
    cancellation_rate: Optional[float] = None
    average_delivery_days: Optional[float] = None
    delivery_days_stddev: Optional[float] = None


class ScoreComponent(BaseModel):
    """A single bounded score delta with its explanation."""
    name: str
    value: float
    description: str
    min_value: float
    max_value: float


class ScoreComponents(BaseModel):
    """All score components for one supplier."""
    base: ScoreComponent
    price: ScoreComponent
    promise: ScoreComponent
    courier: ScoreComponent
    early: ScoreComponent
    workload: ScoreComponent

    def deltas(self) -> list[ScoreComponent]:
        """Components added on top of the base, in display order."""
        return [self.price, self.promise, self.courier, self.early, self.workload]


class ScoreBreakdown(BaseModel):
    """Transparent composite score for one supplier."""
    supplier_id: int
    base: ScoreComponent
    price: ScoreComponent
    promise: ScoreComponent
    courier: ScoreComponent
    early: ScoreComponent
    workload: ScoreComponent
    total_score: float
    is_new_supplier: bool
    quality_tier: QualityTier

    def components(self) -> list[ScoreComponent]:
        return [self.base, self.price, self.promise, self.courier, self.early, self.workload]


# =============================================================================
# Output Models
# =============================================================================


class RecommendationMetrics(BaseModel):
    """Subset of aggregated metrics shown next to a recommendation."""
    completed_jobs: int
    promise_keeping_pct: Optional[float] = None
    current_load: int = 0

    # Informational only, not part of the score
    rated_jobs: int = 0
    average_rating: Optional[float] = None
    total_jobs: int = 0
    cancelled_jobs: int = 0
    cancellation_pct: Optional[float] = None
    average_delivery_days: Optional[float] = None
    delivery_days_stddev: Optional[float] = None


class RecommendationEntry(BaseModel):
    """A ranked supplier recommendation."""
    supplier_id: int
    supplier_name: str
    supplier_company: Optional[str] = None
    supplier_number: Optional[int] = None
    rank: int = Field(..., ge=1)
    scores: ScoreBreakdown
    metrics: RecommendationMetrics

    @property
    def total_score(self) -> float:
        return self.scores.total_score


class ExcludedSupplier(BaseModel):
    """A supplier left out of the ranking."""
    supplier_id: int
    supplier_name: str
    reason_type: str  # "inactive", "fetch_failed" or "scoring_failed"
    description: str


class RecommendationResult(BaseModel):
    """Complete output of one recommendation request."""
    evaluated_at: datetime = Field(default_factory=datetime.utcnow)
    item_context: Optional[ItemContext] = None
    status: RecommendationStatus = RecommendationStatus.OK

    recommendations: list[RecommendationEntry] = Field(default_factory=list)
    excluded: list[ExcludedSupplier] = Field(default_factory=list)

    eligible_count: int = 0
    processing_warnings: list[str] = Field(default_factory=list)

    @property
    def top(self) -> Optional[RecommendationEntry]:
        """The entry suitable for pre-selection or automatic assignment."""
        return self.recommendations[0] if self.recommendations else None


class ItemRecommendation(BaseModel):
    """Ranked suppliers for one quote item."""
    item: ItemContext
    result: RecommendationResult


class CategoryRecommendation(BaseModel):
    """Ranked suppliers for all quote items sharing a category."""
    category_id: Optional[int] = None
    items: list[ItemContext] = Field(default_factory=list)
    full_coverage: bool = Field(
        default=True,
        description="Whether every ranked supplier priced all items in the category"
    )
    result: RecommendationResult
