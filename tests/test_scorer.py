"""Tests for the Composite Scorer."""

import math

import pytest

from supplier_scorer.aggregator import JobHistoryAggregator
from supplier_scorer.config import ScorerConfig
from supplier_scorer.schema import AggregatedMetrics, JobStatus, QualityTier
from supplier_scorer.scorer import CompositeScorer


@pytest.fixture
def scorer() -> CompositeScorer:
    return CompositeScorer(ScorerConfig())


@pytest.fixture
def aggregator() -> JobHistoryAggregator:
    return JobHistoryAggregator()


class TestNewSupplier:
    """Suppliers without completed jobs score base + price only."""

    def test_base_only(self, scorer, make_supplier):
        breakdown = scorer.score(make_supplier(1), AggregatedMetrics(supplier_id=1))

        assert breakdown.is_new_supplier
        assert breakdown.total_score == 70.0
        assert breakdown.quality_tier == QualityTier.POOR

    @pytest.mark.parametrize("position", [-0.3, -0.1, 0.0, 0.1, 0.4])
    def test_total_is_base_plus_price(self, scorer, make_supplier, position):
        metrics = AggregatedMetrics(supplier_id=1, current_load=7)

        breakdown = scorer.score(make_supplier(1), metrics, price_position=position)

        assert breakdown.is_new_supplier
        assert breakdown.total_score == breakdown.base.value + breakdown.price.value

    def test_open_jobs_without_completions_is_new(self, scorer, aggregator, make_supplier, make_job):
        records = [make_job(1, status=JobStatus.IN_PROGRESS) for _ in range(4)]
        metrics = aggregator.aggregate(1, records)

        breakdown = scorer.score(make_supplier(1), metrics)

        assert breakdown.is_new_supplier
        assert breakdown.total_score == 70.0


class TestScenarios:
    """End-to-end scoring scenarios from job history."""

    def test_perfect_supplier(self, scorer, aggregator, make_supplier, perfect_history):
        metrics = aggregator.aggregate(1, perfect_history(1))

        breakdown = scorer.score(make_supplier(1), metrics, price_position=0.0)

        assert metrics.completed_jobs == 20
        assert metrics.early_delivery_rate == pytest.approx(0.3)
        assert not breakdown.is_new_supplier
        assert breakdown.total_score >= 110
        assert breakdown.quality_tier == QualityTier.EXCELLENT

    def test_overloaded_supplier(self, scorer, aggregator, make_supplier, make_job, perfect_history):
        history = perfect_history(1)
        open_jobs = [make_job(1, status=JobStatus.IN_PRODUCTION) for _ in range(15)]

        idle = scorer.score(make_supplier(1), aggregator.aggregate(1, history), price_position=0.0)
        busy = scorer.score(make_supplier(1), aggregator.aggregate(1, history + open_jobs), price_position=0.0)

        assert busy.total_score < idle.total_score
        assert busy.workload.value < 0
        assert busy.promise == idle.promise
        assert busy.courier == idle.courier
        assert busy.early == idle.early

    def test_total_is_sum_of_components(self, scorer, aggregator, make_supplier, make_job):
        records = [
            make_job(1, promised=3, actual=4, courier=False),
            make_job(1, promised=3, actual=2),
            make_job(1, promised=3, actual=3),
            make_job(1, status=JobStatus.PENDING),
            make_job(1, status=JobStatus.PENDING),
            make_job(1, status=JobStatus.PENDING),
        ]

        breakdown = scorer.score(make_supplier(1), aggregator.aggregate(1, records), price_position=-0.05)

        expected = sum(c.value for c in breakdown.components())
        assert breakdown.total_score == pytest.approx(expected)
        assert math.isfinite(breakdown.total_score)


class TestDeterminism:
    """The scorer is a pure function of its inputs."""

    def test_identical_inputs_identical_output(self, scorer, aggregator, make_supplier, perfect_history):
        metrics = aggregator.aggregate(1, perfect_history(1))

        first = scorer.score(make_supplier(1), metrics, price_position=0.07)
        second = scorer.score(make_supplier(1), metrics, price_position=0.07)

        assert first.model_dump_json() == second.model_dump_json()


class TestQualityTiers:
    """Tests for the display tier thresholds."""

    @pytest.mark.parametrize("total,tier", [
        (123.0, QualityTier.EXCELLENT),
        (110.0, QualityTier.EXCELLENT),
        (109.9, QualityTier.GOOD),
        (100.0, QualityTier.GOOD),
        (90.0, QualityTier.FAIR),
        (89.9, QualityTier.POOR),
        (15.0, QualityTier.POOR),
    ])
    def test_thresholds(self, scorer, total, tier):
        assert scorer.quality_tier(total) == tier
