"""Tests for the Score Component Calculator and price comparison strategies."""

import pytest

from supplier_scorer.components import ScoreComponentCalculator
from supplier_scorer.config import ScorerConfig
from supplier_scorer.pricing import (
    BestPriceComparison,
    MarketAverageComparison,
    PriceRangeComparison,
    get_price_comparison,
)
from supplier_scorer.schema import AggregatedMetrics


@pytest.fixture
def calculator() -> ScoreComponentCalculator:
    return ScoreComponentCalculator(ScorerConfig())


def metrics_with(**kwargs) -> AggregatedMetrics:
    fields = dict(
        supplier_id=1,
        completed_jobs=10,
        promise_keeping_rate=0.8,
        courier_confirmation_rate=0.8,
        early_delivery_rate=0.0,
        current_load=0,
        timed_jobs=10,
        courier_evaluated_jobs=10,
    )
    fields.update(kwargs)
    return AggregatedMetrics(**fields)


class TestNeutralAndNewSupplier:
    """Tests for reference-level and zero-history suppliers."""

    def test_reference_rates_score_zero(self, calculator):
        components = calculator.compute_components(metrics_with())

        assert components.base.value == 70.0
        assert components.promise.value == 0.0
        assert components.courier.value == 0.0
        assert components.early.value == 0.0
        assert components.workload.value == 0.0
        assert components.price.value == 0.0

    def test_no_history_contributes_nothing(self, calculator):
        metrics = AggregatedMetrics(supplier_id=1, current_load=5)

        components = calculator.compute_components(metrics, price_position=0.1)

        assert components.promise.value == 0.0
        assert components.courier.value == 0.0
        assert components.early.value == 0.0
        assert components.workload.value == 0.0
        assert components.price.value == 5.0
        assert components.promise.description == "No delivery history"


class TestComponentValues:
    """Tests for each component's mapping and clamp range."""

    def test_perfect_promise_keeping(self, calculator):
        components = calculator.compute_components(metrics_with(promise_keeping_rate=1.0, timed_jobs=12))

        assert components.promise.value == 20.0
        assert components.promise.description == "100% promise-keeping over 12 jobs"

    def test_poor_promise_keeping_is_clamped(self, calculator):
        components = calculator.compute_components(metrics_with(promise_keeping_rate=0.0))

        assert components.promise.value == -20.0

    def test_courier_confirmation(self, calculator):
        high = calculator.compute_components(metrics_with(courier_confirmation_rate=1.0))
        low = calculator.compute_components(metrics_with(courier_confirmation_rate=0.6))

        assert high.courier.value == 15.0
        assert low.courier.value == -15.0

    def test_early_bonus_is_non_negative_and_capped(self, calculator):
        some = calculator.compute_components(metrics_with(early_delivery_rate=0.3))
        all_early = calculator.compute_components(metrics_with(early_delivery_rate=1.0))

        assert some.early.value == 6.0
        assert all_early.early.value == 8.0

    def test_workload_allowance_and_floor(self, calculator):
        within = calculator.compute_components(metrics_with(current_load=2))
        over = calculator.compute_components(metrics_with(current_load=5))
        overloaded = calculator.compute_components(metrics_with(current_load=40))

        assert within.workload.value == 0.0
        assert over.workload.value == -3.0
        assert overloaded.workload.value == -10.0
        assert "3 over allowance" in over.workload.description

    def test_price_delta(self, calculator):
        cheaper = calculator.compute_components(metrics_with(), price_position=0.2)
        pricier = calculator.compute_components(metrics_with(), price_position=-0.1)
        extreme = calculator.compute_components(metrics_with(), price_position=-0.9)

        assert cheaper.price.value == 10.0
        assert cheaper.price.description == "20% below market average price"
        assert pricier.price.value == -5.0
        assert extreme.price.value == -10.0

    def test_unknown_price(self, calculator):
        components = calculator.compute_components(metrics_with(), price_position=None)

        assert components.price.value == 0.0
        assert components.price.description == "No price comparison available"

    def test_every_component_has_description(self, calculator):
        components = calculator.compute_components(metrics_with(current_load=4), price_position=0.05)

        for component in [components.base, *components.deltas()]:
            assert component.description
            assert component.min_value <= component.value <= component.max_value


class TestMonotonicity:
    """Holding other metrics fixed, components move in one direction."""

    def test_promise_never_decreases_with_rate(self, calculator):
        values = [
            calculator.compute_components(metrics_with(promise_keeping_rate=r / 20)).promise.value
            for r in range(21)
        ]
        assert values == sorted(values)

    def test_workload_never_increases_with_load(self, calculator):
        values = [
            calculator.compute_components(metrics_with(current_load=load)).workload.value
            for load in range(30)
        ]
        assert values == sorted(values, reverse=True)


class TestOverallBand:
    """Tests for the band implied by the clamp ranges."""

    def test_default_band(self, calculator):
        assert calculator.overall_band() == (15.0, 123.0)

    def test_extremes_stay_within_band(self, calculator):
        low, high = calculator.overall_band()
        worst = calculator.compute_components(
            metrics_with(promise_keeping_rate=0.0, courier_confirmation_rate=0.0, current_load=99),
            price_position=-5.0,
        )
        best = calculator.compute_components(
            metrics_with(promise_keeping_rate=1.0, courier_confirmation_rate=1.0, early_delivery_rate=1.0),
            price_position=5.0,
        )

        worst_total = worst.base.value + sum(c.value for c in worst.deltas())
        best_total = best.base.value + sum(c.value for c in best.deltas())
        assert worst_total == low
        assert best_total == high


class TestPriceComparisons:
    """Tests for the price comparison strategies."""

    PRICES = {1: 80.0, 2: 100.0, 3: 120.0}

    def test_market_average(self):
        strategy = MarketAverageComparison()

        assert strategy.position(1, self.PRICES) == pytest.approx(0.2)
        assert strategy.position(2, self.PRICES) == pytest.approx(0.0)
        assert strategy.position(3, self.PRICES) == pytest.approx(-0.2)

    def test_best_price(self):
        strategy = BestPriceComparison()

        assert strategy.position(1, self.PRICES) == pytest.approx(0.0)
        assert strategy.position(3, self.PRICES) == pytest.approx(-0.5)

    def test_price_range(self):
        strategy = PriceRangeComparison()

        assert strategy.position(1, self.PRICES) == pytest.approx(0.2)
        assert strategy.position(2, self.PRICES) == pytest.approx(0.0)
        assert strategy.position(3, self.PRICES) == pytest.approx(-0.2)
        assert strategy.position(1, {1: 50.0, 2: 50.0}) == 0.0

    def test_missing_price_is_unknown(self):
        for strategy in (MarketAverageComparison(), BestPriceComparison(), PriceRangeComparison()):
            assert strategy.position(9, self.PRICES) is None
            assert strategy.position(1, {}) is None
            assert strategy.position(1, {1: 0.0, 2: 10.0}) is None

    def test_non_finite_prices_are_unknown(self):
        prices = {1: float("nan"), 2: 100.0, 3: float("inf")}

        for strategy in (MarketAverageComparison(), BestPriceComparison(), PriceRangeComparison()):
            assert strategy.position(1, prices) is None
            assert strategy.position(3, prices) is None
            assert strategy.position(2, prices) == pytest.approx(0.0)

    def test_non_finite_position_scores_zero(self, calculator):
        for position in (float("nan"), float("inf"), float("-inf")):
            price = calculator.compute_components(metrics_with(), price_position=position).price

            assert price.value == 0.0
            assert price.description == "No price comparison available"

    def test_lookup_by_name(self):
        assert isinstance(get_price_comparison("best_price"), BestPriceComparison)
        with pytest.raises(ValueError, match="Unknown price comparison"):
            get_price_comparison("median")
