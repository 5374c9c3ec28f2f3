"""Price comparison strategies.

A strategy turns a competing-price snapshot for one item into a supplier's
relative price position: the signed fraction by which the supplier is cheaper
than the strategy's reference price. Positive means cheaper.
"""

import math
from typing import Mapping, Optional, Protocol


class PriceComparison(Protocol):
    """Protocol for relative price position strategies."""

    name: str

    def position(self, supplier_id: int, prices: Mapping[int, float]) -> Optional[float]:
        """
        Compute the supplier's relative price position.

        Args:
            supplier_id: Supplier being scored
            prices: supplier_id -> unit price for the item

        Returns:
            Signed fraction (positive = cheaper), or None if unknown
        """
        ...


def _is_valid_price(price: Optional[float]) -> bool:
    return price is not None and math.isfinite(price) and price > 0


def _valid_prices(prices: Mapping[int, float]) -> list[float]:
    return [p for p in prices.values() if _is_valid_price(p)]


def _supplier_price(supplier_id: int, prices: Mapping[int, float]) -> Optional[float]:
    price = prices.get(supplier_id)
    if not _is_valid_price(price):
        return None
    return price


class MarketAverageComparison:
    """Compare against the mean price of every supplier that priced the item."""

    name = "market_average"

    def position(self, supplier_id: int, prices: Mapping[int, float]) -> Optional[float]:
        price = _supplier_price(supplier_id, prices)
        valid = _valid_prices(prices)
        if price is None or not valid:
            return None
        average = sum(valid) / len(valid)
        return (average - price) / average


class BestPriceComparison:
    """Compare against the cheapest price; the cheapest supplier scores zero."""

    name = "best_price"

    def position(self, supplier_id: int, prices: Mapping[int, float]) -> Optional[float]:
        price = _supplier_price(supplier_id, prices)
        valid = _valid_prices(prices)
        if price is None or not valid:
            return None
        best = min(valid)
        return (best - price) / best


class PriceRangeComparison:
    """Place the supplier within the min/max range of the snapshot.

    The cheapest supplier sits at +spread and the most expensive at -spread.
    """

    name = "price_range"

    def __init__(self, spread: float = 0.2):
        self.spread = spread

    def position(self, supplier_id: int, prices: Mapping[int, float]) -> Optional[float]:
        price = _supplier_price(supplier_id, prices)
        valid = _valid_prices(prices)
        if price is None or not valid:
            return None
        low, high = min(valid), max(valid)
        if high == low:
            return 0.0
        # 1.0 at the cheapest price, 0.0 at the most expensive
        normalized = (high - price) / (high - low)
        return (normalized * 2 - 1) * self.spread


PRICE_COMPARISONS = {
    MarketAverageComparison.name: MarketAverageComparison,
    BestPriceComparison.name: BestPriceComparison,
    PriceRangeComparison.name: PriceRangeComparison,
}


def get_price_comparison(name: str) -> PriceComparison:
    """Resolve a price comparison strategy by its configured name."""
    try:
        return PRICE_COMPARISONS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown price comparison '{name}'. "
            f"Expected one of: {', '.join(sorted(PRICE_COMPARISONS))}"
        ) from None
