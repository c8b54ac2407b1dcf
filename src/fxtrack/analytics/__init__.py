"""Read-time analytics over the retained rate series."""

from fxtrack.analytics.history import get_historical_rates, get_optimized_history
from fxtrack.analytics.trend import TrendAggregator, classify_trend, compute_trend

__all__ = [
    "TrendAggregator",
    "classify_trend",
    "compute_trend",
    "get_historical_rates",
    "get_optimized_history",
]
