"""24-hour trend statistics for a currency pair.

compute_trend() is a pure function of the current quote and the samples in
the window; TrendAggregator only gathers those two inputs from the store.
Nothing here writes.
"""

import time

from fxtrack.data.store import RateStore
from fxtrack.models import CurrencyPair, RateSample, TrendData, TrendDirection
from fxtrack.retention.tiers import DAY_MS

#: Absolute change at or below this is reported as STABLE (quote jitter).
TREND_DEADBAND = 0.0001


def classify_trend(change: float, deadband: float = TREND_DEADBAND) -> TrendDirection:
    """UP above +deadband, DOWN below -deadband, otherwise STABLE."""
    if change > deadband:
        return TrendDirection.UP
    if change < -deadband:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def compute_trend(current_rate: float | None, window: list[RateSample]) -> TrendData:
    """Compute change, percent change, high/low and direction.

    Args:
        current_rate: Target rate from the latest snapshot, None if absent.
        window: Samples from the last 24h. Order does not matter; the most
            recent one is used as the previous rate.

    Returns:
        TrendData. With an empty window the change is zero, the trend is
        STABLE and high/low both equal the current rate.
    """
    if not window:
        return TrendData(
            current_rate=current_rate,
            previous_rate=None,
            change=0.0,
            change_percent=0.0,
            trend=TrendDirection.STABLE,
            high_24h=current_rate,
            low_24h=current_rate,
        )

    newest_first = sorted(window, key=lambda s: s.timestamp_ms, reverse=True)
    previous_rate = newest_first[0].rate

    change = current_rate - previous_rate if current_rate is not None else 0.0
    change_percent = (change / previous_rate) * 100 if previous_rate != 0 else 0.0

    rates = [s.rate for s in window]
    if current_rate is not None:
        rates.append(current_rate)

    return TrendData(
        current_rate=current_rate,
        previous_rate=previous_rate,
        change=change,
        change_percent=change_percent,
        trend=classify_trend(change),
        high_24h=max(rates),
        low_24h=min(rates),
    )


class TrendAggregator:
    """Loads the latest snapshot and the 24h window for a pair and computes its trend."""

    def __init__(self, store: RateStore) -> None:
        self._store = store

    async def get_trend(self, pair: CurrencyPair, now_ms: int | None = None) -> TrendData:
        if now_ms is None:
            now_ms = int(time.time() * 1000)

        snapshot = await self._store.get_latest_snapshot(pair.base_currency)
        current_rate = (
            snapshot.rates.get(pair.target_currency) if snapshot is not None else None
        )
        window = await self._store.get_samples(
            pair, since_ms=now_ms - DAY_MS, descending=True
        )
        return compute_trend(current_rate, window)
