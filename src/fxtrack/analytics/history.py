"""Read paths for chart data built on the retained sample series."""

import math
import time
from datetime import datetime, timezone

from fxtrack.data.store import RateStore
from fxtrack.models import CurrencyPair, HistoryPoint, RateSample
from fxtrack.retention.tiers import DAY_MS, HOUR_MS, MAX_RETENTION_MS

DEFAULT_WINDOW_HOURS = 24

#: Timeframes that the stored series can serve. Longer ones are answered
#: from the provider's daily history instead.
STORED_TIMEFRAMES = {"1D": DAY_MS}
PROVIDER_TIMEFRAMES = {"1W", "1M", "3M", "1Y"}


def _utc_date(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d")


async def get_historical_rates(
    store: RateStore,
    pair: CurrencyPair,
    hours: float = DEFAULT_WINDOW_HOURS,
    now_ms: int | None = None,
) -> list[RateSample]:
    """Samples with timestamp >= now - hours, newest first. Empty if none.

    Windows longer than the 90-day retention horizon are clamped to it.
    """
    if not math.isfinite(hours) or hours <= 0:
        raise ValueError("hours must be a positive finite number")
    hours = min(hours, MAX_RETENTION_MS / HOUR_MS)
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    cutoff = now_ms - int(hours * HOUR_MS)
    return await store.get_samples(pair, since_ms=cutoff, descending=True)


async def get_optimized_history(
    store: RateStore,
    pair: CurrencyPair,
    timeframe: str,
    now_ms: int | None = None,
) -> list[HistoryPoint]:
    """Chart points for a timeframe, oldest first.

    Only "1D" is served from stored samples; the longer timeframes return an
    empty list and the caller falls back to provider daily history.
    """
    if timeframe in PROVIDER_TIMEFRAMES:
        return []
    if timeframe not in STORED_TIMEFRAMES:
        raise ValueError(f"unknown timeframe: {timeframe}")

    if now_ms is None:
        now_ms = int(time.time() * 1000)
    samples = await store.get_samples(pair, since_ms=now_ms - STORED_TIMEFRAMES[timeframe])
    return [
        HistoryPoint(date=_utc_date(s.timestamp_ms), rate=s.rate, timestamp_ms=s.timestamp_ms)
        for s in samples
    ]
