"""Shared data models for fxtrack.

Rates are plain floats as delivered by the quote provider. Timestamps are
Unix milliseconds throughout.
"""

from dataclasses import dataclass, field
from enum import Enum


class AlertCondition(str, Enum):
    """Which side of the target rate fires an alert."""

    ABOVE = "above"
    BELOW = "below"


class TrendDirection(str, Enum):
    """Direction of the 24h rate change."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class CurrencyPair:
    """Ordered (base, target) pair. USD/KES and KES/USD are different pairs."""

    base_currency: str
    target_currency: str

    @property
    def key(self) -> str:
        """Pair id in the form used by watched pairs and alerts, e.g. 'USD-KES'."""
        return f"{self.base_currency}-{self.target_currency}"

    @classmethod
    def of(cls, base_currency: str, target_currency: str) -> "CurrencyPair":
        """Build a pair from user input, normalising codes to upper case."""
        base = base_currency.strip().upper()
        target = target_currency.strip().upper()
        if not base or not target:
            raise ValueError("currency codes must be non-empty")
        return cls(base, target)

    def __str__(self) -> str:
        return f"{self.base_currency}/{self.target_currency}"


@dataclass
class RateSample:
    """One retained historical observation for a pair. Never mutated."""

    id: int
    pair: CurrencyPair
    rate: float
    timestamp_ms: int


@dataclass
class LatestRateSnapshot:
    """Full quote table for one base currency at one fetch instant."""

    id: int
    base_currency: str
    rates: dict[str, float]
    timestamp_ms: int


@dataclass
class QuoteSnapshot:
    """Quote table as returned by a provider, before it is stored."""

    base_currency: str
    rates: dict[str, float]
    timestamp_ms: int


@dataclass
class DailyRate:
    """One day of provider-side history for a pair."""

    date: str  # YYYY-MM-DD
    rate: float


@dataclass
class HistoryPoint:
    """Chart point for the optimized history read path."""

    date: str  # YYYY-MM-DD (UTC)
    rate: float
    timestamp_ms: int


@dataclass
class AlertDefinition:
    """User-defined threshold alert.

    ``triggered`` is a one-way latch: it goes False -> True once and no
    operation resets it.
    """

    id: int
    owner: str
    pair: CurrencyPair
    target_rate: float
    condition: AlertCondition
    is_active: bool = True
    triggered: bool = False

    def is_met_by(self, current_rate: float) -> bool:
        """Check the threshold condition. Both boundaries are inclusive."""
        if self.condition == AlertCondition.ABOVE:
            return current_rate >= self.target_rate
        return current_rate <= self.target_rate


@dataclass
class WatchedPair:
    """Entry in a user's watch list. ``order`` is display-only."""

    id: str
    base_currency: str
    target_currency: str
    order: int


@dataclass
class UserPreferences:
    """Per-user watch list and news settings."""

    user_id: str
    watched_pairs: list[WatchedPair] = field(default_factory=list)
    news_country: str | None = None


@dataclass
class TrendData:
    """Read-time statistics for a pair over the last 24 hours."""

    current_rate: float | None
    previous_rate: float | None
    change: float
    change_percent: float
    trend: TrendDirection
    high_24h: float | None
    low_24h: float | None


@dataclass
class NewsItem:
    """Normalised business news headline."""

    id: str
    title: str
    summary: str
    url: str
    published_at: str
    source: str
