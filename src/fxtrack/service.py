"""Application facade consumed by the HTTP layer.

Collects the read paths, alert operations, ingest triggers and retention
maintenance behind one object so route handlers stay thin.
"""

from __future__ import annotations

from datetime import date

from fxtrack.alerts.service import AlertService, require_identity
from fxtrack.analytics.history import (
    DEFAULT_WINDOW_HOURS,
    get_historical_rates,
    get_optimized_history,
)
from fxtrack.analytics.trend import TrendAggregator
from fxtrack.data.store import RateStore
from fxtrack.ingest import IngestResult, RateIngestor
from fxtrack.logging import get_logger
from fxtrack.models import (
    AlertCondition,
    AlertDefinition,
    CurrencyPair,
    DailyRate,
    HistoryPoint,
    LatestRateSnapshot,
    RateSample,
    TrendData,
)
from fxtrack.providers.quotes import QuoteProvider
from fxtrack.retention.pruner import RetentionPruner

logger = get_logger(__name__)


class ForexService:
    def __init__(
        self,
        store: RateStore,
        provider: QuoteProvider,
        ingestor: RateIngestor,
        trends: TrendAggregator,
        pruner: RetentionPruner,
        alerts: AlertService,
    ) -> None:
        self._store = store
        self._provider = provider
        self._ingestor = ingestor
        self._trends = trends
        self._pruner = pruner
        self._alerts = alerts

    # ──────────────────────────────────────────────
    # Rates
    # ──────────────────────────────────────────────

    async def get_latest_rates(self, base_currency: str) -> LatestRateSnapshot | None:
        return await self._store.get_latest_snapshot(base_currency.upper())

    async def refresh_rates(self, base_currency: str) -> IngestResult:
        """Fetch and ingest quotes for one base currency."""
        return await self._ingestor.ingest(base_currency)

    async def refresh_many(
        self, base_currencies: list[str]
    ) -> dict[str, IngestResult | Exception]:
        return await self._ingestor.ingest_many(base_currencies)

    async def get_historical_rates(
        self, pair: CurrencyPair, hours: float = DEFAULT_WINDOW_HOURS
    ) -> list[RateSample]:
        return await get_historical_rates(self._store, pair, hours)

    async def get_optimized_history(
        self, pair: CurrencyPair, timeframe: str
    ) -> list[HistoryPoint]:
        return await get_optimized_history(self._store, pair, timeframe)

    async def fetch_daily_history(
        self, pair: CurrencyPair, start: date, end: date
    ) -> list[DailyRate]:
        return await self._provider.fetch_daily_history(
            pair.base_currency, pair.target_currency, start, end
        )

    async def get_trend_data(self, pair: CurrencyPair) -> TrendData:
        return await self._trends.get_trend(pair)

    # ──────────────────────────────────────────────
    # Alerts
    # ──────────────────────────────────────────────

    async def list_alerts(self, user_id: str | None) -> list[AlertDefinition]:
        return await self._alerts.list_alerts(user_id)

    async def create_alert(
        self,
        user_id: str | None,
        pair: CurrencyPair,
        target_rate: float,
        condition: AlertCondition | str,
    ) -> AlertDefinition:
        return await self._alerts.create_alert(user_id, pair, target_rate, condition)

    async def delete_alert(self, user_id: str | None, alert_id: int) -> None:
        await self._alerts.delete_alert(user_id, alert_id)

    async def set_alert_active(
        self, user_id: str | None, alert_id: int, is_active: bool
    ) -> AlertDefinition:
        return await self._alerts.set_alert_active(user_id, alert_id, is_active)

    # ──────────────────────────────────────────────
    # Maintenance
    # ──────────────────────────────────────────────

    async def run_retention_sweep(self) -> None:
        """System-wide 90-day sweep. Idempotent."""
        await self._pruner.sweep()

    async def manual_cleanup(self, user_id: str | None) -> None:
        require_identity(user_id)
        logger.info("manual_cleanup_requested")
        await self.run_retention_sweep()
