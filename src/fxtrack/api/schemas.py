"""Request bodies and JSON serializers for the HTTP API."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Literal

from pydantic import BaseModel, Field

from fxtrack.ingest import IngestResult
from fxtrack.models import (
    AlertDefinition,
    LatestRateSnapshot,
    RateSample,
    TrendData,
    UserPreferences,
    WatchedPair,
)


class AlertCreate(BaseModel):
    base_currency: str = Field(min_length=1)
    target_currency: str = Field(min_length=1)
    target_rate: float = Field(gt=0)
    condition: Literal["above", "below"]


class AlertActiveUpdate(BaseModel):
    is_active: bool


class WatchedPairBody(BaseModel):
    id: str
    base_currency: str
    target_currency: str
    order: int

    def to_model(self) -> WatchedPair:
        return WatchedPair(
            id=self.id,
            base_currency=self.base_currency.upper(),
            target_currency=self.target_currency.upper(),
            order=self.order,
        )


class PreferencesUpdate(BaseModel):
    watched_pairs: list[WatchedPairBody] | None = None
    news_country: str | None = None


class NewsCountryUpdate(BaseModel):
    news_country: str = Field(min_length=2, max_length=2)


class RefreshRequest(BaseModel):
    base_currencies: list[str] = Field(min_length=1)


def snapshot_to_dict(snapshot: LatestRateSnapshot) -> dict[str, Any]:
    return {
        "base_currency": snapshot.base_currency,
        "rates": snapshot.rates,
        "timestamp": snapshot.timestamp_ms,
    }


def sample_to_dict(sample: RateSample) -> dict[str, Any]:
    return {"rate": sample.rate, "timestamp": sample.timestamp_ms}


def trend_to_dict(trend: TrendData) -> dict[str, Any]:
    return {
        "current_rate": trend.current_rate,
        "previous_rate": trend.previous_rate,
        "change": trend.change,
        "change_percent": trend.change_percent,
        "trend": trend.trend.value,
        "high_24h": trend.high_24h,
        "low_24h": trend.low_24h,
    }


def alert_to_dict(alert: AlertDefinition) -> dict[str, Any]:
    return {
        "id": alert.id,
        "pair_id": alert.pair.key,
        "base_currency": alert.pair.base_currency,
        "target_currency": alert.pair.target_currency,
        "target_rate": alert.target_rate,
        "condition": alert.condition.value,
        "is_active": alert.is_active,
        "triggered": alert.triggered,
    }


def preferences_to_dict(prefs: UserPreferences) -> dict[str, Any]:
    return {
        "watched_pairs": [asdict(p) for p in prefs.watched_pairs],
        "news_country": prefs.news_country,
    }


def ingest_result_to_dict(result: IngestResult) -> dict[str, Any]:
    return {
        "base_currency": result.base_currency,
        "timestamp": result.timestamp_ms,
        "rates": result.rates,
        "accepted": len(result.accepted),
        "skipped": len(result.skipped),
        "failed": result.failed,
        "prune_failed": result.prune_failed,
        "triggered_alert_ids": result.triggered_alert_ids,
    }
