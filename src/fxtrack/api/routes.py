"""JSON API endpoints: rates, history, trend, alerts, preferences, news and maintenance.

The caller identity is the opaque ``X-User-Id`` header supplied by the
fronting auth layer. Read endpoints accept anonymous callers; mutations
raise Unauthenticated without it (mapped to 401 in app.py).
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

import structlog
from fastapi import APIRouter, Header, Query, Request
from fastapi.responses import JSONResponse

from fxtrack.api.schemas import (
    AlertActiveUpdate,
    AlertCreate,
    NewsCountryUpdate,
    PreferencesUpdate,
    RefreshRequest,
    alert_to_dict,
    ingest_result_to_dict,
    preferences_to_dict,
    sample_to_dict,
    snapshot_to_dict,
    trend_to_dict,
)
from fxtrack.models import CurrencyPair
from fxtrack.preferences.service import PreferencesService
from fxtrack.providers.news import NewsFeed
from fxtrack.service import ForexService

log = structlog.get_logger(__name__)

router = APIRouter()


def _forex(request: Request) -> ForexService:
    return request.app.state.forex


def _preferences(request: Request) -> PreferencesService:
    return request.app.state.preferences


# ──────────────────────────────────────────────
# Rates and history
# ──────────────────────────────────────────────


@router.get("/rates/{base_currency}")
async def get_latest_rates(request: Request, base_currency: str) -> JSONResponse:
    """Newest stored quote table for a base currency, or null."""
    snapshot = await _forex(request).get_latest_rates(base_currency)
    return JSONResponse(content=snapshot_to_dict(snapshot) if snapshot else None)


@router.post("/rates/{base_currency}/refresh")
async def refresh_rates(request: Request, base_currency: str) -> JSONResponse:
    """Fetch quotes, record samples and evaluate alerts for one base currency."""
    result = await _forex(request).refresh_rates(base_currency)
    return JSONResponse(content=ingest_result_to_dict(result))


@router.post("/rates/refresh")
async def refresh_many(request: Request, body: RefreshRequest) -> JSONResponse:
    """Refresh several base currencies concurrently; failures are reported per base."""
    outcomes = await _forex(request).refresh_many(body.base_currencies)
    content = {
        base: (
            {"error": str(outcome)}
            if isinstance(outcome, Exception)
            else ingest_result_to_dict(outcome)
        )
        for base, outcome in outcomes.items()
    }
    return JSONResponse(content=content)


@router.get("/history/{base_currency}/{target_currency}")
async def get_historical_rates(
    request: Request,
    base_currency: str,
    target_currency: str,
    hours: float = Query(24, gt=0),
) -> JSONResponse:
    """Retained samples in the last ``hours`` hours, newest first."""
    pair = CurrencyPair.of(base_currency, target_currency)
    samples = await _forex(request).get_historical_rates(pair, hours)
    return JSONResponse(content=[sample_to_dict(s) for s in samples])


@router.get("/history/{base_currency}/{target_currency}/chart")
async def get_optimized_history(
    request: Request,
    base_currency: str,
    target_currency: str,
    timeframe: str = Query("1D"),
) -> JSONResponse:
    pair = CurrencyPair.of(base_currency, target_currency)
    points = await _forex(request).get_optimized_history(pair, timeframe)
    return JSONResponse(content=[asdict(p) for p in points])


@router.get("/history/{base_currency}/{target_currency}/daily")
async def get_daily_history(
    request: Request,
    base_currency: str,
    target_currency: str,
    start: date,
    end: date,
) -> JSONResponse:
    """Provider-side daily rates for long timeframes."""
    pair = CurrencyPair.of(base_currency, target_currency)
    rates = await _forex(request).fetch_daily_history(pair, start, end)
    return JSONResponse(content=[asdict(r) for r in rates])


@router.get("/trend/{base_currency}/{target_currency}")
async def get_trend(request: Request, base_currency: str, target_currency: str) -> JSONResponse:
    pair = CurrencyPair.of(base_currency, target_currency)
    trend = await _forex(request).get_trend_data(pair)
    return JSONResponse(content=trend_to_dict(trend))


# ──────────────────────────────────────────────
# Alerts
# ──────────────────────────────────────────────


@router.get("/alerts")
async def list_alerts(
    request: Request, x_user_id: str | None = Header(None)
) -> JSONResponse:
    alerts = await _forex(request).list_alerts(x_user_id)
    return JSONResponse(content=[alert_to_dict(a) for a in alerts])


@router.post("/alerts", status_code=201)
async def create_alert(
    request: Request, body: AlertCreate, x_user_id: str | None = Header(None)
) -> JSONResponse:
    pair = CurrencyPair.of(body.base_currency, body.target_currency)
    alert = await _forex(request).create_alert(
        x_user_id, pair, body.target_rate, body.condition
    )
    return JSONResponse(content=alert_to_dict(alert), status_code=201)


@router.patch("/alerts/{alert_id}")
async def set_alert_active(
    request: Request,
    alert_id: int,
    body: AlertActiveUpdate,
    x_user_id: str | None = Header(None),
) -> JSONResponse:
    alert = await _forex(request).set_alert_active(x_user_id, alert_id, body.is_active)
    return JSONResponse(content=alert_to_dict(alert))


@router.delete("/alerts/{alert_id}", status_code=204)
async def delete_alert(
    request: Request, alert_id: int, x_user_id: str | None = Header(None)
) -> None:
    await _forex(request).delete_alert(x_user_id, alert_id)


# ──────────────────────────────────────────────
# Preferences and news
# ──────────────────────────────────────────────


@router.get("/preferences")
async def get_preferences(
    request: Request, x_user_id: str | None = Header(None)
) -> JSONResponse:
    prefs = await _preferences(request).get_preferences(x_user_id)
    return JSONResponse(content=preferences_to_dict(prefs) if prefs else None)


@router.put("/preferences")
async def update_preferences(
    request: Request, body: PreferencesUpdate, x_user_id: str | None = Header(None)
) -> JSONResponse:
    watched = (
        [p.to_model() for p in body.watched_pairs]
        if body.watched_pairs is not None
        else None
    )
    prefs = await _preferences(request).update_preferences(
        x_user_id, watched_pairs=watched, news_country=body.news_country
    )
    return JSONResponse(content=preferences_to_dict(prefs))


@router.post("/preferences/defaults")
async def initialize_default_pairs(
    request: Request, x_user_id: str | None = Header(None)
) -> JSONResponse:
    pairs = await _preferences(request).initialize_default_pairs(x_user_id)
    return JSONResponse(content=[asdict(p) for p in pairs])


@router.get("/preferences/news-country")
async def get_news_country(
    request: Request, x_user_id: str | None = Header(None)
) -> JSONResponse:
    country = await _preferences(request).get_news_country(x_user_id)
    return JSONResponse(content={"news_country": country})


@router.put("/preferences/news-country")
async def set_news_country(
    request: Request, body: NewsCountryUpdate, x_user_id: str | None = Header(None)
) -> JSONResponse:
    country = await _preferences(request).set_news_country(x_user_id, body.news_country)
    return JSONResponse(content={"news_country": country})


@router.get("/news/{country_code}")
async def get_news(request: Request, country_code: str) -> JSONResponse:
    news: NewsFeed = request.app.state.news
    items = await news.fetch(country_code)
    return JSONResponse(content=[asdict(item) for item in items])


# ──────────────────────────────────────────────
# Maintenance
# ──────────────────────────────────────────────


@router.post("/maintenance/cleanup")
async def manual_cleanup(
    request: Request, x_user_id: str | None = Header(None)
) -> JSONResponse:
    await _forex(request).manual_cleanup(x_user_id)
    log.info("manual_cleanup_done")
    return JSONResponse(content={"status": "ok"})
