"""Entry point for the FX rate tracker.

Wires all components together, serves the JSON API with uvicorn and runs
the daily retention sweep in the same asyncio event loop via FastAPI's
lifespan. With the API disabled only the retention scheduler runs.

Component wiring order (in build_components):
1. FxDatabase + stores (rates, alerts, preferences)
2. Quote provider and news feed
3. RetentionPruner -> SamplingEngine
4. AlertEvaluator, AlertService
5. RateIngestor, TrendAggregator
6. ForexService facade, PreferencesService
7. RetentionScheduler
"""

import asyncio
import signal
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from fxtrack.alerts.evaluator import AlertEvaluator
from fxtrack.alerts.service import AlertService
from fxtrack.analytics.trend import TrendAggregator
from fxtrack.config import AppSettings
from fxtrack.data.alert_store import AlertStore
from fxtrack.data.database import FxDatabase
from fxtrack.data.preferences_store import PreferencesStore
from fxtrack.data.store import RateStore
from fxtrack.ingest import RateIngestor
from fxtrack.logging import get_logger, setup_logging
from fxtrack.preferences.service import PreferencesService
from fxtrack.providers.news import NewsFeed
from fxtrack.providers.quotes import ExchangeRateApiProvider, QuoteProvider
from fxtrack.retention.pruner import RetentionPruner
from fxtrack.retention.sampler import SamplingEngine
from fxtrack.retention.scheduler import RetentionScheduler
from fxtrack.service import ForexService


def build_components(
    settings: AppSettings,
    provider: QuoteProvider | None = None,
    news: NewsFeed | None = None,
) -> dict[str, Any]:
    """Build the dependency graph. Does not open the database or start tasks.

    ``provider`` and ``news`` default to the HTTP clients configured in settings.
    """
    database = FxDatabase(settings.storage.db_path)
    rate_store = RateStore(database)
    alert_store = AlertStore(database)
    preferences_store = PreferencesStore(database)

    if provider is None:
        provider = ExchangeRateApiProvider(settings.quotes)
    if news is None:
        news = NewsFeed(settings.news)

    pruner = RetentionPruner(rate_store, settings.retention)
    sampler = SamplingEngine(rate_store, pruner)

    evaluator = AlertEvaluator(alert_store)
    alert_service = AlertService(alert_store)

    ingestor = RateIngestor(provider, rate_store, sampler, evaluator)
    trends = TrendAggregator(rate_store)

    forex = ForexService(
        store=rate_store,
        provider=provider,
        ingestor=ingestor,
        trends=trends,
        pruner=pruner,
        alerts=alert_service,
    )
    preferences = PreferencesService(preferences_store)
    scheduler = RetentionScheduler(pruner, settings.retention)

    return {
        "database": database,
        "provider": provider,
        "news": news,
        "forex": forex,
        "preferences": preferences,
        "scheduler": scheduler,
    }


async def _startup(settings: AppSettings, components: dict[str, Any]) -> None:
    await components["database"].connect()
    if settings.retention.sweep_enabled:
        await components["scheduler"].start()


async def _shutdown(components: dict[str, Any]) -> None:
    await components["scheduler"].stop()
    await components["provider"].close()
    await components["news"].close()
    await components["database"].close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open storage and start the sweep scheduler for the lifetime of the app."""
    logger = get_logger("fxtrack.main")
    settings: AppSettings = app.state.settings
    components = app.state.components

    app.state.forex = components["forex"]
    app.state.preferences = components["preferences"]
    app.state.news = components["news"]

    await _startup(settings, components)
    logger.info("lifespan_started", db_path=settings.storage.db_path)

    yield

    await _shutdown(components)
    logger.info("fxtrack_stopped")


async def run() -> None:
    settings = AppSettings()
    setup_logging(settings.log_level)
    logger = get_logger("fxtrack.main")

    components = build_components(settings)

    if settings.api.enabled:
        from fxtrack.api.app import create_app

        app = create_app(lifespan=lifespan)
        app.state.settings = settings
        app.state.components = components

        logger.info("starting_with_api", host=settings.api.host, port=settings.api.port)
        config = uvicorn.Config(
            app,
            host=settings.api.host,
            port=settings.api.port,
            log_level="warning",
        )
        await uvicorn.Server(config).serve()
        return

    # API disabled: run the retention scheduler until SIGINT/SIGTERM
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    logger.info("starting_without_api")
    await _startup(settings, components)
    try:
        await stop.wait()
    finally:
        await _shutdown(components)
        logger.info("fxtrack_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
