"""Ingest cycle: fetch quotes, store the snapshot, sample history, evaluate alerts.

One cycle handles one base currency:
  1. FETCH: quote table from the provider (ProviderError aborts this base only)
  2. SNAPSHOT: append the table as the newest LatestRateSnapshot
  3. SAMPLE: per target currency, sampling decision -> insert -> prune;
     a failure for one target is logged and the remaining targets continue
     (a target whose sample was stored but whose prune failed counts as
     accepted and is also listed in prune_failed)
  4. ALERTS: latch armed alerts the same quote table satisfies

Cycles for distinct base currencies run concurrently and share no state.
Overlapping cycles for the same base currency are serialized with a
per-base lock, which keeps the 60-second sampling floor intact without
caching the last sample in memory.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import structlog

from fxtrack.alerts.evaluator import AlertEvaluator
from fxtrack.data.store import RateStore
from fxtrack.exceptions import PruneFailed
from fxtrack.logging import get_logger
from fxtrack.models import CurrencyPair
from fxtrack.providers.quotes import QuoteProvider
from fxtrack.retention.sampler import SamplingEngine

logger = get_logger(__name__)


@dataclass
class IngestResult:
    """Outcome of one ingest cycle for a base currency."""

    base_currency: str
    timestamp_ms: int
    rates: dict[str, float] = field(default_factory=dict)
    accepted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    prune_failed: list[str] = field(default_factory=list)
    triggered_alert_ids: list[int] = field(default_factory=list)


class RateIngestor:
    """Runs ingest cycles against a quote provider.

    Args:
        provider: Source of quote tables.
        store: Rate store for snapshots.
        sampler: Sampling decision engine (also prunes on acceptance).
        evaluator: Alert evaluator fed with the same quote table.
    """

    def __init__(
        self,
        provider: QuoteProvider,
        store: RateStore,
        sampler: SamplingEngine,
        evaluator: AlertEvaluator,
    ) -> None:
        self._provider = provider
        self._store = store
        self._sampler = sampler
        self._evaluator = evaluator
        # Locks exist only while a cycle for that base is running or waiting.
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    async def ingest(self, base_currency: str) -> IngestResult:
        """Run one full cycle for ``base_currency``.

        Raises:
            ProviderError: The quote fetch failed; nothing was stored.
        """
        base = base_currency.strip().upper()
        lock = self._locks.setdefault(base, asyncio.Lock())
        self._lock_users[base] = self._lock_users.get(base, 0) + 1
        try:
            async with lock:
                with structlog.contextvars.bound_contextvars(base_currency=base):
                    return await self._run_cycle(base)
        finally:
            self._lock_users[base] -= 1
            if not self._lock_users[base]:
                del self._lock_users[base]
                del self._locks[base]

    async def ingest_many(
        self, base_currencies: list[str]
    ) -> dict[str, IngestResult | Exception]:
        """Fan out over distinct base currencies.

        A failing base is logged and reported as its exception; the others
        are unaffected.
        """
        bases = list(dict.fromkeys(b.strip().upper() for b in base_currencies))
        outcomes = await asyncio.gather(
            *(self.ingest(base) for base in bases), return_exceptions=True
        )

        results: dict[str, IngestResult | Exception] = {}
        for base, outcome in zip(bases, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                logger.error("ingest_failed", base_currency=base, error=str(outcome))
            results[base] = outcome  # type: ignore[assignment]
        return results

    async def _run_cycle(self, base: str) -> IngestResult:
        snapshot = await self._provider.fetch(base)
        now_ms = snapshot.timestamp_ms
        await self._store.insert_snapshot(base, snapshot.rates, now_ms)

        result = IngestResult(base_currency=base, timestamp_ms=now_ms, rates=snapshot.rates)

        for target, rate in snapshot.rates.items():
            if rate <= 0:
                logger.warning("invalid_rate_ignored", target_currency=target, rate=rate)
                result.failed.append(target)
                continue
            try:
                accepted = await self._sampler.record(
                    CurrencyPair(base, target), rate, now_ms
                )
            except asyncio.CancelledError:
                raise
            except PruneFailed:
                logger.error("sample_prune_failed", target_currency=target, exc_info=True)
                result.accepted.append(target)
                result.prune_failed.append(target)
                continue
            except Exception:
                logger.error(
                    "sample_ingest_failed", target_currency=target, exc_info=True
                )
                result.failed.append(target)
                continue
            (result.accepted if accepted else result.skipped).append(target)

        fired = await self._evaluator.evaluate(base, snapshot.rates)
        result.triggered_alert_ids = [alert.id for alert in fired]

        logger.info(
            "ingest_complete",
            currencies=len(snapshot.rates),
            accepted=len(result.accepted),
            skipped=len(result.skipped),
            failed=len(result.failed),
            prune_failed=len(result.prune_failed),
            alerts_triggered=len(fired),
        )
        return result
