"""Sampling decision engine for historical rate samples.

Decides, per (pair, rate, now), whether a fetched quote becomes a retained
sample. The last persisted sample is re-read from the store on every call;
nothing is cached in-process, so the engine is restart-safe. Callers must
serialize ingest per pair (RateIngestor does, per base currency) or two
overlapping decisions can both accept inside the same 60-second window.
"""

import time

from fxtrack.data.store import RateStore
from fxtrack.exceptions import PruneFailed
from fxtrack.logging import get_logger
from fxtrack.models import CurrencyPair
from fxtrack.retention.pruner import RetentionPruner
from fxtrack.retention.tiers import RetentionTier, tier_for_elapsed

logger = get_logger(__name__)

#: Tier label reported for the first sample of a pair.
BOOTSTRAP = "bootstrap"


class SamplingEngine:
    """Accepts a sample iff no sample for the pair was persisted in the last 60 s.

    On acceptance exactly one sample is inserted and the pair is pruned
    synchronously. Rejection has no side effects. Storage errors propagate;
    a failed prune after a successful insert surfaces as PruneFailed.
    """

    def __init__(self, store: RateStore, pruner: RetentionPruner) -> None:
        self._store = store
        self._pruner = pruner

    async def decide(
        self, pair: CurrencyPair, now_ms: int
    ) -> RetentionTier | str | None:
        """Return the tier a new sample would qualify for, BOOTSTRAP, or None to skip."""
        last = await self._store.get_last_sample(pair)
        if last is None:
            return BOOTSTRAP
        return tier_for_elapsed(now_ms - last.timestamp_ms)

    async def record(
        self, pair: CurrencyPair, rate: float, now_ms: int | None = None
    ) -> bool:
        """Persist ``rate`` for ``pair`` at ``now_ms`` if the decision allows it.

        Returns True when a sample was inserted.

        Raises:
            PruneFailed: The sample was inserted but pruning the pair failed.
        """
        if now_ms is None:
            now_ms = int(time.time() * 1000)

        decision = await self.decide(pair, now_ms)
        if decision is None:
            logger.debug("sample_skipped_too_recent", pair=str(pair))
            return False

        await self._store.insert_sample(pair, rate, now_ms)
        logger.debug(
            "sample_recorded",
            pair=str(pair),
            rate=rate,
            tier=decision if isinstance(decision, str) else decision.name,
        )

        try:
            await self._pruner.prune_pair(pair, now_ms)
        except Exception as e:
            raise PruneFailed(f"sample for {pair} stored, prune failed: {e}") from e
        return True
