"""Retention pruner: batched deletion of samples past the 90-day horizon.

Two entry points share the same batching:

- prune_pair(): run after every accepted sample for that pair (batches of 100).
- sweep(): system-wide daily pass that also reaches pairs which stopped
  receiving samples and so never trigger prune_pair() (batches of 50).

Deletes inside a batch run concurrently; batches run one after another, so
at most one batch of deletes is in flight. A failed delete aborts the
remaining batches. Completed deletes are committed and never rolled back;
deleting is idempotent, so the caller can simply run the prune again.
"""

import asyncio
import time
from collections import defaultdict

from fxtrack.config import RetentionSettings
from fxtrack.data.store import RateStore
from fxtrack.logging import get_logger
from fxtrack.models import CurrencyPair, RateSample
from fxtrack.retention.tiers import MAX_RETENTION_MS

logger = get_logger(__name__)


class RetentionPruner:
    """Deletes samples older than ``now - 90 days``.

    Args:
        store: Rate store holding the historical samples.
        settings: Batch sizes for the per-pair prune and the sweep.
    """

    def __init__(self, store: RateStore, settings: RetentionSettings) -> None:
        self._store = store
        self._settings = settings

    @staticmethod
    def cutoff_for(now_ms: int) -> int:
        return now_ms - MAX_RETENTION_MS

    async def prune_pair(self, pair: CurrencyPair, now_ms: int | None = None) -> int:
        """Delete one pair's samples with timestamp < cutoff. Returns the count deleted."""
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        cutoff = self.cutoff_for(now_ms)

        stale = await self._store.get_samples_before(pair, cutoff)
        if not stale:
            return 0

        deleted = await self._delete_in_batches(
            stale, self._settings.prune_batch_size, pair=str(pair)
        )
        logger.info("pair_pruned", pair=str(pair), deleted=deleted, cutoff_ms=cutoff)
        return deleted

    async def sweep(self, now_ms: int | None = None) -> int:
        """Delete stale samples across all pairs in one pass.

        Scans by timestamp regardless of pair, groups the hits per pair in
        memory and deletes each group in batches. Safe to run repeatedly.
        """
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        cutoff = self.cutoff_for(now_ms)

        stale = await self._store.get_all_samples_before(cutoff)

        by_pair: dict[CurrencyPair, list[RateSample]] = defaultdict(list)
        for sample in stale:
            by_pair[sample.pair].append(sample)

        total = 0
        for pair, samples in by_pair.items():
            total += await self._delete_in_batches(
                samples, self._settings.sweep_batch_size, pair=str(pair)
            )

        logger.info(
            "retention_sweep_complete",
            pairs=len(by_pair),
            deleted=total,
            cutoff_ms=cutoff,
        )
        return total

    async def _delete_in_batches(
        self, samples: list[RateSample], batch_size: int, pair: str
    ) -> int:
        deleted = 0
        for start in range(0, len(samples), batch_size):
            batch = samples[start : start + batch_size]
            results = await asyncio.gather(
                *(self._store.delete_sample(s.id) for s in batch),
                return_exceptions=True,
            )
            await self._store.commit()

            failures = [r for r in results if isinstance(r, BaseException)]
            deleted += len(batch) - len(failures)
            if failures:
                logger.error(
                    "prune_batch_failed",
                    pair=pair,
                    batch_index=start // batch_size,
                    failed=len(failures),
                    deleted_so_far=deleted,
                    skipped=len(samples) - start - len(batch),
                )
                raise failures[0]
        return deleted
