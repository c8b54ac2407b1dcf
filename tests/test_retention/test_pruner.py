"""Tests for RetentionPruner: 90-day cutoff, batching, sweep and partial failure."""

import sqlite3
from unittest.mock import AsyncMock

import pytest

from fxtrack.config import RetentionSettings
from fxtrack.data.database import FxDatabase
from fxtrack.data.store import RateStore
from fxtrack.models import CurrencyPair, RateSample
from fxtrack.retention.pruner import RetentionPruner
from fxtrack.retention.tiers import DAY_MS

NOW_MS = 1_700_000_000_000
CUTOFF_MS = NOW_MS - 90 * DAY_MS

USD_KES = CurrencyPair("USD", "KES")
EUR_KES = CurrencyPair("EUR", "KES")
GBP_KES = CurrencyPair("GBP", "KES")


class FlakyRateStore(RateStore):
    """RateStore whose deletes fail for chosen ids."""

    def __init__(self, database: FxDatabase, fail_ids: set[int]) -> None:
        super().__init__(database)
        self.fail_ids = fail_ids
        self.attempted: list[int] = []

    async def delete_sample(self, sample_id: int) -> None:
        self.attempted.append(sample_id)
        if sample_id in self.fail_ids:
            raise sqlite3.OperationalError("disk I/O error")
        await super().delete_sample(sample_id)


async def _insert_stale(
    store: RateStore, pair: CurrencyPair, count: int, start_ms: int = CUTOFF_MS - 1_000_000
) -> list[int]:
    ids = []
    for i in range(count):
        ids.append(await store.insert_sample(pair, 100.0 + i, start_ms + i * 1_000))
    return ids


class TestPrunePair:
    @pytest.mark.asyncio
    async def test_nothing_stale_is_noop(self, pruner: RetentionPruner, rate_store: RateStore) -> None:
        await rate_store.insert_sample(USD_KES, 129.5, NOW_MS - DAY_MS)
        assert await pruner.prune_pair(USD_KES, NOW_MS) == 0
        assert await rate_store.count_samples(USD_KES) == 1

    @pytest.mark.asyncio
    async def test_cutoff_is_strict(self, pruner: RetentionPruner, rate_store: RateStore) -> None:
        """A sample exactly at now - 90d survives; one ms older is deleted."""
        await rate_store.insert_sample(USD_KES, 1.0, CUTOFF_MS - 1)
        await rate_store.insert_sample(USD_KES, 2.0, CUTOFF_MS)

        assert await pruner.prune_pair(USD_KES, NOW_MS) == 1

        remaining = await rate_store.get_samples(USD_KES)
        assert [s.timestamp_ms for s in remaining] == [CUTOFF_MS]

    @pytest.mark.asyncio
    async def test_only_target_pair_is_pruned(
        self, pruner: RetentionPruner, rate_store: RateStore
    ) -> None:
        await _insert_stale(rate_store, USD_KES, 3)
        await _insert_stale(rate_store, EUR_KES, 2)

        assert await pruner.prune_pair(USD_KES, NOW_MS) == 3
        assert await rate_store.count_samples(USD_KES) == 0
        assert await rate_store.count_samples(EUR_KES) == 2

    @pytest.mark.asyncio
    async def test_no_sample_older_than_horizon_after_prune(
        self, pruner: RetentionPruner, rate_store: RateStore
    ) -> None:
        for days_ago in (200, 120, 91, 90, 45, 1):
            await rate_store.insert_sample(USD_KES, 1.0, NOW_MS - days_ago * DAY_MS)

        await pruner.prune_pair(USD_KES, NOW_MS)

        samples = await rate_store.get_samples(USD_KES)
        assert all(s.timestamp_ms >= CUTOFF_MS for s in samples)
        assert len(samples) == 3

    @pytest.mark.asyncio
    async def test_second_prune_changes_nothing(
        self, pruner: RetentionPruner, rate_store: RateStore
    ) -> None:
        await _insert_stale(rate_store, USD_KES, 5)
        await rate_store.insert_sample(USD_KES, 129.5, NOW_MS)

        assert await pruner.prune_pair(USD_KES, NOW_MS) == 5
        before = await rate_store.get_samples(USD_KES)
        assert await pruner.prune_pair(USD_KES, NOW_MS) == 0
        assert await rate_store.get_samples(USD_KES) == before

    @pytest.mark.asyncio
    async def test_batches_of_one_hundred(self, database: FxDatabase) -> None:
        store = FlakyRateStore(database, fail_ids=set())
        store.commit = AsyncMock(wraps=store.commit)  # type: ignore[method-assign]
        pruner = RetentionPruner(store, RetentionSettings())
        await _insert_stale(store, USD_KES, 250)

        assert await pruner.prune_pair(USD_KES, NOW_MS) == 250
        # one commit per batch: 100, 100, 50
        assert store.commit.await_count == 3
        assert len(store.attempted) == 250

    @pytest.mark.asyncio
    async def test_partial_batch_failure_aborts_remaining(self, database: FxDatabase) -> None:
        """250 stale samples; deletes in batch 2 fail -> batch 3 untouched, batch 1 kept deleted."""
        store = FlakyRateStore(database, fail_ids=set())
        ids = await _insert_stale(store, USD_KES, 250)
        batch1, batch2, batch3 = ids[:100], ids[100:200], ids[200:]
        store.fail_ids = set(batch2[50:55])
        pruner = RetentionPruner(store, RetentionSettings())

        with pytest.raises(sqlite3.OperationalError):
            await pruner.prune_pair(USD_KES, NOW_MS)

        assert not set(batch3) & set(store.attempted)
        remaining = {s.id for s in await store.get_samples(USD_KES)}
        assert remaining.isdisjoint(batch1)
        assert set(batch3) <= remaining
        assert remaining == set(batch3) | set(batch2[50:55])

        # Re-running once the fault clears finishes the job.
        store.fail_ids = set()
        assert await pruner.prune_pair(USD_KES, NOW_MS) == 55
        assert await store.count_samples(USD_KES) == 0

    @pytest.mark.asyncio
    async def test_custom_batch_size(self) -> None:
        store = AsyncMock(spec=RateStore)
        store.get_samples_before.return_value = [
            RateSample(id=i, pair=USD_KES, rate=1.0, timestamp_ms=0) for i in range(7)
        ]
        pruner = RetentionPruner(store, RetentionSettings(prune_batch_size=3))

        assert await pruner.prune_pair(USD_KES, NOW_MS) == 7
        assert store.commit.await_count == 3
        store.get_samples_before.assert_awaited_once_with(USD_KES, CUTOFF_MS)


class TestSweep:
    @pytest.mark.asyncio
    async def test_sweep_reaches_every_pair(
        self, pruner: RetentionPruner, rate_store: RateStore
    ) -> None:
        await _insert_stale(rate_store, USD_KES, 4)
        await _insert_stale(rate_store, EUR_KES, 2)
        await rate_store.insert_sample(GBP_KES, 170.0, NOW_MS - DAY_MS)

        assert await pruner.sweep(NOW_MS) == 6

        assert await rate_store.count_samples(USD_KES) == 0
        assert await rate_store.count_samples(EUR_KES) == 0
        assert await rate_store.count_samples(GBP_KES) == 1

    @pytest.mark.asyncio
    async def test_sweep_is_idempotent(
        self, pruner: RetentionPruner, rate_store: RateStore
    ) -> None:
        await _insert_stale(rate_store, USD_KES, 3)

        assert await pruner.sweep(NOW_MS) == 3
        assert await pruner.sweep(NOW_MS) == 0

    @pytest.mark.asyncio
    async def test_sweep_uses_batches_of_fifty_per_pair(self, database: FxDatabase) -> None:
        store = FlakyRateStore(database, fail_ids=set())
        store.commit = AsyncMock(wraps=store.commit)  # type: ignore[method-assign]
        pruner = RetentionPruner(store, RetentionSettings())
        await _insert_stale(store, USD_KES, 120)  # 50 + 50 + 20
        await _insert_stale(store, EUR_KES, 30)  # 30

        assert await pruner.sweep(NOW_MS) == 150
        assert store.commit.await_count == 4

    @pytest.mark.asyncio
    async def test_sweep_failure_aborts_remaining_batches_and_pairs(
        self, database: FxDatabase
    ) -> None:
        """EUR samples are older, so EUR is swept first; its second batch fails."""
        store = FlakyRateStore(database, fail_ids=set())
        eur_ids = await _insert_stale(store, EUR_KES, 80, start_ms=CUTOFF_MS - 10 * DAY_MS)
        usd_ids = await _insert_stale(store, USD_KES, 30)
        store.fail_ids = {eur_ids[60]}
        pruner = RetentionPruner(store, RetentionSettings())

        with pytest.raises(sqlite3.OperationalError):
            await pruner.sweep(NOW_MS)

        assert set(store.attempted) == set(eur_ids)
        assert {s.id for s in await store.get_samples(EUR_KES)} == {eur_ids[60]}
        assert await store.count_samples(USD_KES) == len(usd_ids)

        store.fail_ids = set()
        assert await pruner.sweep(NOW_MS) == 31
        assert await store.count_samples() == 0

    @pytest.mark.asyncio
    async def test_sweep_empty_store(self, pruner: RetentionPruner) -> None:
        assert await pruner.sweep(NOW_MS) == 0
