"""Typed SQLite read/write abstraction for rate snapshots and historical samples.

All SQL for the two rate series is isolated behind RateStore. Range queries
go through the (pair), (pair, timestamp) and (timestamp) indexes.
"""

import json

from fxtrack.data.database import FxDatabase
from fxtrack.logging import get_logger
from fxtrack.models import CurrencyPair, LatestRateSnapshot, RateSample

logger = get_logger(__name__)

_SAMPLE_COLUMNS = "id, base_currency, target_currency, rate, timestamp_ms"


def _row_to_sample(row) -> RateSample:  # type: ignore[no-untyped-def]
    return RateSample(
        id=row[0],
        pair=CurrencyPair(row[1], row[2]),
        rate=row[3],
        timestamp_ms=row[4],
    )


class RateStore:
    """Async SQLite store for latest-rate snapshots and historical rate samples.

    Usage:
        async with FxDatabase("data/fxtrack.db") as database:
            store = RateStore(database)
            sample_id = await store.insert_sample(pair, 129.5, now_ms)
    """

    def __init__(self, database: FxDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Snapshots
    # ──────────────────────────────────────────────

    async def insert_snapshot(
        self, base_currency: str, rates: dict[str, float], timestamp_ms: int
    ) -> int:
        """Append a snapshot. Older snapshots are kept as history."""
        cursor = await self._database.db.execute(
            "INSERT INTO rate_snapshots (base_currency, rates, timestamp_ms) "
            "VALUES (?, ?, ?)",
            (base_currency, json.dumps(rates), timestamp_ms),
        )
        await self._database.db.commit()
        logger.debug(
            "inserted_rate_snapshot",
            base_currency=base_currency,
            currencies=len(rates),
        )
        return cursor.lastrowid

    async def get_latest_snapshot(self, base_currency: str) -> LatestRateSnapshot | None:
        """Return the newest snapshot by timestamp, or None if none was stored."""
        cursor = await self._database.db.execute(
            "SELECT id, base_currency, rates, timestamp_ms FROM rate_snapshots "
            "WHERE base_currency = ? ORDER BY timestamp_ms DESC, id DESC LIMIT 1",
            (base_currency,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return LatestRateSnapshot(
            id=row[0],
            base_currency=row[1],
            rates={k: float(v) for k, v in json.loads(row[2]).items()},
            timestamp_ms=row[3],
        )

    # ──────────────────────────────────────────────
    # Historical samples: writes
    # ──────────────────────────────────────────────

    async def insert_sample(self, pair: CurrencyPair, rate: float, timestamp_ms: int) -> int:
        """Insert one historical sample and return its id."""
        cursor = await self._database.db.execute(
            "INSERT INTO historical_rates "
            "(base_currency, target_currency, rate, timestamp_ms) VALUES (?, ?, ?, ?)",
            (pair.base_currency, pair.target_currency, rate, timestamp_ms),
        )
        await self._database.db.commit()
        return cursor.lastrowid

    async def delete_sample(self, sample_id: int) -> None:
        """Delete one sample by id. Deleting a missing id is a no-op.

        Does not commit; callers batch deletes and call commit().
        """
        await self._database.db.execute(
            "DELETE FROM historical_rates WHERE id = ?", (sample_id,)
        )

    async def commit(self) -> None:
        await self._database.db.commit()

    # ──────────────────────────────────────────────
    # Historical samples: reads
    # ──────────────────────────────────────────────

    async def get_last_sample(self, pair: CurrencyPair) -> RateSample | None:
        """Most recently persisted sample for a pair (descending timestamp, limit 1)."""
        cursor = await self._database.db.execute(
            f"SELECT {_SAMPLE_COLUMNS} FROM historical_rates "
            "WHERE base_currency = ? AND target_currency = ? "
            "ORDER BY timestamp_ms DESC, id DESC LIMIT 1",
            (pair.base_currency, pair.target_currency),
        )
        row = await cursor.fetchone()
        return _row_to_sample(row) if row is not None else None

    async def get_samples(
        self,
        pair: CurrencyPair,
        since_ms: int | None = None,
        until_ms: int | None = None,
        descending: bool = False,
    ) -> list[RateSample]:
        """Query samples for a pair within an optional inclusive time range."""
        conditions = ["base_currency = ?", "target_currency = ?"]
        params: list = [pair.base_currency, pair.target_currency]

        if since_ms is not None:
            conditions.append("timestamp_ms >= ?")
            params.append(since_ms)
        if until_ms is not None:
            conditions.append("timestamp_ms <= ?")
            params.append(until_ms)

        where = " AND ".join(conditions)
        order = "DESC" if descending else "ASC"
        cursor = await self._database.db.execute(
            f"SELECT {_SAMPLE_COLUMNS} FROM historical_rates WHERE {where} "
            f"ORDER BY timestamp_ms {order}, id {order}",
            params,
        )
        return [_row_to_sample(row) for row in await cursor.fetchall()]

    async def get_samples_before(self, pair: CurrencyPair, cutoff_ms: int) -> list[RateSample]:
        """Samples for one pair with timestamp strictly older than cutoff_ms."""
        cursor = await self._database.db.execute(
            f"SELECT {_SAMPLE_COLUMNS} FROM historical_rates "
            "WHERE base_currency = ? AND target_currency = ? AND timestamp_ms < ? "
            "ORDER BY timestamp_ms ASC",
            (pair.base_currency, pair.target_currency, cutoff_ms),
        )
        return [_row_to_sample(row) for row in await cursor.fetchall()]

    async def get_all_samples_before(self, cutoff_ms: int) -> list[RateSample]:
        """Samples of every pair older than cutoff_ms, scanned via the timestamp index."""
        cursor = await self._database.db.execute(
            f"SELECT {_SAMPLE_COLUMNS} FROM historical_rates "
            "WHERE timestamp_ms < ? ORDER BY timestamp_ms ASC",
            (cutoff_ms,),
        )
        return [_row_to_sample(row) for row in await cursor.fetchall()]

    async def count_samples(self, pair: CurrencyPair | None = None) -> int:
        if pair is None:
            cursor = await self._database.db.execute(
                "SELECT COUNT(*) FROM historical_rates"
            )
        else:
            cursor = await self._database.db.execute(
                "SELECT COUNT(*) FROM historical_rates "
                "WHERE base_currency = ? AND target_currency = ?",
                (pair.base_currency, pair.target_currency),
            )
        return (await cursor.fetchone())[0]
