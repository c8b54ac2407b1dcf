"""SQLite persistence for alert definitions."""

from fxtrack.data.database import FxDatabase
from fxtrack.logging import get_logger
from fxtrack.models import AlertCondition, AlertDefinition, CurrencyPair

logger = get_logger(__name__)

_ALERT_COLUMNS = (
    "id, user_id, base_currency, target_currency, target_rate, "
    "condition, is_active, triggered"
)


def _row_to_alert(row) -> AlertDefinition:  # type: ignore[no-untyped-def]
    return AlertDefinition(
        id=row[0],
        owner=row[1],
        pair=CurrencyPair(row[2], row[3]),
        target_rate=row[4],
        condition=AlertCondition(row[5]),
        is_active=bool(row[6]),
        triggered=bool(row[7]),
    )


class AlertStore:
    """Typed access to the alerts table."""

    def __init__(self, database: FxDatabase) -> None:
        self._database = database

    async def insert(
        self,
        owner: str,
        pair: CurrencyPair,
        target_rate: float,
        condition: AlertCondition,
    ) -> AlertDefinition:
        """Insert an armed alert (active, not triggered)."""
        cursor = await self._database.db.execute(
            "INSERT INTO alerts "
            "(user_id, base_currency, target_currency, target_rate, condition, "
            "is_active, triggered) VALUES (?, ?, ?, ?, ?, 1, 0)",
            (
                owner,
                pair.base_currency,
                pair.target_currency,
                target_rate,
                condition.value,
            ),
        )
        await self._database.db.commit()
        return AlertDefinition(
            id=cursor.lastrowid,
            owner=owner,
            pair=pair,
            target_rate=target_rate,
            condition=condition,
        )

    async def get(self, alert_id: int) -> AlertDefinition | None:
        cursor = await self._database.db.execute(
            f"SELECT {_ALERT_COLUMNS} FROM alerts WHERE id = ?", (alert_id,)
        )
        row = await cursor.fetchone()
        return _row_to_alert(row) if row is not None else None

    async def list_for_owner(self, owner: str) -> list[AlertDefinition]:
        cursor = await self._database.db.execute(
            f"SELECT {_ALERT_COLUMNS} FROM alerts WHERE user_id = ? ORDER BY id ASC",
            (owner,),
        )
        return [_row_to_alert(row) for row in await cursor.fetchall()]

    async def find_armed(self, base_currency: str) -> list[AlertDefinition]:
        """Active, untriggered alerts for a base currency."""
        cursor = await self._database.db.execute(
            f"SELECT {_ALERT_COLUMNS} FROM alerts "
            "WHERE base_currency = ? AND is_active = 1 AND triggered = 0 "
            "ORDER BY id ASC",
            (base_currency,),
        )
        return [_row_to_alert(row) for row in await cursor.fetchall()]

    async def mark_triggered(self, alert_id: int) -> bool:
        """Latch an alert. Returns False if it was already triggered or is gone."""
        cursor = await self._database.db.execute(
            "UPDATE alerts SET triggered = 1 WHERE id = ? AND triggered = 0",
            (alert_id,),
        )
        await self._database.db.commit()
        return cursor.rowcount == 1

    async def set_active(self, alert_id: int, is_active: bool) -> None:
        await self._database.db.execute(
            "UPDATE alerts SET is_active = ? WHERE id = ?",
            (1 if is_active else 0, alert_id),
        )
        await self._database.db.commit()

    async def delete(self, alert_id: int) -> None:
        await self._database.db.execute("DELETE FROM alerts WHERE id = ?", (alert_id,))
        await self._database.db.commit()
