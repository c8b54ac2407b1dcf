"""Owner-checked alert CRUD."""

from fxtrack.data.alert_store import AlertStore
from fxtrack.exceptions import NotFoundOrUnauthorized, Unauthenticated
from fxtrack.logging import get_logger
from fxtrack.models import AlertCondition, AlertDefinition, CurrencyPair

logger = get_logger(__name__)


def require_identity(user_id: str | None) -> str:
    """Return the caller id or raise Unauthenticated when there is none."""
    if not user_id:
        raise Unauthenticated("authentication required")
    return user_id


class AlertService:
    """User-facing alert operations.

    Deactivating an alert does not reset its trigger latch; re-activating a
    triggered alert leaves it excluded from evaluation.
    """

    def __init__(self, alert_store: AlertStore) -> None:
        self._alerts = alert_store

    async def list_alerts(self, user_id: str | None) -> list[AlertDefinition]:
        """All alerts of the caller; empty for anonymous callers."""
        if not user_id:
            return []
        return await self._alerts.list_for_owner(user_id)

    async def create_alert(
        self,
        user_id: str | None,
        pair: CurrencyPair,
        target_rate: float,
        condition: AlertCondition | str,
    ) -> AlertDefinition:
        owner = require_identity(user_id)
        if target_rate <= 0:
            raise ValueError("target_rate must be positive")
        condition = AlertCondition(condition)

        alert = await self._alerts.insert(owner, pair, target_rate, condition)
        logger.info(
            "alert_created",
            alert_id=alert.id,
            pair=str(pair),
            condition=condition.value,
            target_rate=target_rate,
        )
        return alert

    async def delete_alert(self, user_id: str | None, alert_id: int) -> None:
        owner = require_identity(user_id)
        await self._owned(owner, alert_id)
        await self._alerts.delete(alert_id)
        logger.info("alert_deleted", alert_id=alert_id)

    async def set_alert_active(
        self, user_id: str | None, alert_id: int, is_active: bool
    ) -> AlertDefinition:
        """Toggle is_active only. ``triggered`` is left untouched."""
        owner = require_identity(user_id)
        alert = await self._owned(owner, alert_id)
        await self._alerts.set_active(alert_id, is_active)
        alert.is_active = is_active
        return alert

    async def _owned(self, owner: str, alert_id: int) -> AlertDefinition:
        alert = await self._alerts.get(alert_id)
        if alert is None or alert.owner != owner:
            raise NotFoundOrUnauthorized(f"alert {alert_id} not found or unauthorized")
        return alert
