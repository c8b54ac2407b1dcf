"""Alert evaluation against a freshly fetched quote table.

Only armed alerts (active and not yet triggered) for the base currency are
considered. A met condition latches ``triggered``; latched alerts are never
evaluated again, so each alert fires at most once. An alert whose target
currency is missing from the quote table is skipped without error.
"""

from fxtrack.data.alert_store import AlertStore
from fxtrack.logging import get_logger
from fxtrack.models import AlertDefinition

logger = get_logger(__name__)


class AlertEvaluator:
    def __init__(self, alert_store: AlertStore) -> None:
        self._alerts = alert_store

    async def evaluate(
        self, base_currency: str, rates: dict[str, float]
    ) -> list[AlertDefinition]:
        """Latch every armed alert whose condition the quotes satisfy.

        Returns the alerts that fired during this call.
        """
        fired: list[AlertDefinition] = []
        for alert in await self._alerts.find_armed(base_currency):
            current_rate = rates.get(alert.pair.target_currency)
            if current_rate is None:
                continue
            if not alert.is_met_by(current_rate):
                continue

            if await self._alerts.mark_triggered(alert.id):
                alert.triggered = True
                fired.append(alert)
                logger.info(
                    "alert_triggered",
                    alert_id=alert.id,
                    pair=str(alert.pair),
                    condition=alert.condition.value,
                    target_rate=alert.target_rate,
                    current_rate=current_rate,
                )
        return fired
