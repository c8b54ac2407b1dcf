"""Tests for owner-checked alert CRUD."""

import pytest

from fxtrack.alerts.service import AlertService, require_identity
from fxtrack.data.alert_store import AlertStore
from fxtrack.exceptions import NotFoundOrUnauthorized, Unauthenticated
from fxtrack.models import AlertCondition, CurrencyPair

USD_KES = CurrencyPair("USD", "KES")


@pytest.fixture
def service(alert_store: AlertStore) -> AlertService:
    return AlertService(alert_store)


class TestRequireIdentity:
    @pytest.mark.parametrize("user_id", [None, ""])
    def test_missing_identity(self, user_id: str | None) -> None:
        with pytest.raises(Unauthenticated):
            require_identity(user_id)

    def test_present_identity(self) -> None:
        assert require_identity("alice") == "alice"


class TestAlertService:
    @pytest.mark.asyncio
    async def test_create_and_list(self, service: AlertService) -> None:
        alert = await service.create_alert("alice", USD_KES, 130.0, "above")

        assert alert.condition == AlertCondition.ABOVE
        assert alert.is_active is True
        assert alert.triggered is False
        assert [a.id for a in await service.list_alerts("alice")] == [alert.id]
        assert await service.list_alerts("bob") == []

    @pytest.mark.asyncio
    async def test_anonymous_list_is_empty(self, service: AlertService) -> None:
        await service.create_alert("alice", USD_KES, 130.0, AlertCondition.ABOVE)
        assert await service.list_alerts(None) == []

    @pytest.mark.asyncio
    async def test_anonymous_create_rejected(self, service: AlertService) -> None:
        with pytest.raises(Unauthenticated):
            await service.create_alert(None, USD_KES, 130.0, "above")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target_rate", [0.0, -5.0])
    async def test_non_positive_target_rejected(
        self, service: AlertService, target_rate: float
    ) -> None:
        with pytest.raises(ValueError):
            await service.create_alert("alice", USD_KES, target_rate, "above")

    @pytest.mark.asyncio
    async def test_unknown_condition_rejected(self, service: AlertService) -> None:
        with pytest.raises(ValueError):
            await service.create_alert("alice", USD_KES, 130.0, "sideways")

    @pytest.mark.asyncio
    async def test_delete_own_alert(self, service: AlertService, alert_store: AlertStore) -> None:
        alert = await service.create_alert("alice", USD_KES, 130.0, "above")

        await service.delete_alert("alice", alert.id)

        assert await alert_store.get(alert.id) is None

    @pytest.mark.asyncio
    async def test_delete_other_owners_alert(
        self, service: AlertService, alert_store: AlertStore
    ) -> None:
        alert = await service.create_alert("alice", USD_KES, 130.0, "above")

        with pytest.raises(NotFoundOrUnauthorized):
            await service.delete_alert("bob", alert.id)
        assert await alert_store.get(alert.id) is not None

    @pytest.mark.asyncio
    async def test_delete_missing_alert(self, service: AlertService) -> None:
        with pytest.raises(NotFoundOrUnauthorized):
            await service.delete_alert("alice", 404)

    @pytest.mark.asyncio
    async def test_set_active_keeps_trigger_latch(
        self, service: AlertService, alert_store: AlertStore
    ) -> None:
        alert = await service.create_alert("alice", USD_KES, 130.0, "above")
        await alert_store.mark_triggered(alert.id)

        await service.set_alert_active("alice", alert.id, False)
        updated = await service.set_alert_active("alice", alert.id, True)

        assert updated.is_active is True
        assert updated.triggered is True
        stored = await alert_store.get(alert.id)
        assert stored.triggered is True
        assert await alert_store.find_armed("USD") == []

    @pytest.mark.asyncio
    async def test_set_active_requires_owner(self, service: AlertService) -> None:
        alert = await service.create_alert("alice", USD_KES, 130.0, "above")
        with pytest.raises(NotFoundOrUnauthorized):
            await service.set_alert_active("bob", alert.id, False)
