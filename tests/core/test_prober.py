"""Unit tests for payflow.core.prober module."""

from unittest.mock import AsyncMock, Mock

import pytest

from payflow.core.prober import CredentialProber, credential_state_from_snapshot
from payflow.types import BackendUnavailableError, PaymentCredentialState, SubscriptionSnapshot


class TestCredentialStateFromSnapshot:

    def test_reusable_credential_flag(self):
        snapshot = SubscriptionSnapshot(has_reusable_credential=True)
        assert credential_state_from_snapshot(snapshot) == PaymentCredentialState.PRESENT

    def test_active_pay_per_use_plan(self):
        snapshot = SubscriptionSnapshot(plan_id="pay_per_use", status="active")
        assert credential_state_from_snapshot(snapshot) == PaymentCredentialState.PRESENT

    @pytest.mark.parametrize("plan_id,status", [
        ("pay_per_use", "CANCELED"),
        ("free", "ACTIVE"),
        (None, None),
    ])
    def test_absent(self, plan_id, status):
        snapshot = SubscriptionSnapshot(plan_id=plan_id, status=status)
        assert credential_state_from_snapshot(snapshot) == PaymentCredentialState.ABSENT


class TestCredentialProber:
    """Test probing and caching."""

    @pytest.mark.asyncio
    async def test_probe_is_cached(self):
        source = Mock()
        source.get_current = AsyncMock(return_value=SubscriptionSnapshot(has_reusable_credential=True))
        prober = CredentialProber(source)

        assert prober.state == PaymentCredentialState.UNKNOWN
        assert await prober.probe() == PaymentCredentialState.PRESENT
        assert await prober.probe() == PaymentCredentialState.PRESENT
        assert prober.state == PaymentCredentialState.PRESENT
        source.get_current.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_probe_failure_means_absent(self, caplog):
        source = Mock()
        source.get_current = AsyncMock(side_effect=BackendUnavailableError("GET subscription/current failed"))
        prober = CredentialProber(source)

        assert await prober.probe() == PaymentCredentialState.ABSENT
        assert "assuming no credential" in caplog.text
