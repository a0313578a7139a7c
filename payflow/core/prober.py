"""Decides whether a reusable payment credential is already on file."""

import logging
from typing import Optional

from .backend import SubscriptionSource
from ..types import PaymentCredentialState, SubscriptionSnapshot


logger = logging.getLogger(__name__)

PAY_PER_USE_PLAN = "pay_per_use"
ACTIVE_STATUS = "ACTIVE"


def credential_state_from_snapshot(snapshot: SubscriptionSnapshot) -> PaymentCredentialState:
    """Best-effort reading of a subscription snapshot."""
    if snapshot.has_reusable_credential:
        return PaymentCredentialState.PRESENT
    # An active pay-per-use plan can only have been activated with a card.
    if snapshot.plan_id == PAY_PER_USE_PLAN and (snapshot.status or "").upper() == ACTIVE_STATUS:
        return PaymentCredentialState.PRESENT
    return PaymentCredentialState.ABSENT


class CredentialProber:
    """Probes the subscription once and caches the answer.

    One prober belongs to one flow instance. Any failure reading the
    subscription yields ABSENT: charging without a credential is the
    unsafe direction.
    """

    def __init__(self, source: SubscriptionSource):
        self._source = source
        self._state: Optional[PaymentCredentialState] = None

    @property
    def state(self) -> PaymentCredentialState:
        return self._state or PaymentCredentialState.UNKNOWN

    async def probe(self) -> PaymentCredentialState:
        if self._state is not None:
            return self._state

        try:
            snapshot = await self._source.get_current()
        except Exception as e:
            logger.warning(f"Subscription probe failed, assuming no credential: {e!r}")
            self._state = PaymentCredentialState.ABSENT
            return self._state

        self._state = credential_state_from_snapshot(snapshot)
        logger.info(
            f"Credential probe: plan={snapshot.plan_id} status={snapshot.status} -> {self._state.value}"
        )
        return self._state
