"""Credential creation flows: reusable (setup intent) and one-shot."""

import asyncio
import logging
from typing import Optional, Protocol

from .card import CardInput
from .gateway import PaymentGateway
from ..types import (
    BackendError,
    BackendUnavailableError,
    FlowConfig,
    GatewayError,
    GatewayResponse,
    GatewayTransportError,
    TokenizeResult
)


logger = logging.getLogger(__name__)


class SetupIntentSource(Protocol):
    async def create_setup_intent(self) -> str: ...


class Tokenizer:
    """Turns what the user typed into a gateway credential.

    Card data goes straight to the gateway; the backend only hands out the
    setup intent secret. Nothing here raises: every outcome is a
    TokenizeResult.
    """

    def __init__(
        self,
        backend: SetupIntentSource,
        gateway: PaymentGateway,
        config: Optional[FlowConfig] = None
    ):
        self._backend = backend
        self._gateway = gateway
        self.config = config or FlowConfig()

    async def attach_reusable_credential(self, card: CardInput) -> TokenizeResult:
        """Save the card as the account's reusable credential."""
        refused = _refuse_incomplete(card)
        if refused:
            return refused

        try:
            client_secret = await self._backend.create_setup_intent()
        except BackendUnavailableError as e:
            return TokenizeResult.failure(GatewayError(code="network_error", message=str(e)))
        except BackendError as e:
            logger.warning(f"Setup intent unavailable: status={e.status_code} code={e.code}")
            return TokenizeResult.failure(GatewayError(code="setup_intent_unavailable", message=e.message))
        except Exception as e:
            logger.error(f"Unexpected failure creating setup intent: {e}", exc_info=True)
            return TokenizeResult.failure(GatewayError(code="setup_intent_unavailable", message=str(e)))

        logger.info(f"Confirming card setup for card ending {card.last4}")
        return await self._call_gateway(
            self._gateway.confirm_card_setup(client_secret, card),
            "card setup",
        )

    async def create_one_shot_credential(self, card: CardInput) -> TokenizeResult:
        """Create a single-use payment method; its id is in the result."""
        refused = _refuse_incomplete(card)
        if refused:
            return refused

        logger.info(f"Creating one-shot payment method for card ending {card.last4}")
        return await self._call_gateway(self._gateway.create_payment_method(card), "payment method creation")

    async def _call_gateway(self, call, what: str) -> TokenizeResult:
        try:
            response: GatewayResponse = await asyncio.wait_for(call, timeout=self.config.setup_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Gateway {what} timed out after {self.config.setup_timeout_seconds}s")
            return TokenizeResult.failure(GatewayError(code="timeout", message=f"{what} timed out"))
        except GatewayTransportError as e:
            return TokenizeResult.failure(GatewayError(code="network_error", message=str(e)))
        except Exception as e:
            logger.error(f"Unexpected gateway failure during {what}: {e}", exc_info=True)
            return TokenizeResult.failure(GatewayError(code="gateway_error", message=str(e)))

        if response.error:
            logger.info(
                f"Gateway refused {what}: code={response.error.code} decline={response.error.decline_code}"
            )
            return TokenizeResult.failure(response.error)
        return TokenizeResult.success(response.payment_method_id)


def _refuse_incomplete(card: CardInput) -> Optional[TokenizeResult]:
    """Widget problems never reach the network."""
    if card.validation_error:
        return TokenizeResult.failure(card.validation_error)
    if not card.complete:
        return TokenizeResult.failure(GatewayError(
            code="incomplete_card",
            message="Card details are incomplete.",
            type="validation_error",
        ))
    return None
