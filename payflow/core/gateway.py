"""Payment gateway contract used by the tokenizer and the executor."""

from abc import ABC, abstractmethod

from .card import CardInput
from ..types import GatewayResponse


class PaymentGateway(ABC):
    """Client-side payment gateway.

    This is the only component that ever sees raw card data. Implementations
    return a GatewayResponse for anything the gateway answered and raise
    GatewayTransportError when it could not be reached.
    """

    @abstractmethod
    async def confirm_card_setup(self, client_secret: str, card: CardInput) -> GatewayResponse:
        """Attach the card to a setup intent, making it reusable."""
        raise NotImplementedError

    @abstractmethod
    async def create_payment_method(self, card: CardInput) -> GatewayResponse:
        """Create a single-use payment method from the card."""
        raise NotImplementedError

    @abstractmethod
    async def confirm_card_payment(self, client_secret: str) -> GatewayResponse:
        """Complete the issuer challenge of a payment intent."""
        raise NotImplementedError
