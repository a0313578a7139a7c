"""Stripe implementation of the gateway, using the publishable-key endpoints."""

import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from .card import CardInput
from .gateway import PaymentGateway
from ..types import (
    ConfigError,
    FlowConfig,
    GatewayError,
    GatewayResponse,
    GatewayTransportError
)


logger = logging.getLogger(__name__)

# Receives the intent's next_action (e.g. a redirect_to_url) and returns once
# the user has gone through the issuer's challenge.
ChallengeHandler = Callable[[dict[str, Any]], Awaitable[None]]

SUCCEEDED_STATUSES = frozenset({"succeeded", "processing", "requires_capture"})


def intent_id_from_secret(client_secret: str) -> str:
    """'pi_123_secret_abc' -> 'pi_123'."""
    intent_id, sep, _ = client_secret.partition("_secret_")
    if not sep or not intent_id:
        raise ValueError("Malformed client secret")
    return intent_id


class StripeGateway(PaymentGateway):
    """Talks to Stripe the way Stripe.js does: publishable key plus client secret.

    Example:
        gateway = StripeGateway(config, challenge_handler=open_bank_page)
        response = await gateway.confirm_card_setup(secret, card)
        if not response.ok:
            print(response.error.decline_code)
    """

    def __init__(
        self,
        config: FlowConfig,
        challenge_handler: Optional[ChallengeHandler] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize Stripe gateway.

        Args:
            config: Flow configuration with the publishable key
            challenge_handler: Coroutine that walks the user through next_action
            transport: Optional httpx transport, used to stub Stripe
        """
        if not config.gateway_publishable_key:
            raise ConfigError("gateway_publishable_key is not configured")
        self._key = config.gateway_publishable_key
        self._challenge_handler = challenge_handler
        self._client = httpx.AsyncClient(
            base_url=config.gateway_api_base,
            timeout=config.request_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def confirm_card_setup(self, client_secret: str, card: CardInput) -> GatewayResponse:
        intent_id = intent_id_from_secret(client_secret)
        form = {"client_secret": client_secret, "payment_method_data[type]": "card"}
        for field, value in card.card_fields().items():
            form[f"payment_method_data[card][{field}]"] = value

        body = await self._post(f"setup_intents/{intent_id}/confirm", form)
        if "error" in body:
            return GatewayResponse(error=_gateway_error(body["error"]))
        intent = await self._settle_intent("setup_intents", intent_id, client_secret, body)
        return _intent_response(intent, "setup_intent_authentication_failure", "last_setup_error")

    async def create_payment_method(self, card: CardInput) -> GatewayResponse:
        form = {"type": "card"}
        for field, value in card.card_fields().items():
            form[f"card[{field}]"] = value

        body = await self._post("payment_methods", form)
        if "error" in body:
            return GatewayResponse(error=_gateway_error(body["error"]))
        return GatewayResponse(payment_method_id=body.get("id"))

    async def confirm_card_payment(self, client_secret: str) -> GatewayResponse:
        intent_id = intent_id_from_secret(client_secret)
        intent = await self._get(f"payment_intents/{intent_id}", client_secret)
        if "error" in intent:
            return GatewayResponse(error=_gateway_error(intent["error"]))

        if intent.get("status") == "requires_confirmation":
            intent = await self._post(f"payment_intents/{intent_id}/confirm", {"client_secret": client_secret})
            if "error" in intent:
                return GatewayResponse(error=_gateway_error(intent["error"]))

        intent = await self._settle_intent("payment_intents", intent_id, client_secret, intent)
        return _intent_response(intent, "payment_intent_authentication_failure", "last_payment_error")

    async def _settle_intent(
        self,
        resource: str,
        intent_id: str,
        client_secret: str,
        intent: dict[str, Any]
    ) -> dict[str, Any]:
        """Run the issuer challenge if the intent asks for one, then re-read it."""
        if intent.get("status") != "requires_action":
            return intent
        if self._challenge_handler is None:
            logger.warning(f"{intent_id} requires action but no challenge handler is configured")
            return intent

        logger.info(f"Running issuer challenge for {intent_id}")
        await self._challenge_handler(intent.get("next_action") or {})
        return await self._get(f"{resource}/{intent_id}", client_secret)

    async def _post(self, path: str, form: dict[str, str]) -> dict[str, Any]:
        return await self._call("POST", path, data={**form, "key": self._key})

    async def _get(self, path: str, client_secret: str) -> dict[str, Any]:
        return await self._call("GET", path, params={"client_secret": client_secret, "key": self._key})

    async def _call(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.warning(f"Gateway unreachable for {method} {path}: {e!r}")
            raise GatewayTransportError(f"{method} {path} failed: {e}") from e
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return {"error": {"type": "api_error", "message": f"HTTP {response.status_code}"}}
        if not response.is_success and "error" not in body:
            body["error"] = {"type": "api_error", "message": f"HTTP {response.status_code}"}
        return body


def _gateway_error(raw: dict[str, Any]) -> GatewayError:
    return GatewayError(
        code=raw.get("code"),
        decline_code=raw.get("decline_code"),
        message=raw.get("message") or "",
        type=raw.get("type"),
    )


def _intent_response(intent: dict[str, Any], auth_failure_code: str, last_error_key: str) -> GatewayResponse:
    if "error" in intent:
        return GatewayResponse(error=_gateway_error(intent["error"]))

    status = intent.get("status")
    if status in SUCCEEDED_STATUSES:
        return GatewayResponse(payment_method_id=intent.get("payment_method"))

    last_error = intent.get(last_error_key)
    if last_error:
        return GatewayResponse(error=_gateway_error(last_error))
    return GatewayResponse(error=GatewayError(
        code=auth_failure_code,
        message=f"Intent ended in status {status}",
        type="invalid_request_error",
    ))
