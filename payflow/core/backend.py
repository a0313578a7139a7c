"""HTTP client for the invoicing backend endpoints the flow depends on."""

import json
import logging
from typing import Any, Optional, Protocol

import httpx
from pydantic import ValidationError

from ..types import (
    EMIT_INVOICE_ACTION,
    ActionEnvelope,
    BackendError,
    BackendUnavailableError,
    BillableRequest,
    FlowConfig,
    Receipt,
    SubscriptionSnapshot
)


logger = logging.getLogger(__name__)

SUBSCRIPTION_PATH = "subscription/current"
SETUP_INTENT_PATH = "payment/setup-intent"
EXECUTE_ACTION_PATH = "action/execute"


class SubscriptionSource(Protocol):
    """Read-only view of the user's subscription."""

    async def get_current(self) -> SubscriptionSnapshot: ...


class BackendClient:
    """Async client for subscription, setup-intent and action endpoints.

    Every failure is raised as BackendError (the backend answered) or
    BackendUnavailableError (it did not). Callers turn those into typed
    results.

    Example:
        async with BackendClient(FlowConfig.from_env()) as backend:
            snapshot = await backend.get_current()
    """

    def __init__(
        self,
        config: FlowConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize backend client.

        Args:
            config: Flow configuration (base URL, token, timeout)
            transport: Optional httpx transport, used to stub the backend
        """
        self.config = config
        headers = {"Accept": "application/json"}
        if config.api_token:
            headers["Authorization"] = f"Bearer {config.api_token}"
        self._client = httpx.AsyncClient(
            base_url=config.api_base_url,
            headers=headers,
            timeout=config.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_current(self) -> SubscriptionSnapshot:
        """GET subscription/current."""
        body = await self._request("GET", SUBSCRIPTION_PATH)
        return SubscriptionSnapshot.model_validate(_unwrap(body) or {})

    async def create_setup_intent(self) -> str:
        """POST payment/setup-intent and return the client secret."""
        body = _unwrap(await self._request("POST", SETUP_INTENT_PATH)) or {}
        secret = body.get("clientSecret") or body.get("client_secret")
        if not secret:
            raise BackendError("Setup intent response has no client secret", code="INVALID_RESPONSE")
        return secret

    async def execute_action(self, request: BillableRequest) -> Receipt:
        """POST action/execute for an invoice emission.

        Raises:
            BackendError: envelope status "error" or a non-2xx response
            BackendUnavailableError: no response
        """
        payload = {
            "actionType": EMIT_INVOICE_ACTION,
            "actionData": request.action_data(),
            "companyId": request.company_id,
        }
        body = await self._request("POST", EXECUTE_ACTION_PATH, payload=payload)
        try:
            envelope = ActionEnvelope.model_validate(body)
        except ValidationError as e:
            raise BackendError("Malformed action response", status_code=200, code="INVALID_RESPONSE") from e
        if not envelope.succeeded:
            raise BackendError(
                envelope.message or "Action failed",
                status_code=200,
                code=envelope.code,
                data=envelope.data,
            )
        data = envelope.data or {}
        invoice = data.get("invoice", data)
        try:
            return Receipt.model_validate(invoice)
        except ValidationError:
            # The charge went through; report it even if the invoice data is unreadable.
            logger.warning(f"Unreadable invoice in successful action response: {str(invoice)[:200]}")
            return Receipt(status=envelope.status)

    async def _request(self, method: str, path: str, payload: Optional[dict] = None) -> dict[str, Any]:
        logger.info(f"Backend request: {method} {path}")
        try:
            response = await self._client.request(method, path, json=payload)
        except httpx.RequestError as e:
            logger.warning(f"Backend unreachable for {method} {path}: {e!r}")
            raise BackendUnavailableError(f"{method} {path} failed: {e}") from e

        body = _decode(response)
        if response.is_success:
            if body is None:
                raise BackendError(
                    f"Non-JSON response from {path}",
                    status_code=response.status_code,
                    code="INVALID_RESPONSE",
                )
            return body

        logger.warning(f"Backend error for {method} {path}: status={response.status_code} body={response.text[:200]}")
        body = body or {}
        data = body.get("data")
        raise BackendError(
            body.get("message") or body.get("error") or f"HTTP {response.status_code}",
            status_code=response.status_code,
            code=body.get("code"),
            data=data if isinstance(data, dict) else None,
        )


def _decode(response: httpx.Response) -> Optional[dict[str, Any]]:
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def _unwrap(body: dict[str, Any]) -> Optional[dict[str, Any]]:
    """Accept both bare payloads and {status, data} envelopes."""
    if "status" in body and isinstance(body.get("data"), dict):
        return body["data"]
    return body
