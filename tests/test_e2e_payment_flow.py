"""End-to-end tests for the payment flow over stubbed backend and gateway HTTP."""

import json
from unittest.mock import Mock

import httpx
import pytest

from payflow import (
    BackendClient,
    BillableActionExecutor,
    CredentialProber,
    FlowState,
    PaymentCredentialState,
    PaymentFlow,
    StripeGateway,
    Tokenizer
)


class FakeBackend:
    """Invoicing backend: no card until a setup intent is confirmed."""

    def __init__(self, actions):
        self.actions = list(actions)
        self.requests = []

    def __call__(self, request):
        self.requests.append((request.method, request.url.path))
        if request.url.path.endswith("/subscription/current"):
            return httpx.Response(200, json={"status": "success", "data": {"planId": "free", "status": "ACTIVE"}})
        if request.url.path.endswith("/payment/setup-intent"):
            return httpx.Response(200, json={"clientSecret": "seti_1_secret_a"})
        if request.url.path.endswith("/action/execute"):
            body = json.loads(request.content)
            assert body["actionType"] == "emit_invoice"
            status, payload = self.actions.pop(0)
            return httpx.Response(status, json=payload)
        return httpx.Response(404, json={"message": "not found"})

    def count(self, suffix):
        return sum(1 for _, path in self.requests if path.endswith(suffix))


class FakeStripe:
    """Gateway: card setup succeeds; the payment intent needs one challenge."""

    def __init__(self):
        self.requests = []
        self.challenged = False

    def __call__(self, request):
        self.requests.append((request.method, request.url.path))
        path = request.url.path
        if path == "/v1/setup_intents/seti_1/confirm":
            return httpx.Response(200, json={"id": "seti_1", "status": "succeeded", "payment_method": "pm_1"})
        if path == "/v1/payment_intents/pi_1":
            status = "succeeded" if self.challenged else "requires_action"
            return httpx.Response(200, json={
                "id": "pi_1",
                "status": status,
                "next_action": {"type": "redirect_to_url", "redirect_to_url": {"url": "https://bank.test/3ds"}},
            })
        return httpx.Response(404, json={"error": {"type": "invalid_request_error", "message": "no such path"}})


@pytest.fixture
def stripe():
    return FakeStripe()


def build_flow(config, sample_request, fake_backend, stripe, card, callbacks):
    async def run_challenge(next_action):
        stripe.challenged = True

    backend = BackendClient(config, transport=httpx.MockTransport(fake_backend))
    gateway = StripeGateway(config, challenge_handler=run_challenge, transport=httpx.MockTransport(stripe))
    flow = PaymentFlow(
        sample_request,
        CredentialProber(backend),
        Tokenizer(backend, gateway, config),
        BillableActionExecutor(backend, gateway, config),
        card,
        config=config,
        on_success=callbacks.on_success,
        on_close=callbacks.on_close,
    )
    return flow, backend, gateway


class TestE2EPaymentFlow:
    """Full flows from opening the surface to the receipt."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_first_invoice_with_card_setup_and_challenge(self, config, sample_request, card, stripe):
        fake_backend = FakeBackend([
            (402, {"status": "error", "code": "PAYMENT_METHOD_REQUIRED", "message": "Cadastre um cartão"}),
            (200, {"status": "error", "code": "PAYMENT_REQUIRES_ACTION", "message": "3DS",
                   "data": {"clientSecret": "pi_1_secret_b"}}),
            (200, {"status": "success", "data": {"invoice": {"id": 77, "numero": 12, "status": "AUTHORIZED"}}}),
        ])
        callbacks = Mock()
        flow, backend, gateway = build_flow(config, sample_request, fake_backend, stripe, card, callbacks)

        # The probe says no card, so confirming goes straight to the card form
        view = await flow.open()
        assert view.credential == PaymentCredentialState.ABSENT
        view = await flow.confirm()
        assert view.state == FlowState.COLLECT_CREDENTIAL
        assert fake_backend.count("/action/execute") == 0

        card.update(number="4242424242424242", exp_month="12", exp_year="34", cvc="123")
        view = await flow.submit_credential()
        assert view.state == FlowState.CONFIRM
        assert view.credential == PaymentCredentialState.PRESENT

        # The backend still has no card attached on its side
        view = await flow.confirm()
        assert view.state == FlowState.COLLECT_CREDENTIAL
        assert view.banner.title == "Card required"

        card.update(number="4242424242424242", exp_month="12", exp_year="34", cvc="123")
        await flow.submit_credential()
        view = await flow.confirm()

        assert view.state == FlowState.SUCCESS
        assert view.receipt.invoice_id == "77"
        assert stripe.challenged
        assert fake_backend.count("/action/execute") == 3
        assert fake_backend.count("/subscription/current") == 1
        assert flow.attempts[-1].executor_calls == 2
        callbacks.on_success.assert_called_once_with(view.receipt)

        flow.close()
        callbacks.on_close.assert_called_once()
        await backend.aclose()
        await gateway.aclose()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_backend_down_then_retry(self, config, sample_request, card, stripe):
        attempts = {"count": 0}

        def flaky_backend(request):
            if request.url.path.endswith("/subscription/current"):
                return httpx.Response(200, json={"hasReusableCredential": True})
            attempts["count"] += 1
            if attempts["count"] == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"status": "success", "data": {"invoice": {"invoiceId": "inv-1"}}})

        callbacks = Mock()
        flow, backend, gateway = build_flow(config, sample_request, flaky_backend, stripe, card, callbacks)
        await flow.open()

        view = await flow.confirm()
        assert view.state == FlowState.CONFIRM
        assert view.banner.title == "No connection"
        callbacks.on_success.assert_not_called()

        view = await flow.confirm()
        assert view.state == FlowState.SUCCESS
        assert view.receipt.invoice_id == "inv-1"
        callbacks.on_success.assert_called_once()
        assert stripe.requests == []

        await backend.aclose()
        await gateway.aclose()
