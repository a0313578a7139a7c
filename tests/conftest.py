"""Shared pytest fixtures for payflow tests."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest

from payflow.core.card import CardInput
from payflow.core.gateway import PaymentGateway
from payflow.types import (
    BillableRequest,
    FlowConfig,
    GatewayResponse,
    Receipt,
    SubscriptionSnapshot
)


@pytest.fixture
def config():
    """Config with no success delay so flow tests do not sleep."""
    return FlowConfig(
        api_base_url="http://backend.test/api",
        api_token="token-123",
        success_delay_seconds=0,
        gateway_publishable_key="pk_test_123",
        gateway_api_base="https://gateway.test/v1",
    )


@pytest.fixture
def sample_request():
    """A complete invoice emission request."""
    return BillableRequest(
        recipient_name="Maria Silva",
        recipient_document="123.456.789-00",
        description="Consultoria",
        amount=Decimal("1500.00"),
        municipality="São Paulo",
        company_id="company-1",
        company_city="Campinas",
        service_date=date(2026, 3, 10),
    )


@pytest.fixture
def sample_receipt():
    return Receipt(invoice_id="inv-42", number="2026/42", status="AUTHORIZED")


@pytest.fixture
def card():
    """Card widget with a valid test card typed in."""
    card = CardInput(today=lambda: date(2026, 1, 15))
    card.update(number="4242 4242 4242 4242", exp_month="12", exp_year="34", cvc="123")
    return card


@pytest.fixture
def gateway():
    """Gateway whose calls all succeed."""
    gateway = Mock(spec=PaymentGateway)
    gateway.confirm_card_setup = AsyncMock(return_value=GatewayResponse(payment_method_id="pm_123"))
    gateway.create_payment_method = AsyncMock(return_value=GatewayResponse(payment_method_id="pm_456"))
    gateway.confirm_card_payment = AsyncMock(return_value=GatewayResponse(payment_method_id="pm_123"))
    return gateway


@pytest.fixture
def backend(sample_receipt):
    """Backend with a card on file whose actions succeed."""
    backend = Mock()
    backend.get_current = AsyncMock(return_value=SubscriptionSnapshot(
        has_reusable_credential=True, plan_id="pay_per_use", status="ACTIVE"
    ))
    backend.create_setup_intent = AsyncMock(return_value="seti_123_secret_abc")
    backend.execute_action = AsyncMock(return_value=sample_receipt)
    return backend
