"""Typed results returned across the tokenizer and executor boundaries."""

import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from .payloads import Receipt
from .state import (
    ExecutionErrorKind,
    FailureKind,
    FlowState,
    PaymentCredentialState,
    RecoveryAction
)


class GatewayError(BaseModel):
    """Error reported by the payment gateway or the card widget."""
    code: Optional[str] = None
    decline_code: Optional[str] = None
    message: str = ""
    type: Optional[str] = None


class ExecutionError(BaseModel):
    """Raw failure signal of a billable action call."""
    kind: ExecutionErrorKind
    status_code: Optional[int] = None
    code: Optional[str] = None
    message: str = ""
    client_secret: Optional[str] = None
    gateway_error: Optional[GatewayError] = None


class FailureClass(BaseModel):
    """Closed failure taxonomy the flow decides on."""
    kind: FailureKind
    challenge_secret: Optional[str] = None
    reason_code: Optional[str] = None
    decline_reason: Optional[str] = None

    @classmethod
    def credential_required(cls) -> "FailureClass":
        return cls(kind=FailureKind.CREDENTIAL_REQUIRED)

    @classmethod
    def credential_rejected(cls, reason: str) -> "FailureClass":
        return cls(kind=FailureKind.CREDENTIAL_REJECTED, decline_reason=reason)

    @classmethod
    def step_up_required(cls, challenge_secret: str) -> "FailureClass":
        return cls(kind=FailureKind.STEP_UP_REQUIRED, challenge_secret=challenge_secret)

    @classmethod
    def business_rule_violation(cls, code: str) -> "FailureClass":
        return cls(kind=FailureKind.BUSINESS_RULE_VIOLATION, reason_code=code)

    @classmethod
    def transient(cls) -> "FailureClass":
        return cls(kind=FailureKind.TRANSIENT)

    @classmethod
    def unknown(cls) -> "FailureClass":
        return cls(kind=FailureKind.UNKNOWN)


class FailureMessage(BaseModel):
    """User-facing copy for a failure."""
    title: str
    description: str
    recovery: RecoveryAction


class TokenizeResult(BaseModel):
    """Outcome of a credential creation flow."""
    ok: bool
    payment_method_id: Optional[str] = None
    error: Optional[GatewayError] = None

    @classmethod
    def success(cls, payment_method_id: Optional[str] = None) -> "TokenizeResult":
        return cls(ok=True, payment_method_id=payment_method_id)

    @classmethod
    def failure(cls, error: GatewayError) -> "TokenizeResult":
        return cls(ok=False, error=error)


class ExecutionResult(BaseModel):
    """Outcome of a billable action, with the number of backend calls it took."""
    receipt: Optional[Receipt] = None
    error: Optional[ExecutionError] = None
    calls: int = 0

    @property
    def ok(self) -> bool:
        return self.receipt is not None and self.error is None


class ChargeAttempt(BaseModel):
    """Correlation record for one confirmation gesture."""
    attempt_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    invoice_id: Optional[str] = None
    executor_calls: int = 0
    reported: bool = False


class FlowView(BaseModel):
    """Snapshot of everything the confirmation surface renders."""
    state: FlowState
    credential: PaymentCredentialState
    checking: bool = False
    busy: bool = False
    submit_label: str
    submit_disabled: bool
    banner: Optional[FailureMessage] = None
    failure: Optional[FailureClass] = None
    card_error: Optional[str] = None
    notice: Optional[str] = None
    fee: Decimal
    currency: str
    receipt: Optional[Receipt] = None


class GatewayResponse(BaseModel):
    """Raw answer of a gateway call: an error, or the created payment method."""
    error: Optional[GatewayError] = None
    payment_method_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
