"""Types package for payflow - flow state, wire payloads, typed results and errors."""

from .state import (
    FlowState,
    PaymentCredentialState,
    FailureKind,
    RecoveryAction,
    ExecutionErrorKind
)

from .payloads import (
    EMIT_INVOICE_ACTION,
    BillableRequest,
    SubscriptionSnapshot,
    Receipt,
    ActionEnvelope
)

from .results import (
    GatewayError,
    ExecutionError,
    GatewayResponse,
    FailureClass,
    FailureMessage,
    TokenizeResult,
    ExecutionResult,
    ChargeAttempt,
    FlowView
)

from .errors import (
    PayflowError,
    ConfigError,
    StateError,
    BackendError,
    BackendUnavailableError,
    GatewayTransportError
)

from .config import FlowConfig

__all__ = [

    "FlowState",
    "PaymentCredentialState",
    "FailureKind",
    "RecoveryAction",
    "ExecutionErrorKind",

    "EMIT_INVOICE_ACTION",
    "BillableRequest",
    "SubscriptionSnapshot",
    "Receipt",
    "ActionEnvelope",

    "GatewayError",
    "ExecutionError",
    "GatewayResponse",
    "FailureClass",
    "FailureMessage",
    "TokenizeResult",
    "ExecutionResult",
    "ChargeAttempt",
    "FlowView",

    "PayflowError",
    "ConfigError",
    "StateError",
    "BackendError",
    "BackendUnavailableError",
    "GatewayTransportError",

    "FlowConfig"
]
