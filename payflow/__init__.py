"""payflow - payment confirmation flow for billable invoice emission."""

# Types
from .types import (
    # Flow state
    FlowState,
    PaymentCredentialState,
    FailureKind,
    RecoveryAction,
    ExecutionErrorKind,

    # Payloads
    EMIT_INVOICE_ACTION,
    BillableRequest,
    SubscriptionSnapshot,
    Receipt,

    # Results
    GatewayError,
    ExecutionError,
    FailureClass,
    FailureMessage,
    TokenizeResult,
    ExecutionResult,
    ChargeAttempt,
    FlowView,

    # Configuration
    FlowConfig,

    # Error Types
    PayflowError,
    ConfigError,
    StateError,
    BackendError,
    BackendUnavailableError,
    GatewayTransportError
)

# Core Functions
from .core import (
    classify,
    describe,
    format_money,
    BackendClient,
    CardInput,
    PaymentGateway,
    StripeGateway,
    CredentialProber,
    Tokenizer
)

# Executors
from .executors import (
    BaseActionExecutor,
    BillableActionExecutor,
    MAX_STEP_UP_RETRIES
)

from .flow import PaymentFlow

__version__ = "0.1.0"

__all__ = [
    # Flow state
    "FlowState",
    "PaymentCredentialState",
    "FailureKind",
    "RecoveryAction",
    "ExecutionErrorKind",

    # Payloads
    "EMIT_INVOICE_ACTION",
    "BillableRequest",
    "SubscriptionSnapshot",
    "Receipt",

    # Results
    "GatewayError",
    "ExecutionError",
    "FailureClass",
    "FailureMessage",
    "TokenizeResult",
    "ExecutionResult",
    "ChargeAttempt",
    "FlowView",

    # Configuration
    "FlowConfig",

    # Error Types
    "PayflowError",
    "ConfigError",
    "StateError",
    "BackendError",
    "BackendUnavailableError",
    "GatewayTransportError",

    # Core Functions
    "classify",
    "describe",
    "format_money",
    "BackendClient",
    "CardInput",
    "PaymentGateway",
    "StripeGateway",
    "CredentialProber",
    "Tokenizer",

    # Executors
    "BaseActionExecutor",
    "BillableActionExecutor",
    "MAX_STEP_UP_RETRIES",

    # Flow
    "PaymentFlow"
]
