"""Flow state definitions and the closed failure taxonomy enums."""

from enum import Enum


class FlowState(str, Enum):
    """States of one payment confirmation flow"""
    CONFIRM = "confirm"                        # Summary shown, waiting for the user
    COLLECT_CREDENTIAL = "collect_credential"  # Card input visible
    PROCESSING = "processing"                  # Billable action in flight
    SUCCESS = "success"                        # Terminal, receipt available
    FAILED = "failed"                          # Classified failure, settles back to a recoverable state


class PaymentCredentialState(str, Enum):
    """Whether a reusable payment credential is on file"""
    UNKNOWN = "unknown"
    ABSENT = "absent"
    PRESENT = "present"


class FailureKind(str, Enum):
    """Tags of the FailureClass variant"""
    CREDENTIAL_REQUIRED = "credential_required"
    CREDENTIAL_REJECTED = "credential_rejected"
    STEP_UP_REQUIRED = "step_up_required"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"
    TRANSIENT = "transient"
    UNKNOWN = "unknown"


class RecoveryAction(str, Enum):
    """What the user is offered after a surfaced failure"""
    RETRY = "retry"
    ADD_CREDENTIAL = "add_credential"
    AUTHENTICATE = "authenticate"
    CONTACT_SUPPORT = "contact_support"


class ExecutionErrorKind(str, Enum):
    """Shape of a failed billable action call"""
    BACKEND = "backend"                # Backend answered with an error envelope or status
    NETWORK = "network"                # No response at all
    STEP_UP_FAILED = "step_up_failed"  # Issuer challenge was not completed
    TIMEOUT = "timeout"                # Challenge confirmation expired
