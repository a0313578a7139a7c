"""Maps raw backend and gateway failures onto the closed FailureClass taxonomy."""

from typing import Optional, Union

from ..types import (
    ExecutionError,
    ExecutionErrorKind,
    FailureClass,
    GatewayError
)


PAYMENT_METHOD_REQUIRED = "PAYMENT_METHOD_REQUIRED"
PAYMENT_REQUIRES_ACTION = "PAYMENT_REQUIRES_ACTION"
PAYMENT_FAILED = "PAYMENT_FAILED"
NETWORK_ERROR = "NETWORK_ERROR"

AUTHENTICATION_FAILED = "authentication_failed"

# Issuer and widget codes that mean "this card will not do".
DECLINE_CODES = frozenset({
    "card_declined",
    "expired_card",
    "incorrect_cvc",
    "incorrect_number",
    "insufficient_funds",
    "processing_error",
    "invalid_number",
    "invalid_expiry_month",
    "invalid_expiry_year",
    "incomplete_card",
    "payment_intent_authentication_failure",
    "setup_intent_authentication_failure",
    AUTHENTICATION_FAILED,
})

BUSINESS_RULE_CODES = frozenset({
    "COMPANY_NOT_CONFIGURED",
    "FISCAL_ERROR",
    "INVALID_CLIENT",
    # Raised locally before any network call
    "COMPANY_NOT_SELECTED",
    "INCOMPLETE_REQUEST",
})

# Codes that share copy with another reason.
CODE_ALIASES = {
    "invalid_number": "incorrect_number",
    "invalid_expiry_month": "invalid_expiry",
    "invalid_expiry_year": "invalid_expiry",
    "payment_intent_authentication_failure": AUTHENTICATION_FAILED,
    "setup_intent_authentication_failure": AUTHENTICATION_FAILED,
}

GATEWAY_TRANSIENT_CODES = frozenset({"network_error", "timeout"})

# Checked in order; the first hint found in the issuer message wins.
ISSUER_MESSAGE_HINTS = (
    (("insufficient", "insuficiente"), "insufficient_funds"),
    (("expired", "expirado", "vencido"), "expired_card"),
    (("cvc", "cvv", "segurança"), "incorrect_cvc"),
    (("declined", "recusado"), "card_declined"),
    (("number", "número"), "incorrect_number"),
)

# Backend errors without a code are read by message alone. Number hints are
# left out: "document number" is a client problem, not a card one.
CODELESS_DECLINE_HINTS = tuple(
    (hints, reason) for hints, reason in ISSUER_MESSAGE_HINTS if reason != "incorrect_number"
)

BUSINESS_MESSAGE_HINTS = (
    (("empresa",), "COMPANY_NOT_CONFIGURED"),
    (("prefeitura",), "FISCAL_ERROR"),
    (("cliente",), "INVALID_CLIENT"),
)

NETWORK_MESSAGE_HINTS = ((("network", "conex"), NETWORK_ERROR),)


def decline_reason_from_message(message: Optional[str]) -> Optional[str]:
    """Guess a decline reason from a free-text issuer message."""
    return _match_hint(message, ISSUER_MESSAGE_HINTS)


def _match_hint(message: Optional[str], table) -> Optional[str]:
    lowered = (message or "").lower()
    if not lowered:
        return None
    for hints, result in table:
        if any(hint in lowered for hint in hints):
            return result
    return None


def _decline_code(*codes: Optional[str]) -> Optional[str]:
    for code in codes:
        if code and code.lower() in DECLINE_CODES:
            return CODE_ALIASES.get(code.lower(), code.lower())
    return None


def classify(error: Union[ExecutionError, GatewayError]) -> FailureClass:
    """Classify a raw failure. First matching rule wins.

    Args:
        error: Failure returned by the executor or by the tokenizer

    Returns:
        FailureClass deciding the next flow state and the user copy
    """
    if isinstance(error, GatewayError):
        return _classify_gateway_error(error)
    return _classify_execution_error(error)


def _classify_execution_error(error: ExecutionError) -> FailureClass:
    code = (error.code or "").upper()

    # 1. No usable credential on file
    if error.status_code == 402 or code == PAYMENT_METHOD_REQUIRED:
        return FailureClass.credential_required()

    # 2. Issuer wants a step-up challenge
    if code == PAYMENT_REQUIRES_ACTION and error.client_secret:
        return FailureClass.step_up_required(error.client_secret)

    # 3. The card itself was refused
    if error.kind == ExecutionErrorKind.STEP_UP_FAILED:
        return FailureClass.credential_rejected(AUTHENTICATION_FAILED)
    declined = _decline_code(error.code)
    if declined:
        return FailureClass.credential_rejected(declined)
    if code == PAYMENT_FAILED:
        gateway = error.gateway_error
        reason = (
            (gateway and _decline_code(gateway.decline_code, gateway.code))
            or decline_reason_from_message(error.message)
            or "card_declined"
        )
        return FailureClass.credential_rejected(reason)
    codeless = not code and error.kind == ExecutionErrorKind.BACKEND
    if codeless:
        reason = _match_hint(error.message, CODELESS_DECLINE_HINTS)
        if reason:
            return FailureClass.credential_rejected(reason)

    # 4. Fiscal / domain rules
    if code in BUSINESS_RULE_CODES:
        return FailureClass.business_rule_violation(code)
    if codeless:
        business = _match_hint(error.message, BUSINESS_MESSAGE_HINTS)
        if business:
            return FailureClass.business_rule_violation(business)

    # 5. Nothing came back
    if error.kind in (ExecutionErrorKind.NETWORK, ExecutionErrorKind.TIMEOUT) or code == NETWORK_ERROR:
        return FailureClass.transient()
    if codeless and _match_hint(error.message, NETWORK_MESSAGE_HINTS):
        return FailureClass.transient()

    return FailureClass.unknown()


def _classify_gateway_error(error: GatewayError) -> FailureClass:
    declined = _decline_code(error.decline_code, error.code)
    if declined:
        return FailureClass.credential_rejected(declined)

    if (error.code or "") in GATEWAY_TRANSIENT_CODES:
        return FailureClass.transient()

    if error.type == "card_error":
        return FailureClass.credential_rejected(
            decline_reason_from_message(error.message) or "card_declined"
        )

    reason = decline_reason_from_message(error.message)
    if reason:
        return FailureClass.credential_rejected(reason)

    return FailureClass.unknown()
