"""Error types raised at the HTTP and gateway boundaries."""

from typing import Any, Optional


class PayflowError(Exception):
    """Base error for payflow."""
    pass


class ConfigError(PayflowError):
    """Missing or invalid configuration."""
    pass


class StateError(PayflowError):
    """Illegal flow state transition."""
    pass


class BackendError(PayflowError):
    """The backend answered with an error.

    Carries the raw signal so the classifier can decide what it means.

    Example:
        try:
            await backend.execute_action(request)
        except BackendError as e:
            if e.status_code == 402:
                ...
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        data: Optional[dict[str, Any]] = None
    ):
        """Initialize backend error.

        Args:
            message: Message from the error envelope, or a synthesized one
            status_code: HTTP status of the response
            code: Backend error code (e.g. "PAYMENT_METHOD_REQUIRED")
            data: Extra envelope data (e.g. {"clientSecret": ...})
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.data = data or {}

    @property
    def client_secret(self) -> Optional[str]:
        """Challenge secret sent along with PAYMENT_REQUIRES_ACTION."""
        secret = self.data.get("clientSecret") or self.data.get("client_secret")
        return secret or None


class BackendUnavailableError(PayflowError):
    """The backend could not be reached (no response)."""
    pass


class GatewayTransportError(PayflowError):
    """The payment gateway could not be reached (no response)."""
    pass
