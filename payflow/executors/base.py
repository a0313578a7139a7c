"""Base executor for billable actions with a bounded step-up retry."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..core.classifier import classify
from ..core.gateway import PaymentGateway
from ..types import (
    BackendError,
    BackendUnavailableError,
    BillableRequest,
    ExecutionError,
    ExecutionErrorKind,
    ExecutionResult,
    FailureKind,
    FlowConfig,
    GatewayTransportError,
    Receipt
)


logger = logging.getLogger(__name__)

MAX_STEP_UP_RETRIES = 1


class BaseActionExecutor(ABC):
    """Runs a priced backend action and resumes it once after an issuer challenge.

    Subclasses only say how the action is performed; the retry budget is an
    explicit argument so a second challenge is surfaced instead of retried.
    """

    def __init__(
        self,
        gateway: PaymentGateway,
        config: Optional[FlowConfig] = None
    ):
        """Initialize base executor.

        Args:
            gateway: Payment gateway used for the step-up challenge
            config: Flow configuration (challenge timeout)
        """
        self._gateway = gateway
        self.config = config or FlowConfig()

    @abstractmethod
    async def _perform(self, request: BillableRequest) -> Receipt:
        """Call the backend once. Raises BackendError / BackendUnavailableError."""
        raise NotImplementedError

    async def execute(
        self,
        request: BillableRequest,
        retries_left: int = MAX_STEP_UP_RETRIES,
        calls_so_far: int = 0
    ) -> ExecutionResult:
        """Perform the action; never raises.

        Args:
            request: The billable request, resubmitted unchanged after a challenge
            retries_left: How many step-up resumptions are still allowed
            calls_so_far: Backend calls already made for this gesture

        Returns:
            ExecutionResult with a receipt or the raw error, and the call count
        """
        calls = calls_so_far + 1
        logger.info(f"Executing billable action (call {calls}, retries left {retries_left})")
        try:
            receipt = await self._perform(request)
        except BackendUnavailableError as e:
            return ExecutionResult(
                error=ExecutionError(kind=ExecutionErrorKind.NETWORK, message=str(e)),
                calls=calls,
            )
        except BackendError as e:
            error = ExecutionError(
                kind=ExecutionErrorKind.BACKEND,
                status_code=e.status_code,
                code=e.code,
                message=e.message,
                client_secret=e.client_secret,
            )
        except Exception as e:
            logger.error(f"Unexpected failure executing billable action: {e}", exc_info=True)
            return ExecutionResult(
                error=ExecutionError(kind=ExecutionErrorKind.BACKEND, message=str(e)),
                calls=calls,
            )
        else:
            logger.info(f"Billable action succeeded: invoice={receipt.invoice_id}")
            return ExecutionResult(receipt=receipt, calls=calls)

        failure = classify(error)
        if failure.kind != FailureKind.STEP_UP_REQUIRED:
            logger.info(f"Billable action failed: status={error.status_code} code={error.code}")
            return ExecutionResult(error=error, calls=calls)

        if retries_left <= 0:
            logger.warning("Issuer asked for another challenge after a resumed attempt; surfacing it")
            return ExecutionResult(error=error, calls=calls)

        challenge_error = await self._run_challenge(failure.challenge_secret)
        if challenge_error:
            return ExecutionResult(error=challenge_error, calls=calls)

        logger.info("Issuer challenge completed, resuming the same request")
        return await self.execute(request, retries_left - 1, calls)

    async def _run_challenge(self, client_secret: str) -> Optional[ExecutionError]:
        timeout = self.config.challenge_timeout_seconds
        try:
            response = await asyncio.wait_for(
                self._gateway.confirm_card_payment(client_secret),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Issuer challenge not completed within {timeout}s")
            return ExecutionError(kind=ExecutionErrorKind.TIMEOUT, message="Issuer challenge timed out")
        except GatewayTransportError as e:
            return ExecutionError(kind=ExecutionErrorKind.NETWORK, message=str(e))
        except Exception as e:
            logger.error(f"Unexpected failure during issuer challenge: {e}", exc_info=True)
            return ExecutionError(kind=ExecutionErrorKind.STEP_UP_FAILED, message=str(e))

        if response.error:
            logger.info(f"Issuer challenge failed: code={response.error.code}")
            return ExecutionError(
                kind=ExecutionErrorKind.STEP_UP_FAILED,
                code=response.error.code,
                message=response.error.message,
                gateway_error=response.error,
            )
        return None
