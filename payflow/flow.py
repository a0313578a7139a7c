"""Payment confirmation flow: the state machine in front of a billable action."""

import asyncio
import logging
from typing import Callable, Optional

from .core.card import CardInput
from .core.classifier import classify
from .core.messages import describe, format_money, label
from .core.prober import CredentialProber
from .core.tokenizer import Tokenizer
from .executors.base import BaseActionExecutor
from .types import (
    BillableRequest,
    ChargeAttempt,
    FailureClass,
    FailureKind,
    FailureMessage,
    FlowConfig,
    FlowState,
    FlowView,
    GatewayError,
    PaymentCredentialState,
    Receipt,
    RecoveryAction,
    StateError
)


logger = logging.getLogger(__name__)

FlowListener = Callable[[FlowView], None]


class PaymentFlow:
    """One confirmation surface, scoped to one BillableRequest.

    States: confirm -> (collect_credential ->) processing -> success, with
    every failure landing back in confirm or collect_credential. Each user
    gesture triggers at most one executor run, and the executor itself
    resumes at most once after an issuer challenge.

    Closing or cancelling abandons the flow: an in-flight call may still
    complete server-side, but its result is dropped and no callback or
    view update happens afterwards.

    Example:
        flow = PaymentFlow(request, prober, tokenizer, executor, card,
                           config=config, on_success=show_receipt)
        flow.subscribe(render)
        await flow.open()
        await flow.confirm()
    """

    def __init__(
        self,
        request: BillableRequest,
        prober: CredentialProber,
        tokenizer: Tokenizer,
        executor: BaseActionExecutor,
        card: Optional[CardInput] = None,
        config: Optional[FlowConfig] = None,
        on_success: Optional[Callable[[Receipt], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        on_close: Optional[Callable[[], None]] = None
    ):
        """Initialize payment flow.

        Args:
            request: The invoice to emit; read-only for the whole flow
            prober: Credential prober owned by this flow instance
            tokenizer: Credential creation flows
            executor: Billable action executor
            card: Card-entry widget shown while collecting a credential
            config: Flow configuration (fee, locale, delays)
            on_success: Called once with the receipt
            on_cancel: Called when the user cancels
            on_close: Called when the surface is dismissed
        """
        self.request = request
        self.config = config or FlowConfig()
        self.card = card or CardInput()
        self._prober = prober
        self._tokenizer = tokenizer
        self._executor = executor
        self._on_success = on_success
        self._on_cancel = on_cancel
        self._on_close = on_close

        self._state = FlowState.CONFIRM
        self._credential = PaymentCredentialState.UNKNOWN
        self._opened = False
        self._checking = False
        self._busy = False
        self._closed = False
        self._failure: Optional[FailureClass] = None
        self._banner: Optional[FailureMessage] = None
        self._card_error: Optional[str] = None
        self._notice: Optional[str] = None
        self._receipt: Optional[Receipt] = None
        self._attempts: list[ChargeAttempt] = []
        self._listeners: list[FlowListener] = []

        self.card.on_change(self._on_card_change)

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def credential(self) -> PaymentCredentialState:
        return self._credential

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def attempts(self) -> list[ChargeAttempt]:
        """One entry per confirmation gesture that reached the executor."""
        return list(self._attempts)

    @property
    def view(self) -> FlowView:
        return FlowView(
            state=self._state,
            credential=self._credential,
            checking=self._checking,
            busy=self._busy,
            submit_label=self._submit_label(),
            submit_disabled=self._submit_disabled(),
            banner=self._banner,
            failure=self._failure,
            card_error=self._card_error,
            notice=self._notice,
            fee=self.config.invoice_fee,
            currency=self.config.currency,
            receipt=self._receipt,
        )

    def subscribe(self, listener: FlowListener) -> None:
        """Register a view listener; it gets a snapshot after every change."""
        self._listeners.append(listener)

    async def open(self) -> FlowView:
        """Probe the credential once for this flow instance."""
        if self._opened:
            return self.view
        self._opened = True
        self._checking = True
        self._publish()

        credential = await self._prober.probe()
        if self._closed:
            return self.view
        self._credential = credential
        self._checking = False
        logger.info(f"Flow opened: credential={credential.value}")
        self._publish()
        return self.view

    async def confirm(self) -> FlowView:
        """The user pressed the primary button on the confirmation summary."""
        if self._ignored("confirm"):
            return self.view
        if self._state != FlowState.CONFIRM:
            raise StateError(f"Cannot confirm from state {self._state.value}")
        if not self._opened:
            raise StateError("Flow must be opened before confirming")

        self._clear_messages()
        missing = self.request.missing_fields()
        if missing:
            code = "COMPANY_NOT_SELECTED" if "company_id" in missing else "INCOMPLETE_REQUEST"
            logger.info(f"Confirmation refused, missing fields: {missing}")
            self._show_failure(FailureClass.business_rule_violation(code))
            self._publish()
            return self.view

        if self._credential != PaymentCredentialState.PRESENT:
            self._enter_collect_credential()
            self._publish()
            return self.view

        await self._process()
        return self.view

    def request_credential(self) -> FlowView:
        """The user asked to add a card from the confirmation summary."""
        if self._ignored("request_credential"):
            return self.view
        if self._state != FlowState.CONFIRM:
            raise StateError(f"Cannot add a card from state {self._state.value}")
        self._clear_messages()
        self._enter_collect_credential()
        self._publish()
        return self.view

    def back(self) -> FlowView:
        """Leave the card form without saving."""
        if self._ignored("back"):
            return self.view
        if self._state != FlowState.COLLECT_CREDENTIAL:
            raise StateError(f"Cannot go back from state {self._state.value}")
        self._clear_messages()
        self._leave_collect_credential()
        self._publish()
        return self.view

    async def submit_credential(self) -> FlowView:
        """Save the card typed into the widget as a reusable credential."""
        if self._ignored("submit_credential"):
            return self.view
        if self._state != FlowState.COLLECT_CREDENTIAL:
            raise StateError(f"Cannot save a card from state {self._state.value}")
        if self.card.validation_error:
            logger.info("Card submission blocked by widget validation")
            return self.view

        self._clear_messages()
        self._busy = True
        self._publish()

        try:
            result = await self._tokenizer.attach_reusable_credential(self.card)
        finally:
            self._busy = False
        if self._closed:
            logger.info("Flow closed while saving the card; dropping the result")
            return self.view

        if result.ok:
            logger.info("Reusable credential attached")
            self._credential = PaymentCredentialState.PRESENT
            self._leave_collect_credential()
            self._notice = label("card_saved", self.config.locale)
        else:
            self._show_failure(classify(result.error))
        self._publish()
        return self.view

    def cancel(self) -> None:
        """The user gave up on emitting the invoice."""
        if self._closed:
            return
        logger.info(f"Flow cancelled in state {self._state.value}")
        self._teardown()
        if self._on_cancel:
            self._on_cancel()

    def close(self) -> None:
        """The surface was dismissed."""
        if self._closed:
            return
        logger.info(f"Flow closed in state {self._state.value}")
        self._teardown()
        if self._on_close:
            self._on_close()

    async def _process(self) -> None:
        self._state = FlowState.PROCESSING
        attempt = ChargeAttempt()
        self._attempts.append(attempt)
        logger.info(f"Processing charge attempt {attempt.attempt_id}")
        self._publish()

        result = await self._executor.execute(self.request)
        attempt.executor_calls = result.calls
        if self._closed:
            logger.info(f"Flow closed during attempt {attempt.attempt_id}; dropping the result")
            return

        if result.ok:
            attempt.invoice_id = result.receipt.invoice_id
            self._state = FlowState.SUCCESS
            self._receipt = result.receipt
            self._notice = label(
                "payment_confirmed",
                self.config.locale,
                fee=format_money(self.config.invoice_fee, self.config.currency, self.config.locale),
            )
            self._publish()
            await self._report_success(attempt, result.receipt)
            return

        failure = classify(result.error)
        self._state = FlowState.FAILED
        self._show_failure(failure)
        self._publish()

        if failure.kind == FailureKind.CREDENTIAL_REQUIRED:
            self._credential = PaymentCredentialState.ABSENT
            self._enter_collect_credential()
        else:
            if self._banner.recovery == RecoveryAction.ADD_CREDENTIAL:
                self._credential = PaymentCredentialState.ABSENT
            self._state = FlowState.CONFIRM
        logger.info(f"Attempt {attempt.attempt_id} failed: {failure.kind.value}, back to {self._state.value}")
        self._publish()

    async def _report_success(self, attempt: ChargeAttempt, receipt: Receipt) -> None:
        if attempt.reported:
            return
        if self.config.success_delay_seconds:
            await asyncio.sleep(self.config.success_delay_seconds)
        if self._closed:
            logger.info(f"Flow closed before reporting invoice {receipt.invoice_id}")
            return
        attempt.reported = True
        if self._on_success:
            self._on_success(receipt)

    def _ignored(self, action: str) -> bool:
        """Gestures that arrive while the flow cannot take them are dropped."""
        if self._closed:
            logger.warning(f"Ignoring {action}: flow is closed")
            return True
        if self._checking:
            logger.warning(f"Ignoring {action}: credential probe in flight")
            return True
        if self._state == FlowState.PROCESSING or self._busy:
            logger.warning(f"Ignoring {action}: a call is already in flight")
            return True
        if self._state == FlowState.SUCCESS:
            logger.warning(f"Ignoring {action}: flow already succeeded")
            return True
        return False

    def _enter_collect_credential(self) -> None:
        self.card.clear()
        self._card_error = None
        self._state = FlowState.COLLECT_CREDENTIAL

    def _leave_collect_credential(self) -> None:
        self.card.clear()
        self._card_error = None
        self._state = FlowState.CONFIRM

    def _teardown(self) -> None:
        self._closed = True
        self.card.clear()
        self._listeners.clear()

    def _show_failure(self, failure: FailureClass) -> None:
        self._failure = failure
        self._banner = describe(failure, self.config.locale)

    def _clear_messages(self) -> None:
        self._failure = None
        self._banner = None
        self._notice = None

    def _on_card_change(self, error: Optional[GatewayError]) -> None:
        if self._closed or self._state != FlowState.COLLECT_CREDENTIAL:
            return
        self._card_error = error.message if error else None
        self._publish()

    def _submit_label(self) -> str:
        locale = self.config.locale
        if self._state == FlowState.PROCESSING:
            return label("processing", locale)
        if self._state == FlowState.COLLECT_CREDENTIAL:
            return label("saving", locale) if self._busy else label("add_card", locale)
        if self._credential == PaymentCredentialState.PRESENT:
            fee = format_money(self.config.invoice_fee, self.config.currency, locale)
            return label("confirm", locale, fee=fee)
        return label("add_card", locale)

    def _submit_disabled(self) -> bool:
        if self._state == FlowState.PROCESSING:
            return True
        if self._state == FlowState.COLLECT_CREDENTIAL:
            return self._busy or self.card.validation_error is not None
        return False

    def _publish(self) -> None:
        if self._closed or not self._listeners:
            return
        view = self.view
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception as e:
                logger.error(f"View listener failed: {e}", exc_info=True)
