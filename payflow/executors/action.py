"""Executor for the invoice emission action."""

from typing import Optional, Protocol

from .base import BaseActionExecutor
from ..core.gateway import PaymentGateway
from ..types import BillableRequest, FlowConfig, Receipt


class ActionBackend(Protocol):
    async def execute_action(self, request: BillableRequest) -> Receipt: ...


class BillableActionExecutor(BaseActionExecutor):
    """Emits a fiscal invoice; the backend charges the stored card.

    Example:
        executor = BillableActionExecutor(backend, gateway, config)
        result = await executor.execute(request)
        if result.ok:
            print(result.receipt.invoice_id)
    """

    def __init__(
        self,
        backend: ActionBackend,
        gateway: PaymentGateway,
        config: Optional[FlowConfig] = None
    ):
        super().__init__(gateway, config)
        self._backend = backend

    async def _perform(self, request: BillableRequest) -> Receipt:
        return await self._backend.execute_action(request)
