"""Executors package exports for payflow."""

from .base import BaseActionExecutor, MAX_STEP_UP_RETRIES
from .action import BillableActionExecutor

__all__ = [
    "BaseActionExecutor",
    "BillableActionExecutor",
    "MAX_STEP_UP_RETRIES"
]
