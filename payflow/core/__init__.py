"""Core package exports for payflow."""

from .classifier import classify, decline_reason_from_message
from .messages import describe, format_money, label
from .backend import BackendClient, SubscriptionSource
from .card import CardInput, luhn_valid
from .gateway import PaymentGateway
from .stripe_gateway import StripeGateway, ChallengeHandler
from .prober import CredentialProber, credential_state_from_snapshot
from .tokenizer import Tokenizer

__all__ = [
    # Failure interpretation
    "classify",
    "decline_reason_from_message",
    "describe",
    "format_money",
    "label",

    # Backend
    "BackendClient",
    "SubscriptionSource",

    # Card and gateway
    "CardInput",
    "luhn_valid",
    "PaymentGateway",
    "StripeGateway",
    "ChallengeHandler",

    # Credential steps
    "CredentialProber",
    "credential_state_from_snapshot",
    "Tokenizer"
]
