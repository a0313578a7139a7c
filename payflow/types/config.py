"""Configuration types for payflow."""

import os
from decimal import Decimal
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field


ENV_PREFIX = "PAYFLOW_"


class FlowConfig(BaseModel):
    """Configuration for the payment confirmation flow."""
    api_base_url: str = "http://localhost:3001/api"
    api_token: Optional[str] = None
    request_timeout_seconds: float = 30.0
    invoice_fee: Decimal = Decimal("9.00")
    currency: str = "BRL"
    locale: str = "en"
    setup_timeout_seconds: float = Field(default=120.0, gt=0)
    challenge_timeout_seconds: float = Field(default=300.0, gt=0)
    success_delay_seconds: float = Field(default=1.5, ge=0)
    gateway_publishable_key: Optional[str] = None
    gateway_api_base: str = "https://api.stripe.com/v1"

    @classmethod
    def from_env(cls, **overrides) -> "FlowConfig":
        """Build a config from PAYFLOW_* environment variables.

        A .env file in the working directory is loaded first. Keyword
        overrides win over the environment.
        """
        load_dotenv(find_dotenv(usecwd=True))
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        values.update(overrides)
        return cls.model_validate(values)
