"""Wire models exchanged with the invoicing backend."""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


EMIT_INVOICE_ACTION = "emit_invoice"
DEFAULT_SERVICE_DESCRIPTION = "Serviço prestado"
DEFAULT_SERVICE_CODE = "1401"


class BillableRequest(BaseModel):
    """User-authored payload for the priced action (emit an invoice).

    Frozen: the flow only ever reads it, and the step-up retry resubmits
    this exact object.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    recipient_name: str = ""
    recipient_document: str = ""
    description: str = DEFAULT_SERVICE_DESCRIPTION
    amount: Optional[Decimal] = Field(default=None, gt=0)
    tax_rate: Decimal = Decimal("5")
    municipality: Optional[str] = None
    company_id: Optional[str] = None
    company_city: Optional[str] = Field(default=None, exclude=True)
    service_code: str = DEFAULT_SERVICE_CODE
    service_date: date = Field(default_factory=date.today)

    @field_serializer("amount", "tax_rate", when_used="json")
    def _as_number(self, value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None

    def missing_fields(self) -> list[str]:
        """Fields a confirmation gesture cannot proceed without."""
        missing = []
        if not self.company_id:
            missing.append("company_id")
        if not self.recipient_name.strip():
            missing.append("recipient_name")
        if self.amount is None:
            missing.append("amount")
        return missing

    def action_data(self) -> dict[str, Any]:
        """JSON body for actionData; municipality falls back to the company's city."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"company_id"})
        data["municipality"] = self.municipality or self.company_city
        return data


class SubscriptionSnapshot(BaseModel):
    """Current subscription as reported by GET subscription/current."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    has_reusable_credential: bool = False
    plan_id: Optional[str] = None
    status: Optional[str] = None


class Receipt(BaseModel):
    """Outcome of a successful billable action."""
    model_config = ConfigDict(coerce_numbers_to_str=True, populate_by_name=True)

    invoice_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("invoiceId", "invoice_id", "id")
    )
    number: Optional[str] = Field(default=None, validation_alias=AliasChoices("number", "numero"))
    status: Optional[str] = None
    verification_code: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("verificationCode", "verification_code", "codigo_verificacao")
    )
    pdf_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("pdfUrl", "pdf_url"))


class ActionEnvelope(BaseModel):
    """Response envelope of POST action/execute."""
    status: str
    code: Optional[str] = None
    message: Optional[str] = None
    data: Optional[dict[str, Any]] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"
