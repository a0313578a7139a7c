"""Card-entry widget state with live, submission-independent validation."""

from datetime import date
from typing import Callable, Optional

from ..types import GatewayError


CardListener = Callable[[Optional[GatewayError]], None]
MIN_NUMBER_LENGTH = 12
COMPLETE_YEAR_LENGTHS = (2, 4)


def luhn_valid(number: str) -> bool:
    """Checks the card number checksum."""
    total = 0
    for index, char in enumerate(reversed(number)):
        digit = int(char)
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


class CardInput:
    """Card-entry widget.

    Validation runs on every change, so a malformed value is reported
    before the user submits anything. The widget is owned by the
    credential-collection step and cleared whenever the flow leaves it.

    Example:
        card = CardInput()
        card.on_change(lambda error: print(error))
        card.update(number="4242 4242 4242 4242", exp_month="12", exp_year="34", cvc="123")
        assert card.complete
    """

    def __init__(self, today: Optional[Callable[[], date]] = None):
        self._today = today or date.today
        self._listeners: list[CardListener] = []
        self.number = ""
        self.exp_month = ""
        self.exp_year = ""
        self.cvc = ""
        self.validation_error: Optional[GatewayError] = None

    def on_change(self, listener: CardListener) -> None:
        self._listeners.append(listener)

    def update(
        self,
        number: Optional[str] = None,
        exp_month: Optional[str] = None,
        exp_year: Optional[str] = None,
        cvc: Optional[str] = None
    ) -> Optional[GatewayError]:
        """Apply user edits and revalidate. Returns the current widget error."""
        if number is not None:
            self.number = "".join(number.split())
        if exp_month is not None:
            self.exp_month = exp_month.strip()
        if exp_year is not None:
            self.exp_year = exp_year.strip()
        if cvc is not None:
            self.cvc = cvc.strip()
        self.validation_error = self._validate()
        for listener in self._listeners:
            listener(self.validation_error)
        return self.validation_error

    def clear(self) -> None:
        """Drop everything typed so far."""
        self.number = self.exp_month = self.exp_year = self.cvc = ""
        had_error = self.validation_error is not None
        self.validation_error = None
        if had_error:
            for listener in self._listeners:
                listener(None)

    @property
    def complete(self) -> bool:
        return (
            self.validation_error is None
            and len(self.number) >= MIN_NUMBER_LENGTH
            and bool(self.exp_month)
            and len(self.exp_year) in COMPLETE_YEAR_LENGTHS
            and len(self.cvc) >= 3
        )

    @property
    def last4(self) -> str:
        return self.number[-4:]

    def expiry_year(self) -> Optional[int]:
        if not self.exp_year.isdigit():
            return None
        year = int(self.exp_year)
        return year + 2000 if year < 100 else year

    def card_fields(self) -> dict[str, str]:
        """Raw card fields for the gateway. Never send these anywhere else."""
        return {
            "number": self.number,
            "exp_month": self.exp_month,
            "exp_year": str(self.expiry_year() or self.exp_year),
            "cvc": self.cvc,
        }

    def _validate(self) -> Optional[GatewayError]:
        if self.number:
            if not self.number.isdigit():
                return _widget_error("invalid_number", "Your card number is invalid.")
            if len(self.number) >= 16 and not luhn_valid(self.number):
                return _widget_error("invalid_number", "Your card number is invalid.")
            if len(self.number) > 19:
                return _widget_error("invalid_number", "Your card number is invalid.")

        if self.exp_month:
            if not self.exp_month.isdigit() or not 1 <= int(self.exp_month) <= 12:
                return _widget_error("invalid_expiry_month", "Your card's expiration month is invalid.")

        if self.exp_year:
            year = self.expiry_year()
            today = self._today()
            if year is None or len(self.exp_year) > 4:
                return _widget_error("invalid_expiry_year", "Your card's expiration year is invalid.")
            month = int(self.exp_month) if self.exp_month.isdigit() else 12
            # A 1 or 3 digit year is still being typed
            if len(self.exp_year) in COMPLETE_YEAR_LENGTHS and (year, month) < (today.year, today.month):
                return _widget_error("invalid_expiry_year", "Your card's expiration year is in the past.")

        if self.cvc and (not self.cvc.isdigit() or len(self.cvc) > 4):
            return _widget_error("incorrect_cvc", "Your card's security code is invalid.")

        return None


def _widget_error(code: str, message: str) -> GatewayError:
    return GatewayError(code=code, message=message, type="validation_error")
