"""Unit tests for payflow.core.messages module."""

from decimal import Decimal

import pytest

from payflow.core.messages import FAILURE_COPY, describe, format_money, label
from payflow.types import FailureClass, RecoveryAction


class TestDescribe:
    """Test failure copy lookup."""

    def test_credential_required(self):
        message = describe(FailureClass.credential_required())
        assert message.title == "Card required"
        assert message.recovery == RecoveryAction.ADD_CREDENTIAL

    def test_step_up_required(self):
        message = describe(FailureClass.step_up_required("pi_1_secret_a"))
        assert message.title == "Authentication required"
        assert message.recovery == RecoveryAction.AUTHENTICATE

    def test_insufficient_funds_portuguese(self):
        message = describe(FailureClass.credential_rejected("insufficient_funds"), "pt-BR")
        assert message.title == "Saldo Insuficiente"
        assert message.recovery == RecoveryAction.RETRY

    def test_expired_card_asks_for_new_card(self):
        message = describe(FailureClass.credential_rejected("expired_card"))
        assert message.recovery == RecoveryAction.ADD_CREDENTIAL

    def test_unmapped_decline_reason_uses_generic_rejection(self):
        message = describe(FailureClass.credential_rejected("lost_card"))
        assert message.title == "Card error"

    def test_business_rule(self):
        message = describe(FailureClass.business_rule_violation("FISCAL_ERROR"), "pt-BR")
        assert message.title == "Erro na Prefeitura"
        assert message.recovery == RecoveryAction.RETRY

    def test_unmapped_business_code(self):
        message = describe(FailureClass.business_rule_violation("NEW_RULE"))
        assert message.title == "Invoice not accepted"

    def test_unknown_offers_support(self):
        assert describe(FailureClass.unknown()).recovery == RecoveryAction.CONTACT_SUPPORT

    def test_transient_offers_retry(self):
        assert describe(FailureClass.transient()).recovery == RecoveryAction.RETRY

    def test_language_fallback(self):
        assert describe(FailureClass.transient(), "pt").title == "Sem Conexão"

    def test_unsupported_locale_falls_back_to_english(self):
        assert describe(FailureClass.transient(), "de-DE").title == "No connection"

    @pytest.mark.parametrize("locale", list(FAILURE_COPY))
    def test_catalogs_have_same_keys(self, locale):
        assert set(FAILURE_COPY[locale]) == set(FAILURE_COPY["en"])


class TestFormatting:

    def test_format_money_english(self):
        assert format_money(Decimal("9"), "BRL", "en") == "R$ 9.00"

    def test_format_money_portuguese(self):
        assert format_money(Decimal("1234.5"), "BRL", "pt-BR") == "R$ 1.234,50"

    def test_format_money_unknown_currency(self):
        assert format_money(Decimal("3"), "gbp") == "GBP 3.00"

    def test_confirm_label(self):
        assert label("confirm", "en", fee="R$ 9.00") == "Confirm — R$ 9.00"
        assert label("confirm", "pt-BR", fee="R$ 9,00") == "Confirmar — R$ 9,00"

    def test_plain_label(self):
        assert label("add_card", "pt-BR") == "Adicionar Cartão"
