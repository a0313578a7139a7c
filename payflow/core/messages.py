"""Localized user-facing copy for the payment confirmation flow."""

import logging
from decimal import Decimal

from ..types import FailureClass, FailureKind, FailureMessage, RecoveryAction


logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

CURRENCY_SYMBOLS = {"BRL": "R$", "USD": "$", "EUR": "€"}

LABELS = {
    "en": {
        "confirm": "Confirm — {fee}",
        "add_card": "Add Card",
        "processing": "Processing...",
        "saving": "Saving...",
        "card_saved": "Card saved. You can now emit invoices.",
        "payment_confirmed": "Invoice emitted. Payment of {fee} processed.",
    },
    "pt-BR": {
        "confirm": "Confirmar — {fee}",
        "add_card": "Adicionar Cartão",
        "processing": "Processando...",
        "saving": "Salvando...",
        "card_saved": "Cartão cadastrado. Agora você pode emitir notas.",
        "payment_confirmed": "Nota fiscal emitida. Pagamento de {fee} processado com sucesso.",
    },
}

_R = RecoveryAction

FAILURE_COPY = {
    "en": {
        "credential_required": (
            "Card required",
            "To emit invoices you need to register a credit card.",
            _R.ADD_CREDENTIAL,
        ),
        "step_up_required": (
            "Authentication required",
            "Your bank requires an additional confirmation. Check your bank app and try again.",
            _R.AUTHENTICATE,
        ),
        "rejected:card_declined": (
            "Card declined",
            "Your bank declined the card. Check the details or try another card.",
            _R.RETRY,
        ),
        "rejected:insufficient_funds": (
            "Insufficient balance",
            "Your card does not have enough available balance. Try another card.",
            _R.RETRY,
        ),
        "rejected:expired_card": (
            "Card expired",
            "This card has expired. Please register a valid card.",
            _R.ADD_CREDENTIAL,
        ),
        "rejected:incorrect_cvc": (
            "Incorrect security code",
            "The security code (CVC) is incorrect. Check the 3 digits on the back of the card.",
            _R.RETRY,
        ),
        "rejected:incorrect_number": (
            "Invalid card number",
            "The card number is incorrect. Check it and try again.",
            _R.RETRY,
        ),
        "rejected:processing_error": (
            "Processing error",
            "The card could not be processed. Try again in a moment.",
            _R.RETRY,
        ),
        "rejected:authentication_failed": (
            "Authentication failed",
            "The bank verification was not completed. Try again or use another card.",
            _R.ADD_CREDENTIAL,
        ),
        "rejected:invalid_expiry": (
            "Invalid expiry date",
            "The card expiry date is invalid. Check the month and year.",
            _R.RETRY,
        ),
        "rejected:incomplete_card": (
            "Incomplete card details",
            "Fill in the card number, expiry date and security code.",
            _R.RETRY,
        ),
        "rejected": (
            "Card error",
            "The card could not be used. Check the details and try again.",
            _R.ADD_CREDENTIAL,
        ),
        "business:COMPANY_NOT_CONFIGURED": (
            "Company not configured",
            "Configure your company before emitting invoices. Open the settings.",
            _R.RETRY,
        ),
        "business:FISCAL_ERROR": (
            "City hall error",
            "The city hall service is temporarily unavailable. Try again in a few minutes.",
            _R.RETRY,
        ),
        "business:INVALID_CLIENT": (
            "Invalid client",
            "Check the client details (name and CPF/CNPJ).",
            _R.RETRY,
        ),
        "business:COMPANY_NOT_SELECTED": (
            "No company selected",
            "Select a company in the side menu to emit invoices.",
            _R.RETRY,
        ),
        "business:INCOMPLETE_REQUEST": (
            "Incomplete data",
            "Fill in the client name and the invoice amount.",
            _R.RETRY,
        ),
        "business": (
            "Invoice not accepted",
            "The invoice could not be emitted with the current data. Review it and try again.",
            _R.RETRY,
        ),
        "transient": (
            "No connection",
            "Check your internet connection and try again.",
            _R.RETRY,
        ),
        "unknown": (
            "Something went wrong",
            "We could not process your request. Try again, or contact support if it keeps happening.",
            _R.CONTACT_SUPPORT,
        ),
    },
    "pt-BR": {
        "credential_required": (
            "Cartão Necessário",
            "Para emitir notas fiscais, você precisa cadastrar um cartão de crédito.",
            _R.ADD_CREDENTIAL,
        ),
        "step_up_required": (
            "Autenticação Necessária",
            "Seu banco requer confirmação adicional. Verifique seu app do banco.",
            _R.AUTHENTICATE,
        ),
        "rejected:card_declined": (
            "Cartão Recusado",
            "Seu banco recusou o cartão. Verifique os dados ou tente outro cartão.",
            _R.RETRY,
        ),
        "rejected:insufficient_funds": (
            "Saldo Insuficiente",
            "Seu cartão não tem saldo suficiente. Tente outro cartão.",
            _R.RETRY,
        ),
        "rejected:expired_card": (
            "Cartão Expirado",
            "Seu cartão está vencido. Por favor, cadastre um novo cartão.",
            _R.ADD_CREDENTIAL,
        ),
        "rejected:incorrect_cvc": (
            "Código Incorreto",
            "O código de segurança (CVV) está incorreto. Verifique os 3 números no verso do cartão.",
            _R.RETRY,
        ),
        "rejected:incorrect_number": (
            "Número Inválido",
            "O número do cartão está incorreto. Verifique e tente novamente.",
            _R.RETRY,
        ),
        "rejected:processing_error": (
            "Erro de Processamento",
            "Não foi possível processar o cartão. Tente novamente em instantes.",
            _R.RETRY,
        ),
        "rejected:authentication_failed": (
            "Autenticação Falhou",
            "A verificação do banco não foi concluída. Tente novamente ou use outro cartão.",
            _R.ADD_CREDENTIAL,
        ),
        "rejected:invalid_expiry": (
            "Validade Inválida",
            "A data de validade do cartão é inválida. Verifique o mês e o ano.",
            _R.RETRY,
        ),
        "rejected:incomplete_card": (
            "Dados Incompletos",
            "Preencha o número, a validade e o código de segurança do cartão.",
            _R.RETRY,
        ),
        "rejected": (
            "Erro no Cartão",
            "Não foi possível usar o cartão. Verifique os dados e tente novamente.",
            _R.ADD_CREDENTIAL,
        ),
        "business:COMPANY_NOT_CONFIGURED": (
            "Empresa Não Configurada",
            "Configure sua empresa antes de emitir notas. Acesse as configurações.",
            _R.RETRY,
        ),
        "business:FISCAL_ERROR": (
            "Erro na Prefeitura",
            "A prefeitura está temporariamente indisponível. Tente novamente em alguns minutos.",
            _R.RETRY,
        ),
        "business:INVALID_CLIENT": (
            "Cliente Inválido",
            "Verifique os dados do cliente (nome e CPF/CNPJ).",
            _R.RETRY,
        ),
        "business:COMPANY_NOT_SELECTED": (
            "Empresa Não Selecionada",
            "Selecione uma empresa no menu lateral para emitir notas fiscais.",
            _R.RETRY,
        ),
        "business:INCOMPLETE_REQUEST": (
            "Dados Incompletos",
            "Preencha o nome do cliente e o valor da nota fiscal.",
            _R.RETRY,
        ),
        "business": (
            "Nota Não Aceita",
            "Não foi possível emitir a nota com os dados atuais. Revise e tente novamente.",
            _R.RETRY,
        ),
        "transient": (
            "Sem Conexão",
            "Verifique sua conexão com a internet e tente novamente.",
            _R.RETRY,
        ),
        "unknown": (
            "Ops! Algo deu errado",
            "Não foi possível processar sua solicitação. Tente novamente ou fale com o suporte.",
            _R.CONTACT_SUPPORT,
        ),
    },
}


def _resolve_locale(locale: str) -> str:
    if locale in FAILURE_COPY:
        return locale
    language = locale.split("-")[0].lower()
    for known in FAILURE_COPY:
        if known.split("-")[0].lower() == language:
            return known
    logger.warning(f"Unsupported locale {locale!r}, falling back to {DEFAULT_LOCALE}")
    return DEFAULT_LOCALE


def _catalog_keys(failure: FailureClass) -> list[str]:
    if failure.kind == FailureKind.CREDENTIAL_REQUIRED:
        return ["credential_required"]
    if failure.kind == FailureKind.STEP_UP_REQUIRED:
        return ["step_up_required"]
    if failure.kind == FailureKind.CREDENTIAL_REJECTED:
        return [f"rejected:{failure.decline_reason}", "rejected"]
    if failure.kind == FailureKind.BUSINESS_RULE_VIOLATION:
        return [f"business:{failure.reason_code}", "business"]
    if failure.kind == FailureKind.TRANSIENT:
        return ["transient"]
    return ["unknown"]


def describe(failure: FailureClass, locale: str = DEFAULT_LOCALE) -> FailureMessage:
    """Title, description and recovery action for a classified failure."""
    copy = FAILURE_COPY[_resolve_locale(locale)]
    for key in _catalog_keys(failure):
        if key in copy:
            title, description, recovery = copy[key]
            return FailureMessage(title=title, description=description, recovery=recovery)
    title, description, recovery = copy["unknown"]
    return FailureMessage(title=title, description=description, recovery=recovery)


def format_money(amount: Decimal, currency: str = "BRL", locale: str = DEFAULT_LOCALE) -> str:
    """Format an amount the way the confirmation surface shows it (R$ 9.00 / R$ 9,00)."""
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())
    text = f"{Decimal(amount):,.2f}"
    if _resolve_locale(locale) == "pt-BR":
        text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{symbol} {text}"


def label(key: str, locale: str = DEFAULT_LOCALE, **values) -> str:
    """Localized control label or notice."""
    text = LABELS[_resolve_locale(locale)][key]
    return text.format(**values) if values else text
