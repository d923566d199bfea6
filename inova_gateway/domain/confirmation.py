"""Transaction confirmation flow - decides payment method and guards available funds"""

from inova_gateway.domain.exceptions import (
    CreditLimitExceededError,
    InsufficientFundsError,
    InvalidTransactionDataError,
)
from inova_gateway.domain.installments import MAX_INSTALLMENTS, ceil_div, suggest_installments
from inova_gateway.domain.models import CREDIT, DEBIT, EXPENSE, INCOME, TransactionProposal

LARGE_EXPENSE_CENTS = 10_000  # R$ 100

# Advice codes, one per branch of the decision tree
ADVICE_INCOME = "income"
ADVICE_NO_FUNDS = "no_funds"
ADVICE_EXCEEDS_TOTAL = "exceeds_total"
ADVICE_CREDIT_ONLY = "credit_only"
ADVICE_EXCEEDS_DEBIT = "exceeds_debit"
ADVICE_INSTALLMENTS_NEEDED = "installments_needed"
ADVICE_LARGE_EXPENSE = "large_expense"
ADVICE_FITS_DEBIT = "fits_debit"


def propose_transaction(
    amount_cents: int,
    type: str,
    category: str,
    description: str,
    debit_balance_cents: int,
    credit_available_cents: int,
    has_credit_card: bool,
) -> TransactionProposal:
    """
    Evaluate a transaction before the user confirms it.

    Decision tree for expenses (balances clamped at zero first):
    - nothing available                       -> rejected (no_funds)
    - above debit + credit available          -> rejected (exceeds_total)
    - fits debit                             -> debit
    - above debit, fits credit                -> credit
    - above both, 2..12 installments fit      -> credit + min_installments
    - anything else                           -> rejected (exceeds_total)

    Never records anything.
    """
    if amount_cents <= 0:
        raise InvalidTransactionDataError("Amount must be positive")
    if type not in (INCOME, EXPENSE):
        raise InvalidTransactionDataError(f"Unknown transaction type: {type}")

    debit = max(0, debit_balance_cents)
    credit = max(0, credit_available_cents) if has_credit_card else 0

    def build(accepted: bool, method: str, advice: str, min_installments: int | None = None) -> TransactionProposal:
        return TransactionProposal(
            amount_cents=amount_cents,
            type=type,
            category=category,
            description=description,
            accepted=accepted,
            payment_method=method,
            advice=advice,
            debit_balance_cents=debit,
            credit_available_cents=credit,
            min_installments=min_installments,
        )

    if type == INCOME:
        return build(True, DEBIT, ADVICE_INCOME)

    if debit <= 0 and credit <= 0:
        return build(False, DEBIT, ADVICE_NO_FUNDS)

    if amount_cents > debit + credit:
        return build(False, DEBIT, ADVICE_EXCEEDS_TOTAL)

    if amount_cents <= debit:
        advice = ADVICE_LARGE_EXPENSE if amount_cents > LARGE_EXPENSE_CENTS else ADVICE_FITS_DEBIT
        return build(True, DEBIT, advice)

    if amount_cents <= credit:
        advice = ADVICE_CREDIT_ONLY if debit <= 0 else ADVICE_EXCEEDS_DEBIT
        return build(True, CREDIT, advice, 1)

    installments = suggest_installments(amount_cents, credit)
    if installments is not None and installments > 1:
        return build(True, CREDIT, ADVICE_INSTALLMENTS_NEEDED, installments)

    return build(False, DEBIT, ADVICE_EXCEEDS_TOTAL)


def validate_confirmation(
    amount_cents: int,
    type: str,
    payment_method: str,
    installments: int,
    debit_balance_cents: int,
    credit_available_cents: int,
) -> int:
    """
    Check a confirmed transaction against current funds.

    Returns the amount charged now: the first installment for split card
    purchases, the full amount otherwise.

    Raises:
        InvalidTransactionDataError: bad amount, method or installment count
        InsufficientFundsError: amount above debit + available credit, or a
            debit expense above the debit balance
        CreditLimitExceededError: largest installment above available credit
    """
    if amount_cents <= 0:
        raise InvalidTransactionDataError("Valor inválido")
    if payment_method not in (DEBIT, CREDIT):
        raise InvalidTransactionDataError(f"Unknown payment method: {payment_method}")
    if not 1 <= installments <= MAX_INSTALLMENTS:
        raise InvalidTransactionDataError(f"Installments must be between 1 and {MAX_INSTALLMENTS}")
    if installments > 1 and payment_method != CREDIT:
        raise InvalidTransactionDataError("Only credit purchases can be split into installments")

    if type == INCOME:
        return amount_cents

    debit = max(0, debit_balance_cents)
    credit = max(0, credit_available_cents)

    if amount_cents > debit + credit:
        raise InsufficientFundsError(f"Expense of {amount_cents} cents exceeds available {debit + credit} cents")

    if payment_method == DEBIT:
        if amount_cents > debit:
            raise InsufficientFundsError(f"Expense of {amount_cents} cents exceeds debit balance {debit} cents")
        return amount_cents

    largest_installment = ceil_div(amount_cents, installments)
    if largest_installment > credit:
        raise CreditLimitExceededError(f"Limite de crédito insuficiente. Disponível: {credit} cents")
    return largest_installment if installments > 1 else amount_cents


def installment_description(description: str, installments: int, installment_cents: int) -> str:
    """Suffix recorded on the first installment, e.g. 'TV (1/4x de R$ 50,00)'"""
    reais = f"{installment_cents / 100:.2f}".replace(".", ",")
    return f"{description} (1/{installments}x de R$ {reais})"
