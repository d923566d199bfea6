"""Unit tests for the transaction proposal and confirmation rules"""

import pytest
from inova_gateway.domain import confirmation
from inova_gateway.domain.confirmation import installment_description, propose_transaction, validate_confirmation
from inova_gateway.domain.exceptions import (
    CreditLimitExceededError,
    InsufficientFundsError,
    InvalidTransactionDataError,
)


def propose(amount_cents, debit, credit, type="expense", has_credit_card=True):
    return propose_transaction(
        amount_cents=amount_cents,
        type=type,
        category="Compras",
        description="Teste",
        debit_balance_cents=debit,
        credit_available_cents=credit,
        has_credit_card=has_credit_card,
    )


def test_income_always_accepted():
    proposal = propose(100000, debit=0, credit=0, type="income")

    assert proposal.accepted is True
    assert proposal.payment_method == "debit"
    assert proposal.advice == confirmation.ADVICE_INCOME


def test_expense_within_debit_defaults_to_debit():
    proposal = propose(5000, debit=10000, credit=50000)

    assert proposal.accepted is True
    assert proposal.payment_method == "debit"
    assert proposal.advice == confirmation.ADVICE_FITS_DEBIT


def test_large_expense_within_debit_is_flagged():
    proposal = propose(15000, debit=20000, credit=0)

    assert proposal.accepted is True
    assert proposal.advice == confirmation.ADVICE_LARGE_EXPENSE


def test_expense_above_debit_moves_to_credit():
    proposal = propose(15000, debit=10000, credit=50000)

    assert proposal.accepted is True
    assert proposal.payment_method == "credit"
    assert proposal.advice == confirmation.ADVICE_EXCEEDS_DEBIT
    assert proposal.min_installments == 1


def test_expense_with_only_credit():
    proposal = propose(15000, debit=0, credit=50000)

    assert proposal.payment_method == "credit"
    assert proposal.advice == confirmation.ADVICE_CREDIT_ONLY


def test_expense_needing_installments():
    """R$ 200 with R$ 160 of debit and R$ 50 of credit -> 4x of R$ 50"""
    proposal = propose(20000, debit=16000, credit=5000)

    assert proposal.accepted is True
    assert proposal.payment_method == "credit"
    assert proposal.advice == confirmation.ADVICE_INSTALLMENTS_NEEDED
    assert proposal.min_installments == 4


def test_expense_above_total_funds_rejected_before_installments():
    """R$ 200 with no debit and R$ 50 of credit: 4x would fit the card, but the total does not"""
    proposal = propose(20000, debit=0, credit=5000)

    assert proposal.accepted is False
    assert proposal.advice == confirmation.ADVICE_EXCEEDS_TOTAL
    assert proposal.min_installments is None


def test_expense_within_total_but_beyond_twelve_installments_rejected():
    proposal = propose(16000, debit=15000, credit=1000)

    assert proposal.accepted is False
    assert proposal.advice == confirmation.ADVICE_EXCEEDS_TOTAL


def test_expense_beyond_twelve_installments_rejected():
    proposal = propose(130000, debit=0, credit=10000)

    assert proposal.accepted is False
    assert proposal.advice == confirmation.ADVICE_EXCEEDS_TOTAL


def test_no_funds_rejected():
    proposal = propose(1000, debit=0, credit=0)

    assert proposal.accepted is False
    assert proposal.advice == confirmation.ADVICE_NO_FUNDS


def test_negative_debit_is_clamped():
    proposal = propose(1000, debit=-5000, credit=0)

    assert proposal.debit_balance_cents == 0
    assert proposal.accepted is False


def test_credit_ignored_without_card():
    proposal = propose(15000, debit=10000, credit=50000, has_credit_card=False)

    assert proposal.accepted is False
    assert proposal.credit_available_cents == 0


@pytest.mark.parametrize("amount, type", [(0, "expense"), (-10, "income"), (100, "transfer")])
def test_propose_rejects_bad_input(amount, type):
    with pytest.raises(InvalidTransactionDataError):
        propose(amount, debit=1000, credit=1000, type=type)


def test_confirm_debit_expense_charges_full_amount():
    charged = validate_confirmation(5000, "expense", "debit", 1, debit_balance_cents=10000, credit_available_cents=0)
    assert charged == 5000


def test_confirm_installments_charge_first_installment():
    charged = validate_confirmation(20000, "expense", "credit", 4, debit_balance_cents=16000, credit_available_cents=5000)
    assert charged == 5000


def test_confirm_installment_above_credit_raises():
    with pytest.raises(CreditLimitExceededError):
        validate_confirmation(20000, "expense", "credit", 3, debit_balance_cents=16000, credit_available_cents=5000)


def test_confirm_debit_expense_above_funds_raises():
    with pytest.raises(InsufficientFundsError):
        validate_confirmation(20000, "expense", "debit", 1, debit_balance_cents=5000, credit_available_cents=5000)


def test_confirm_installments_above_total_funds_raises():
    with pytest.raises(InsufficientFundsError):
        validate_confirmation(20000, "expense", "credit", 4, debit_balance_cents=0, credit_available_cents=5000)


def test_confirm_debit_expense_above_debit_raises_even_with_credit():
    with pytest.raises(InsufficientFundsError):
        validate_confirmation(3000, "expense", "debit", 1, debit_balance_cents=1000, credit_available_cents=5000)


def test_confirm_credit_expense_may_exceed_debit():
    charged = validate_confirmation(3000, "expense", "credit", 1, debit_balance_cents=1000, credit_available_cents=5000)
    assert charged == 3000


def test_confirm_income_skips_fund_checks():
    charged = validate_confirmation(999999, "income", "debit", 1, debit_balance_cents=0, credit_available_cents=0)
    assert charged == 999999


@pytest.mark.parametrize(
    "method, installments",
    [("debit", 2), ("credit", 0), ("credit", 13), ("pix", 1)],
)
def test_confirm_rejects_bad_method_or_count(method, installments):
    with pytest.raises(InvalidTransactionDataError):
        validate_confirmation(1000, "expense", method, installments, debit_balance_cents=10000, credit_available_cents=10000)


def test_installment_description():
    assert installment_description("TV", 4, 5000) == "TV (1/4x de R$ 50,00)"
