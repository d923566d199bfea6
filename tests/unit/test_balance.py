"""Unit tests for balance, credit and monthly projection arithmetic"""

from datetime import date
from inova_gateway.domain.balance import calculate_balance, credit_available, days_until_due, monthly_summary
from inova_gateway.domain.models import ScheduledPayment, Transaction


def txn(amount_cents: int, type: str, payment_method: str | None = "debit") -> Transaction:
    return Transaction(
        amount_cents=amount_cents,
        type=type,
        category="Outros",
        description="",
        date=date(2025, 3, 10),
        matricula=123456,
        payment_method=payment_method,
    )


def test_calculate_balance_splits_debit_and_credit():
    summary = calculate_balance(
        10000,
        [
            txn(5000, "income"),
            txn(3000, "expense", "debit"),
            txn(4000, "expense", "credit"),
        ],
    )

    assert summary.balance_cents == 8000
    assert summary.debit_balance_cents == 12000
    assert summary.total_income_cents == 5000
    assert summary.total_expense_cents == 7000
    assert summary.credit_expense_cents == 4000


def test_calculate_balance_missing_method_counts_as_debit():
    summary = calculate_balance(1000, [txn(400, "expense", None)])
    assert summary.debit_balance_cents == 600


def test_calculate_balance_empty_history():
    summary = calculate_balance(2500, [])
    assert summary.balance_cents == 2500
    assert summary.debit_balance_cents == 2500


def test_credit_available_never_negative():
    assert credit_available(50000, 20000) == 30000
    assert credit_available(50000, 60000) == 0


def test_days_until_due():
    assert days_until_due(10, date(2025, 3, 5)) == 5
    assert days_until_due(5, date(2025, 3, 5)) == 0
    assert days_until_due(5, date(2025, 3, 6)) == 30  # April 5


def test_monthly_summary_counts_only_pending_items():
    today = date(2025, 3, 15)
    payments = [
        ScheduledPayment(name="Aluguel", amount_cents=100000, due_day=10, category="Contas"),
        ScheduledPayment(name="Internet", amount_cents=10000, due_day=20, category="Contas"),
        ScheduledPayment(
            name="IPVA", amount_cents=50000, due_day=25, category="Contas", is_recurring=False, due_date=date(2025, 3, 25)
        ),
        ScheduledPayment(
            name="Seguro", amount_cents=30000, due_day=5, category="Contas", is_recurring=False, due_date=date(2025, 4, 5)
        ),
    ]

    summary = monthly_summary(200000, 300000, 30, payments, today)

    assert summary.total_payments_cents == 160000
    assert summary.pending_payments_cents == 60000
    assert summary.pending_salary_cents == 300000
    assert summary.projected_balance_cents == 200000 + 300000 - 60000


def test_monthly_summary_salary_already_received():
    summary = monthly_summary(50000, 300000, 5, [], date(2025, 3, 15))

    assert summary.pending_salary_cents == 0
    assert summary.projected_balance_cents == 50000
