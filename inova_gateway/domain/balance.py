"""Balance and credit calculations - core arithmetic behind every screen"""

from datetime import date
from typing import Iterable, List

from inova_gateway.domain.models import (
    CREDIT,
    EXPENSE,
    INCOME,
    BalanceSummary,
    MonthlySummary,
    ScheduledPayment,
    Transaction,
)
from inova_gateway.utils.date_utils import days_between, next_day_of_month


def calculate_balance(initial_balance_cents: int, transactions: Iterable[Transaction]) -> BalanceSummary:
    """
    Fold a transaction list over the initial balance.

    - balance: initial + income - every expense
    - debit balance: initial + income - expenses not charged to the card

    Expenses with no payment method are treated as debit.
    """
    total_income = 0
    total_expense = 0
    credit_expense = 0

    for txn in transactions:
        if txn.type == INCOME:
            total_income += txn.amount_cents
        elif txn.type == EXPENSE:
            total_expense += txn.amount_cents
            if txn.payment_method == CREDIT:
                credit_expense += txn.amount_cents

    debit_expense = total_expense - credit_expense

    return BalanceSummary(
        balance_cents=initial_balance_cents + total_income - total_expense,
        debit_balance_cents=initial_balance_cents + total_income - debit_expense,
        total_income_cents=total_income,
        total_expense_cents=total_expense,
        credit_expense_cents=credit_expense,
    )


def credit_available(credit_limit_cents: int, credit_used_cents: int) -> int:
    """Remaining card limit, never negative"""
    return max(0, credit_limit_cents - credit_used_cents)


def days_until_due(due_day: int, today: date) -> int:
    """Days until the next card due date (0 when due today)"""
    return days_between(today, next_day_of_month(due_day, today))


def _is_pending(payment: ScheduledPayment, today: date) -> bool:
    if payment.is_recurring:
        return payment.due_day >= today.day
    if payment.due_date is None:
        return False
    return payment.due_date >= today and (payment.due_date.year, payment.due_date.month) == (today.year, today.month)


def monthly_summary(
    debit_balance_cents: int,
    salary_amount_cents: int,
    salary_day: int,
    scheduled_payments: List[ScheduledPayment],
    today: date,
) -> MonthlySummary:
    """
    Project the debit balance at the end of the current month.

    Bills already past their due day and a salary already received are
    assumed to be reflected in the debit balance.
    """
    total_payments = sum(p.amount_cents for p in scheduled_payments if p.is_recurring or _is_pending(p, today))
    pending_payments = sum(p.amount_cents for p in scheduled_payments if _is_pending(p, today))
    pending_salary = salary_amount_cents if salary_amount_cents > 0 and salary_day >= today.day else 0

    return MonthlySummary(
        total_payments_cents=total_payments,
        pending_payments_cents=pending_payments,
        pending_salary_cents=pending_salary,
        projected_balance_cents=debit_balance_cents + pending_salary - pending_payments,
    )
