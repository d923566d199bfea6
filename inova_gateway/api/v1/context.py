"""Per-user financial snapshot shared by balance, transaction and assistant endpoints"""

from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from inova_gateway.domain.balance import calculate_balance, credit_available, days_until_due, monthly_summary
from inova_gateway.domain.models import EXPENSE, INCOME, BalanceSummary, FinancialContext, MonthlySummary
from inova_gateway.infrastructure.database.models import UserProfile
from inova_gateway.infrastructure.database.repositories import (
    ScheduledPaymentRepository,
    TransactionRepository,
    to_domain_scheduled_payment,
)

RECENT_TRANSACTIONS = 10


@dataclass
class UserFinances:
    summary: BalanceSummary
    credit_available_cents: int


def load_finances(db: Session, user: UserProfile) -> UserFinances:
    transactions = TransactionRepository(db).list_for_user(user.matricula)
    summary = calculate_balance(user.initial_balance_cents or 0, transactions)
    available = credit_available(user.credit_limit_cents or 0, user.credit_used_cents or 0)
    return UserFinances(summary=summary, credit_available_cents=available if user.has_credit_card else 0)


def load_monthly_summary(db: Session, user: UserProfile, debit_balance_cents: int, today: date) -> MonthlySummary:
    payments = [to_domain_scheduled_payment(p) for p in ScheduledPaymentRepository(db).list_for_user(user.matricula)]
    return monthly_summary(debit_balance_cents, user.salary_amount_cents or 0, user.salary_day or 5, payments, today)


def build_financial_context(db: Session, user: UserProfile, today: date) -> FinancialContext:
    """Everything the assistant needs to answer with the user's exact figures"""
    transactions = TransactionRepository(db).list_for_user(user.matricula)
    summary = calculate_balance(user.initial_balance_cents or 0, transactions)
    payments = [to_domain_scheduled_payment(p) for p in ScheduledPaymentRepository(db).list_for_user(user.matricula)]
    month = monthly_summary(summary.debit_balance_cents, user.salary_amount_cents or 0, user.salary_day or 5, payments, today)

    todays = [t for t in transactions if t.date == today]

    return FinancialContext(
        balance_cents=summary.balance_cents,
        debit_balance_cents=summary.debit_balance_cents,
        total_income_cents=summary.total_income_cents,
        total_expense_cents=summary.total_expense_cents,
        credit_limit_cents=user.credit_limit_cents or 0,
        credit_used_cents=user.credit_used_cents or 0,
        credit_due_day=user.credit_due_day or 5,
        days_until_due=days_until_due(user.credit_due_day or 5, today),
        salary_amount_cents=user.salary_amount_cents or 0,
        salary_day=user.salary_day or 5,
        monthly_payments_cents=month.total_payments_cents,
        projected_balance_cents=month.projected_balance_cents,
        today_expenses_cents=sum(t.amount_cents for t in todays if t.type == EXPENSE),
        today_income_cents=sum(t.amount_cents for t in todays if t.type == INCOME),
        scheduled_payments=payments,
        recent_transactions=transactions[:RECENT_TRANSACTIONS],
    )
