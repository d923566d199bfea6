"""Installment plan generation for credit card purchases"""

from datetime import date
from typing import List, Optional

from inova_gateway.domain.models import Installment
from inova_gateway.utils.date_utils import add_months, day_in_month, next_day_of_month

MAX_INSTALLMENTS = 12


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def suggest_installments(
    amount_cents: int,
    credit_available_cents: int,
    max_installments: int = MAX_INSTALLMENTS,
) -> Optional[int]:
    """
    Smallest installment count whose largest installment fits the card limit.

    Returns None when even max_installments does not fit, or when there is
    no credit at all.

    Example:
        R$ 200.00 with R$ 50.00 available -> 4 (4x R$ 50.00)
    """
    if amount_cents <= 0 or credit_available_cents <= 0:
        return None

    count = max(1, ceil_div(amount_cents, credit_available_cents))
    if count > max_installments:
        return None
    return count


def generate_installment_plan(
    amount_cents: int,
    num_installments: int,
    due_day: int,
    start_date: date | None = None,
) -> List[Installment]:
    """
    Split a card purchase into monthly installments on the card due day.

    Requirements:
    - Installments sum exactly to the amount
    - Remainder cents go to the earliest installments, one each, so no
      installment exceeds ceil(amount / num_installments)
    - First installment falls on the next due day (start_date included)

    Example:
        R$ 100.01 in 4x -> [25.01, 25.00, 25.00, 25.00]
    """
    if amount_cents <= 0 or num_installments <= 0:
        return []

    if start_date is None:
        start_date = date.today()

    first_due = next_day_of_month(due_day, start_date)

    base_amount = amount_cents // num_installments
    remainder = amount_cents % num_installments

    installments = []
    for i in range(num_installments):
        year, month = add_months(first_due.year, first_due.month, i)
        amount = base_amount + (1 if i < remainder else 0)
        installments.append(
            Installment(number=i + 1, due_date=day_in_month(year, month, due_day), amount_cents=amount)
        )

    return installments
