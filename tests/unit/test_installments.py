"""Unit tests for installment plan generation"""

import pytest
from datetime import date
from inova_gateway.domain.installments import generate_installment_plan, suggest_installments


def test_generate_installment_plan_equal_split():
    """Test plan with evenly divisible amount"""
    amount = 20000  # R$ 200
    installments = generate_installment_plan(amount, 4, due_day=10, start_date=date(2025, 3, 1))

    assert len(installments) == 4
    assert all(inst.amount_cents == 5000 for inst in installments)
    assert sum(inst.amount_cents for inst in installments) == amount


def test_generate_installment_plan_rounding():
    """Test remainder cents go to the earliest installments"""
    amount = 10003  # R$ 100.03
    installments = generate_installment_plan(amount, 4, due_day=10, start_date=date(2025, 3, 1))

    assert [inst.amount_cents for inst in installments] == [2501, 2501, 2501, 2500]
    assert sum(inst.amount_cents for inst in installments) == amount


def test_generate_installment_plan_dates():
    """Test monthly due dates on the card due day"""
    installments = generate_installment_plan(30000, 3, due_day=10, start_date=date(2025, 3, 1))

    assert [inst.due_date for inst in installments] == [
        date(2025, 3, 10),
        date(2025, 4, 10),
        date(2025, 5, 10),
    ]
    assert [inst.number for inst in installments] == [1, 2, 3]


def test_generate_installment_plan_starts_next_month_after_due_day():
    installments = generate_installment_plan(20000, 2, due_day=5, start_date=date(2025, 3, 20))

    assert installments[0].due_date == date(2025, 4, 5)
    assert installments[1].due_date == date(2025, 5, 5)


def test_generate_installment_plan_clamps_short_months():
    """Due day 31 falls on the last day of shorter months"""
    installments = generate_installment_plan(40000, 4, due_day=31, start_date=date(2025, 1, 31))

    assert [inst.due_date for inst in installments] == [
        date(2025, 1, 31),
        date(2025, 2, 28),
        date(2025, 3, 31),
        date(2025, 4, 30),
    ]


def test_generate_installment_plan_crosses_year():
    installments = generate_installment_plan(30000, 3, due_day=15, start_date=date(2025, 11, 20))

    assert [inst.due_date for inst in installments] == [
        date(2025, 12, 15),
        date(2026, 1, 15),
        date(2026, 2, 15),
    ]


def test_generate_installment_plan_zero_amount():
    assert generate_installment_plan(0, 4, due_day=5) == []


def test_suggest_installments_exact_fit():
    """R$ 200 with R$ 50 of credit needs 4x"""
    assert suggest_installments(20000, 5000) == 4


def test_suggest_installments_rounds_up():
    assert suggest_installments(20001, 5000) == 5


def test_suggest_installments_single_when_it_fits():
    assert suggest_installments(3000, 5000) == 1


@pytest.mark.parametrize("amount, credit", [(130000, 10000), (1000, 0), (0, 5000)])
def test_suggest_installments_none_when_impossible(amount, credit):
    """More than 12 installments, no credit, or nothing to split"""
    assert suggest_installments(amount, credit) is None
