"""Unit tests for affiliate links, commissions, stats and withdrawals"""

import random

import pytest
from inova_gateway.domain.affiliates import (
    LINK_ALPHABET,
    affiliate_stats,
    calculate_commission,
    check_affiliate_link,
    check_withdrawal,
    generate_link_code,
    normalize_link_code,
    withdrawal_status_for,
)
from inova_gateway.domain.exceptions import ValidationError


def test_calculate_commission_half_of_payment():
    assert calculate_commission(2999, 50) == 1499


@pytest.mark.parametrize("amount, percent", [(0, 50), (2999, 0), (-100, 50)])
def test_calculate_commission_zero(amount, percent):
    assert calculate_commission(amount, percent) == 0


def test_affiliate_stats():
    stats = affiliate_stats(
        ["pending", "approved", "approved", "rejected"],
        [(1500, "released"), (1500, "released"), (700, "pending")],
        [(1000, "paid"), (500, "cancelled"), (200, "pending")],
    )

    assert stats.total_invites == 4
    assert stats.pending_invites == 1
    assert stats.approved_invites == 2
    assert stats.rejected_invites == 1
    assert stats.total_commission_cents == 3700
    assert stats.available_balance_cents == 3000 - 1200


def test_affiliate_stats_empty():
    stats = affiliate_stats([], [], [])
    assert stats.total_invites == 0
    assert stats.available_balance_cents == 0


def test_check_withdrawal_ok():
    check_withdrawal(1000, 1000, "chave@pix.com")


@pytest.mark.parametrize(
    "amount, available, pix_key",
    [(0, 1000, "chave"), (1001, 1000, "chave"), (500, 1000, None), (500, 1000, "  ")],
)
def test_check_withdrawal_rejects(amount, available, pix_key):
    with pytest.raises(ValidationError):
        check_withdrawal(amount, available, pix_key)


def test_withdrawal_status_for():
    assert withdrawal_status_for("approve") == "approved"
    assert withdrawal_status_for("pay") == "paid"
    assert withdrawal_status_for("cancel") == "cancelled"
    with pytest.raises(ValidationError):
        withdrawal_status_for("refund")


def test_generate_link_code_format():
    code = generate_link_code(random.Random(7))

    assert code.startswith("AFI-")
    assert len(code) == 12
    assert all(c in LINK_ALPHABET for c in code[4:])


def test_normalize_link_code_accepts_both_prefixes():
    assert normalize_link_code(" afi-ab12cd34 ") == "AFI-AB12CD34"
    assert normalize_link_code("INV-XYZ") == "INV-XYZ"


@pytest.mark.parametrize("code", ["", "ABC-123", "123456"])
def test_normalize_link_code_rejects_other_codes(code):
    with pytest.raises(ValidationError):
        normalize_link_code(code)


def test_check_affiliate_link_active():
    check_affiliate_link(True, is_active=True, is_blocked=False)


@pytest.mark.parametrize(
    "found, is_active, is_blocked",
    [(False, True, False), (True, False, False), (True, True, True)],
)
def test_check_affiliate_link_refused(found, is_active, is_blocked):
    with pytest.raises(ValidationError, match="bloqueado"):
        check_affiliate_link(found, is_active, is_blocked)
