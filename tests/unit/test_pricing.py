"""Unit tests for subscription pricing and coupons"""

import pytest
from datetime import datetime, timedelta, timezone
from inova_gateway.domain.exceptions import CouponError
from inova_gateway.domain.pricing import Coupon, check_coupon, normalize_coupon_code, quote_subscription

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_default_price():
    quote = quote_subscription(4999, 2999, referred=False)

    assert quote.amount_cents == 4999
    assert quote.discount_cents == 0
    assert quote.is_affiliate_price is False


def test_referred_signup_pays_affiliate_price():
    quote = quote_subscription(4999, 2999, referred=True)

    assert quote.base_price_cents == 2999
    assert quote.amount_cents == 2999


def test_percentage_coupon():
    coupon = Coupon(code="DEZ", discount_type="percentage", discount_value=10)
    quote = quote_subscription(5000, 3000, referred=False, coupon=coupon)

    assert quote.discount_cents == 500
    assert quote.amount_cents == 4500
    assert quote.coupon_code == "DEZ"


def test_fixed_coupon_applies_to_affiliate_price():
    coupon = Coupon(code="MENOS10", discount_type="fixed", discount_value=1000)
    quote = quote_subscription(4999, 2999, referred=True, coupon=coupon)

    assert quote.amount_cents == 1999


def test_charge_never_below_one_cent():
    coupon = Coupon(code="TUDO", discount_type="fixed", discount_value=100000)
    assert quote_subscription(4999, 2999, referred=False, coupon=coupon).amount_cents == 1


def test_check_coupon_accepts_valid():
    coupon = Coupon(code="OK", discount_type="fixed", discount_value=100, expires_at=NOW + timedelta(days=1))
    assert check_coupon(coupon, NOW) is coupon


def test_check_coupon_accepts_naive_expiry():
    """SQLite hands back naive datetimes"""
    coupon = Coupon(code="OK", discount_type="fixed", discount_value=100, expires_at=datetime(2025, 3, 16))
    assert check_coupon(coupon, NOW) is coupon


@pytest.mark.parametrize(
    "coupon",
    [
        None,
        Coupon(code="OFF", discount_type="fixed", discount_value=100, is_active=False),
        Coupon(code="OLD", discount_type="fixed", discount_value=100, expires_at=NOW - timedelta(seconds=1)),
        Coupon(code="USED", discount_type="fixed", discount_value=100, usage_limit=5, times_used=5),
    ],
)
def test_check_coupon_rejects(coupon):
    with pytest.raises(CouponError):
        check_coupon(coupon, NOW)


def test_normalize_coupon_code():
    assert normalize_coupon_code("  promo10 ") == "PROMO10"
