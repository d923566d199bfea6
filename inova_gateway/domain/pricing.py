"""Subscription pricing with referral price and discount coupons"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from inova_gateway.domain.exceptions import CouponError
from inova_gateway.utils.date_utils import as_utc

MIN_CHARGE_CENTS = 1

PERCENTAGE = "percentage"
FIXED = "fixed"


@dataclass
class Coupon:
    """Discount coupon as stored"""

    code: str
    discount_type: str  # "percentage" or "fixed"
    discount_value: int  # percent points, or cents for fixed
    is_active: bool = True
    expires_at: Optional[datetime] = None
    usage_limit: Optional[int] = None
    times_used: int = 0


@dataclass
class Quote:
    """Final subscription price for one signup"""

    base_price_cents: int
    discount_cents: int
    amount_cents: int
    coupon_code: Optional[str]
    is_affiliate_price: bool


def normalize_coupon_code(code: str) -> str:
    return code.upper().strip()


def check_coupon(coupon: Optional[Coupon], now: datetime) -> Coupon:
    """
    Raises:
        CouponError: unknown, inactive, expired or usage limit reached
    """
    if coupon is None or not coupon.is_active:
        raise CouponError("Este cupom não existe ou está inativo.")
    if coupon.expires_at is not None and as_utc(coupon.expires_at) < as_utc(now):
        raise CouponError("Este cupom já expirou.")
    if coupon.usage_limit and coupon.times_used >= coupon.usage_limit:
        raise CouponError("Este cupom atingiu o limite de uso.")
    return coupon


def coupon_discount(coupon: Coupon, base_price_cents: int) -> int:
    if coupon.discount_type == PERCENTAGE:
        return base_price_cents * coupon.discount_value // 100
    return coupon.discount_value


def quote_subscription(
    default_price_cents: int,
    affiliate_price_cents: int,
    referred: bool,
    coupon: Optional[Coupon] = None,
) -> Quote:
    """
    Price a subscription.

    Referred signups pay the affiliate price; a valid coupon is discounted
    from that base. The charge never drops below 1 cent.
    """
    base = affiliate_price_cents if referred else default_price_cents
    discount = coupon_discount(coupon, base) if coupon else 0

    return Quote(
        base_price_cents=base,
        discount_cents=discount,
        amount_cents=max(MIN_CHARGE_CENTS, base - discount),
        coupon_code=coupon.code if coupon else None,
        is_affiliate_price=referred,
    )
