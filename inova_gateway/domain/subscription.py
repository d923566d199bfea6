"""Subscription lifecycle: trial, paid period, status"""

from datetime import datetime, timedelta
from typing import Optional

from inova_gateway.utils.date_utils import as_utc

USER_PENDING = "pending"
USER_APPROVED = "approved"

SUBSCRIPTION_TRIAL = "trial"
SUBSCRIPTION_ACTIVE = "active"
SUBSCRIPTION_PENDING = "pending"
SUBSCRIPTION_EXPIRED = "expired"

PAYMENT_PENDING = "pending"
PAYMENT_APPROVED = "approved"
PAYMENT_REJECTED = "rejected"
PAYMENT_CANCELLED = "cancelled"
PAYMENT_REFUNDED = "refunded"

TERMINAL_PAYMENT_STATUSES = frozenset({PAYMENT_APPROVED, PAYMENT_REJECTED, PAYMENT_CANCELLED, PAYMENT_REFUNDED})


def trial_period(now: datetime, hours: int) -> tuple[datetime, datetime]:
    return now, now + timedelta(hours=hours)


def paid_period(now: datetime, days: int) -> tuple[datetime, datetime]:
    return now, now + timedelta(days=days)


def subscription_status(user_status: str, end_date: Optional[datetime], now: datetime) -> str:
    """pending while the account awaits approval, expired after the end date, active otherwise"""
    if user_status == USER_PENDING:
        return SUBSCRIPTION_PENDING
    if end_date is not None and as_utc(end_date) < as_utc(now):
        return SUBSCRIPTION_EXPIRED
    return SUBSCRIPTION_ACTIVE


def days_remaining(end_date: Optional[datetime], now: datetime) -> int:
    if end_date is None:
        return 0
    return max(0, (as_utc(end_date) - as_utc(now)).days)
