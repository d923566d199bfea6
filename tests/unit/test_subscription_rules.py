"""Unit tests for subscription periods and status"""

from datetime import datetime, timedelta, timezone
from inova_gateway.domain import subscription

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_trial_lasts_24_hours():
    start, end = subscription.trial_period(NOW, 24)
    assert start == NOW
    assert end - start == timedelta(hours=24)


def test_paid_period_lasts_30_days():
    _, end = subscription.paid_period(NOW, 30)
    assert end == NOW + timedelta(days=30)


def test_status_pending_user():
    assert subscription.subscription_status("pending", NOW + timedelta(days=3), NOW) == "pending"


def test_status_expired():
    assert subscription.subscription_status("approved", NOW - timedelta(minutes=1), NOW) == "expired"


def test_status_active_without_end_date():
    """Admin-created affiliate accounts never expire"""
    assert subscription.subscription_status("approved", None, NOW) == "active"


def test_status_handles_naive_end_date():
    assert subscription.subscription_status("approved", datetime(2025, 3, 20), NOW) == "active"


def test_days_remaining():
    assert subscription.days_remaining(NOW + timedelta(days=10, hours=3), NOW) == 10
    assert subscription.days_remaining(NOW - timedelta(days=2), NOW) == 0
    assert subscription.days_remaining(None, NOW) == 0
