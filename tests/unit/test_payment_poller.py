"""Unit tests for the PIX status poller"""

from unittest.mock import AsyncMock
from inova_gateway.domain.exceptions import PaymentGatewayError
from inova_gateway.infrastructure.clients.payment import PaymentStatusPoller


def make_poller(fake_clock, timeout_seconds: float = 10) -> tuple[PaymentStatusPoller, AsyncMock]:
    sleep = AsyncMock()
    return PaymentStatusPoller(interval_seconds=5, timeout_seconds=timeout_seconds, clock=fake_clock, sleep=sleep), sleep


async def test_stops_on_first_terminal_status(fake_clock):
    poller, sleep = make_poller(fake_clock)
    fetch = AsyncMock(side_effect=["pending", "pending", "approved"])

    outcome = await poller.wait_for_terminal(fetch)

    assert outcome.status == "approved"
    assert outcome.attempts == 3
    assert outcome.timed_out is False
    assert fetch.await_count == 3
    sleep.assert_awaited_with(5)


async def test_rejected_is_terminal(fake_clock):
    poller, _ = make_poller(fake_clock)

    outcome = await poller.wait_for_terminal(AsyncMock(return_value="rejected"))

    assert outcome.status == "rejected"
    assert outcome.attempts == 1


async def test_gives_up_after_timeout(fake_clock):
    """Clock advances one second per reading; 10s budget leaves 9 checks"""
    poller, _ = make_poller(fake_clock, timeout_seconds=10)
    fetch = AsyncMock(return_value="pending")

    outcome = await poller.wait_for_terminal(fetch)

    assert outcome.timed_out is True
    assert outcome.status == "pending"
    assert outcome.attempts == 9
    assert fetch.await_count == 9


async def test_gateway_errors_are_retried(fake_clock):
    poller, _ = make_poller(fake_clock)
    fetch = AsyncMock(side_effect=[PaymentGatewayError("timeout"), "in_process", "approved"])

    outcome = await poller.wait_for_terminal(fetch)

    assert outcome.status == "approved"
    assert outcome.attempts == 3


async def test_no_status_when_every_check_fails(fake_clock):
    poller, _ = make_poller(fake_clock, timeout_seconds=4)
    fetch = AsyncMock(side_effect=PaymentGatewayError("down"))

    outcome = await poller.wait_for_terminal(fetch)

    assert outcome.timed_out is True
    assert outcome.status is None
    assert outcome.attempts == 3
