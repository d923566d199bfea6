"""Unit tests for support ticket status transitions"""

import pytest
from inova_gateway.domain.exceptions import ConflictError
from inova_gateway.domain.support import (
    ANSWERED,
    CLOSED,
    IN_PROGRESS,
    OPEN,
    SENDER_ADMIN,
    SENDER_USER,
    status_after_reply,
)


def test_admin_reply_marks_answered():
    assert status_after_reply(OPEN, SENDER_ADMIN) == ANSWERED
    assert status_after_reply(IN_PROGRESS, SENDER_ADMIN) == ANSWERED


def test_user_reply_on_answered_reopens():
    assert status_after_reply(ANSWERED, SENDER_USER) == IN_PROGRESS


def test_user_reply_keeps_open_ticket_open():
    assert status_after_reply(OPEN, SENDER_USER) == OPEN


@pytest.mark.parametrize("sender", [SENDER_USER, SENDER_ADMIN])
def test_closed_ticket_rejects_messages(sender):
    with pytest.raises(ConflictError):
        status_after_reply(CLOSED, sender)
