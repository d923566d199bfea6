"""Support ticket status transitions"""

from inova_gateway.domain.exceptions import ConflictError

OPEN = "aberto"
IN_PROGRESS = "em_atendimento"
ANSWERED = "respondido"
CLOSED = "encerrado"

STATUSES = (OPEN, IN_PROGRESS, ANSWERED, CLOSED)

SENDER_USER = "user"
SENDER_ADMIN = "admin"


def status_after_reply(current: str, sender: str) -> str:
    """
    Status of a ticket after a new message.

    A user reply to an answered ticket reopens it as in progress; an admin
    reply marks it answered. Closed tickets take no messages.
    """
    if current == CLOSED:
        raise ConflictError("Ticket encerrado")
    if sender == SENDER_ADMIN:
        return ANSWERED
    if current == ANSWERED:
        return IN_PROGRESS
    return current
