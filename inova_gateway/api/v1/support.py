"""Support tickets, user side"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from inova_gateway.api.dependencies import get_request_id
from inova_gateway.api.errors import to_http_error
from inova_gateway.api.v1.schemas import MessageCreate, MessageSchema, TicketCreate, TicketSchema
from inova_gateway.domain.exceptions import DomainException, NotFoundError
from inova_gateway.domain.support import SENDER_USER
from inova_gateway.infrastructure.database.models import SupportTicket
from inova_gateway.infrastructure.database.repositories import SupportRepository, UserRepository
from inova_gateway.infrastructure.database.session import get_db
from inova_gateway.utils.date_utils import utcnow

router = APIRouter()


def to_schema(ticket: SupportTicket, with_messages: bool = True) -> TicketSchema:
    messages = ticket.messages if with_messages else []
    return TicketSchema(
        id=str(ticket.id),
        matricula=ticket.matricula,
        subject=ticket.subject,
        status=ticket.status,
        last_message_by=ticket.last_message_by,
        messages=[
            MessageSchema(id=str(m.id), sender_type=m.sender_type, message=m.message, created_at=m.created_at)
            for m in messages
        ],
    )


def get_owned_ticket(db: Session, matricula: int, ticket_id: uuid.UUID) -> SupportTicket:
    ticket = SupportRepository(db).get_or_404(ticket_id)
    if ticket.matricula != matricula:
        raise NotFoundError("Ticket não encontrado")
    return ticket


@router.post("/users/{matricula}/tickets", response_model=TicketSchema, status_code=201)
def open_ticket(matricula: int, body: TicketCreate, request: Request, db: Session = Depends(get_db)):
    request_id = get_request_id(request)
    try:
        UserRepository(db).get_or_404(matricula)
        ticket = SupportRepository(db).open_ticket(matricula, body.subject.strip(), body.message.strip())
        db.commit()
        db.refresh(ticket)
        return to_schema(ticket)
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.get("/users/{matricula}/tickets", response_model=List[TicketSchema])
def list_tickets(matricula: int, db: Session = Depends(get_db)):
    """Most recently updated first, without messages"""
    return [to_schema(t, with_messages=False) for t in SupportRepository(db).list_for_user(matricula)]


@router.get("/users/{matricula}/tickets/{ticket_id}", response_model=TicketSchema)
def get_ticket(matricula: int, ticket_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        return to_schema(get_owned_ticket(db, matricula, ticket_id))
    except DomainException as e:
        raise to_http_error(e)


@router.post("/users/{matricula}/tickets/{ticket_id}/messages", response_model=TicketSchema)
def reply(matricula: int, ticket_id: uuid.UUID, body: MessageCreate, request: Request, db: Session = Depends(get_db)):
    request_id = get_request_id(request)
    try:
        ticket = get_owned_ticket(db, matricula, ticket_id)
        SupportRepository(db).reply(ticket, SENDER_USER, body.message.strip(), utcnow())
        db.commit()
        db.refresh(ticket)
        return to_schema(ticket)
    except DomainException as e:
        raise to_http_error(e, db, request_id)
