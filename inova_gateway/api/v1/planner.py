"""Scheduled payments and the monthly cash-flow summary"""

import uuid
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from inova_gateway.api.dependencies import get_request_id
from inova_gateway.api.errors import to_http_error
from inova_gateway.api.v1.context import load_finances, load_monthly_summary
from inova_gateway.api.v1.schemas import MonthlySummaryResponse, ScheduledPaymentCreate, ScheduledPaymentSchema
from inova_gateway.domain.exceptions import DomainException
from inova_gateway.domain.validation import capitalize_category
from inova_gateway.infrastructure.database.models import ScheduledPaymentRecord
from inova_gateway.infrastructure.database.repositories import ScheduledPaymentRepository, UserRepository
from inova_gateway.infrastructure.database.session import get_db

router = APIRouter()


def to_schema(record: ScheduledPaymentRecord) -> ScheduledPaymentSchema:
    return ScheduledPaymentSchema(
        id=str(record.id),
        name=record.name,
        amount_cents=record.amount_cents,
        due_day=record.due_day,
        is_recurring=record.is_recurring,
        due_date=record.due_date,
        category=record.category,
    )


@router.post("/users/{matricula}/scheduled-payments", response_model=ScheduledPaymentSchema, status_code=201)
def create_scheduled_payment(
    matricula: int,
    body: ScheduledPaymentCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    request_id = get_request_id(request)
    try:
        UserRepository(db).get_or_404(matricula)
        record = ScheduledPaymentRepository(db).create(
            matricula,
            name=body.name.strip(),
            amount_cents=body.amount_cents,
            due_day=body.due_day,
            is_recurring=body.is_recurring,
            due_date=body.due_date,
            category=capitalize_category(body.category),
        )
        db.commit()
        return to_schema(record)
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.get("/users/{matricula}/scheduled-payments", response_model=List[ScheduledPaymentSchema])
def list_scheduled_payments(matricula: int, db: Session = Depends(get_db)):
    return [to_schema(r) for r in ScheduledPaymentRepository(db).list_for_user(matricula)]


@router.delete("/users/{matricula}/scheduled-payments/{payment_id}", status_code=204)
def delete_scheduled_payment(matricula: int, payment_id: uuid.UUID, request: Request, db: Session = Depends(get_db)):
    request_id = get_request_id(request)
    try:
        ScheduledPaymentRepository(db).delete(matricula, payment_id)
        db.commit()
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.get("/users/{matricula}/monthly-summary", response_model=MonthlySummaryResponse)
def get_monthly_summary(matricula: int, db: Session = Depends(get_db)):
    """
    Bills and salary still to come this month and the projected month-end balance.
    """
    try:
        user = UserRepository(db).get_or_404(matricula)
    except DomainException as e:
        raise to_http_error(e)

    finances = load_finances(db, user)
    month = load_monthly_summary(db, user, finances.summary.debit_balance_cents, date.today())
    return MonthlySummaryResponse(
        total_payments_cents=month.total_payments_cents,
        pending_payments_cents=month.pending_payments_cents,
        pending_salary_cents=month.pending_salary_cents,
        projected_balance_cents=month.projected_balance_cents,
        payments=[to_schema(r) for r in ScheduledPaymentRepository(db).list_for_user(matricula)],
    )
