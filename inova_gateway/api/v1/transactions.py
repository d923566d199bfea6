"""Transactions: history, proposal and confirmation"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from inova_gateway.api.dependencies import get_request_id
from inova_gateway.api.errors import to_http_error
from inova_gateway.api.v1.context import load_finances
from inova_gateway.api.v1.schemas import (
    ConfirmResponse,
    InstallmentSchema,
    ProposalRequest,
    ProposalResponse,
    TransactionCreate,
    TransactionListResponse,
    TransactionSchema,
)
from inova_gateway.domain.confirmation import installment_description, propose_transaction, validate_confirmation
from inova_gateway.domain.exceptions import (
    CreditLimitExceededError,
    DomainException,
    InsufficientFundsError,
    InvalidTransactionDataError,
)
from inova_gateway.domain.installments import generate_installment_plan
from inova_gateway.domain.models import CREDIT, DEBIT, INCOME, Transaction, TransactionProposal
from inova_gateway.domain.validation import capitalize_category
from inova_gateway.infrastructure.database.models import TransactionRecord
from inova_gateway.infrastructure.database.repositories import TransactionRepository, UserRepository
from inova_gateway.infrastructure.database.session import get_db
from inova_gateway.infrastructure.observability.logging import log_transaction
from inova_gateway.infrastructure.observability.metrics import (
    record_proposal,
    record_transaction,
    rejected_expense_counter,
)

router = APIRouter()


def to_schema(record: TransactionRecord) -> TransactionSchema:
    return TransactionSchema(
        id=str(record.id),
        amount_cents=record.amount_cents,
        type=record.type,
        payment_method=record.payment_method,
        category=record.category,
        description=record.description,
        date=record.date,
    )


def proposal_response(proposal: TransactionProposal) -> ProposalResponse:
    return ProposalResponse(
        accepted=proposal.accepted,
        amount_cents=proposal.amount_cents,
        type=proposal.type,
        category=proposal.category,
        description=proposal.description,
        payment_method=proposal.payment_method,
        advice=proposal.advice,
        debit_balance_cents=proposal.debit_balance_cents,
        credit_available_cents=proposal.credit_available_cents,
        min_installments=proposal.min_installments,
    )


@router.get("/users/{matricula}/transactions", response_model=TransactionListResponse)
def list_transactions(
    matricula: int,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Newest first"""
    try:
        UserRepository(db).get_or_404(matricula)
    except DomainException as e:
        raise to_http_error(e)

    records = TransactionRepository(db).list_records(matricula, limit=limit)
    return TransactionListResponse(matricula=matricula, transactions=[to_schema(r) for r in records])


@router.post("/users/{matricula}/transactions/proposal", response_model=ProposalResponse)
def propose(matricula: int, body: ProposalRequest, request: Request, db: Session = Depends(get_db)):
    """
    Evaluate a transaction against current funds without recording it.

    Returns the default payment method, the minimum installment count when
    the purchase only fits split on the card, or a rejection.
    """
    request_id = get_request_id(request)
    try:
        user = UserRepository(db).get_or_404(matricula)
        finances = load_finances(db, user)

        proposal = propose_transaction(
            amount_cents=body.amount_cents,
            type=body.type,
            category=capitalize_category(body.category),
            description=body.description,
            debit_balance_cents=finances.summary.debit_balance_cents,
            credit_available_cents=finances.credit_available_cents,
            has_credit_card=user.has_credit_card,
        )
        record_proposal(proposal.advice)
        return proposal_response(proposal)

    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.post("/users/{matricula}/transactions", response_model=ConfirmResponse, status_code=201)
def confirm_transaction(matricula: int, body: TransactionCreate, request: Request, db: Session = Depends(get_db)):
    """
    Record a confirmed transaction.

    Flow:
    1. Recompute debit balance and available credit
    2. Reject expenses above available funds (nothing is recorded)
    3. Split card purchases into a monthly installment plan
    4. Record the amount charged now and raise credit used for card expenses
    """
    request_id = get_request_id(request)
    try:
        users = UserRepository(db)
        user = users.get_or_404(matricula)

        payment_method = DEBIT if body.type == INCOME else body.payment_method
        if payment_method == CREDIT and not user.has_credit_card:
            raise InvalidTransactionDataError("Usuário não possui cartão de crédito")

        finances = load_finances(db, user)
        charged = validate_confirmation(
            amount_cents=body.amount_cents,
            type=body.type,
            payment_method=payment_method,
            installments=body.installments,
            debit_balance_cents=finances.summary.debit_balance_cents,
            credit_available_cents=finances.credit_available_cents,
        )

        description = body.description
        plan = []
        if payment_method == CREDIT and body.installments > 1:
            plan = generate_installment_plan(body.amount_cents, body.installments, user.credit_due_day)
            description = installment_description(body.description, body.installments, charged)

        record = TransactionRepository(db).add(
            user,
            Transaction(
                amount_cents=charged,
                type=body.type,
                payment_method=payment_method,
                category=capitalize_category(body.category),
                description=description,
                date=body.date or date.today(),
                matricula=matricula,
            ),
            installments=plan,
        )
        db.commit()

        record_transaction(body.type, payment_method)
        log_transaction(request_id, matricula, body.type, payment_method, charged, body.installments)

        after = load_finances(db, user)
        return ConfirmResponse(
            transaction=to_schema(record),
            charged_cents=charged,
            installments=[
                InstallmentSchema(
                    number=inst.number,
                    due_date=inst.due_date,
                    amount_cents=inst.amount_cents,
                    status="charged" if inst.number == 1 else "scheduled",
                )
                for inst in plan
            ],
            debit_balance_cents=after.summary.debit_balance_cents,
            credit_available_cents=after.credit_available_cents,
        )

    except InsufficientFundsError as e:
        rejected_expense_counter.labels(reason="insufficient_funds").inc()
        raise to_http_error(e, db, request_id)
    except CreditLimitExceededError as e:
        rejected_expense_counter.labels(reason="credit_limit").inc()
        raise to_http_error(e, db, request_id)
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.get("/users/{matricula}/installments", response_model=list[InstallmentSchema])
def list_installments(matricula: int, db: Session = Depends(get_db)):
    """Card installment schedule, soonest first"""
    return [
        InstallmentSchema(number=i.number, due_date=i.due_date, amount_cents=i.amount_cents, status=i.status)
        for i in TransactionRepository(db).list_installments(matricula)
    ]
