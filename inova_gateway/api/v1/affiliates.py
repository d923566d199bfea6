"""Affiliate dashboard and commission withdrawals"""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from inova_gateway.api.dependencies import get_request_id
from inova_gateway.api.errors import to_http_error
from inova_gateway.api.v1.schemas import AffiliateStatsResponse, WithdrawalRequest, WithdrawalSchema
from inova_gateway.domain.affiliates import check_withdrawal
from inova_gateway.domain.exceptions import DomainException, ValidationError
from inova_gateway.infrastructure.database.models import AffiliateWithdrawal
from inova_gateway.infrastructure.database.repositories import AffiliateRepository, UserRepository
from inova_gateway.infrastructure.database.session import get_db

router = APIRouter()


def to_schema(withdrawal: AffiliateWithdrawal) -> WithdrawalSchema:
    return WithdrawalSchema(
        id=str(withdrawal.id),
        affiliate_matricula=withdrawal.affiliate_matricula,
        amount_cents=withdrawal.amount_cents,
        pix_key=withdrawal.pix_key,
        status=withdrawal.status,
    )


@router.get("/affiliates/{matricula}/stats", response_model=AffiliateStatsResponse)
def get_stats(matricula: int, db: Session = Depends(get_db)):
    try:
        user = UserRepository(db).get_or_404(matricula)
    except DomainException as e:
        raise to_http_error(e)

    stats = AffiliateRepository(db).stats(matricula)
    return AffiliateStatsResponse(
        matricula=matricula,
        affiliate_code=user.affiliate_code,
        total_invites=stats.total_invites,
        pending_invites=stats.pending_invites,
        approved_invites=stats.approved_invites,
        rejected_invites=stats.rejected_invites,
        total_commission_cents=stats.total_commission_cents,
        available_balance_cents=stats.available_balance_cents,
    )


@router.get("/affiliates/{matricula}/withdrawals", response_model=List[WithdrawalSchema])
def list_withdrawals(matricula: int, db: Session = Depends(get_db)):
    return [to_schema(w) for w in AffiliateRepository(db).withdrawals(matricula)]


@router.post("/affiliates/{matricula}/withdrawals", response_model=WithdrawalSchema, status_code=201)
def request_withdrawal(matricula: int, body: WithdrawalRequest, request: Request, db: Session = Depends(get_db)):
    """
    Request a payout of released commissions.

    The PIX key defaults to the one saved on the profile.
    """
    request_id = get_request_id(request)
    try:
        user = UserRepository(db).get_or_404(matricula)
        if not user.is_affiliate:
            raise ValidationError("Usuário não é afiliado")

        affiliates = AffiliateRepository(db)
        pix_key = (body.pix_key or user.pix_key or "").strip()
        check_withdrawal(body.amount_cents, affiliates.stats(matricula).available_balance_cents, pix_key)

        withdrawal = affiliates.request_withdrawal(user, body.amount_cents, pix_key)
        db.commit()
        return to_schema(withdrawal)

    except DomainException as e:
        raise to_http_error(e, db, request_id)
