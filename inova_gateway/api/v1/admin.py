"""Back-office endpoints, guarded by the X-Admin-Token header"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from inova_gateway.api.dependencies import get_request_id, require_admin
from inova_gateway.api.errors import to_http_error
from inova_gateway.api.v1.affiliates import to_schema as withdrawal_schema
from inova_gateway.api.v1.schemas import (
    AffiliateLinkCreate,
    AffiliateLinkSchema,
    CouponCreate,
    DashboardResponse,
    DeleteUserResponse,
    MessageCreate,
    PriceSettings,
    TicketSchema,
    WithdrawalAction,
    WithdrawalSchema,
)
from inova_gateway.api.v1.subscriptions import AFFILIATE_PRICE_KEY, SUBSCRIPTION_PRICE_KEY
from inova_gateway.api.v1.support import to_schema as ticket_schema
from inova_gateway.config import settings
from inova_gateway.domain import subscription
from inova_gateway.domain.affiliates import withdrawal_status_for
from inova_gateway.domain.exceptions import DomainException, ValidationError
from inova_gateway.domain.pricing import PERCENTAGE, normalize_coupon_code
from inova_gateway.domain.support import SENDER_ADMIN
from inova_gateway.infrastructure.database.repositories import (
    AffiliateLinkRepository,
    AffiliateRepository,
    CouponRepository,
    PaymentRepository,
    SettingsRepository,
    SupportRepository,
    UserRepository,
)
from inova_gateway.infrastructure.database.session import get_db
from inova_gateway.utils.date_utils import utcnow

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


@router.delete("/users/{matricula}", response_model=DeleteUserResponse)
def delete_user(matricula: int, request: Request, db: Session = Depends(get_db)):
    """Remove a user and everything they own, table by table"""
    request_id = get_request_id(request)
    try:
        removed = UserRepository(db).delete_everything(matricula)
        db.commit()
    except DomainException as e:
        raise to_http_error(e, db, request_id)

    logging.info("User deleted", extra={"request_id": request_id, "matricula": matricula, "removed": removed})
    return DeleteUserResponse(matricula=matricula, removed=removed)


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(db: Session = Depends(get_db)):
    users = UserRepository(db)
    affiliates = AffiliateRepository(db)
    return DashboardResponse(
        total_users=users.count(),
        active_subscriptions=users.count_by_subscription(subscription.SUBSCRIPTION_ACTIVE),
        trial_subscriptions=users.count_by_subscription(subscription.SUBSCRIPTION_TRIAL),
        revenue_cents=PaymentRepository(db).revenue(),
        commissions_released_cents=affiliates.total_released(),
        pending_withdrawals=affiliates.count_pending_withdrawals(),
        open_tickets=len(SupportRepository(db).list_open()),
    )


@router.post("/withdrawals/{withdrawal_id}", response_model=WithdrawalSchema)
def process_withdrawal(withdrawal_id: uuid.UUID, body: WithdrawalAction, request: Request, db: Session = Depends(get_db)):
    """Approve, pay or cancel a withdrawal; cancelling returns the money to the affiliate"""
    request_id = get_request_id(request)
    try:
        status = withdrawal_status_for(body.action)
        withdrawal = AffiliateRepository(db).process_withdrawal(withdrawal_id, status, utcnow())
        db.commit()
        return withdrawal_schema(withdrawal)
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.post("/affiliate-links", response_model=AffiliateLinkSchema, status_code=201)
def create_affiliate_link(body: AffiliateLinkCreate, request: Request, db: Session = Depends(get_db)):
    """Issue an invite link; whoever signs up through it becomes a free affiliate"""
    request_id = get_request_id(request)
    try:
        link = AffiliateLinkRepository(db).create(body.name.strip())
        db.commit()
    except DomainException as e:
        raise to_http_error(e, db, request_id)

    logging.info("Affiliate link created", extra={"request_id": request_id, "code": link.code})
    return AffiliateLinkSchema.model_validate(link)


@router.get("/affiliate-links", response_model=List[AffiliateLinkSchema])
def list_affiliate_links(db: Session = Depends(get_db)):
    return [AffiliateLinkSchema.model_validate(link) for link in AffiliateLinkRepository(db).list_all()]


@router.post("/affiliate-links/{code}/block", response_model=AffiliateLinkSchema)
def block_affiliate_link(code: str, request: Request, db: Session = Depends(get_db)):
    """Blocked links stop granting affiliate accounts; existing affiliates keep theirs"""
    request_id = get_request_id(request)
    try:
        links = AffiliateLinkRepository(db)
        link = links.set_blocked(links.get_or_404(code.strip().upper()), True)
        db.commit()
        return AffiliateLinkSchema.model_validate(link)
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.post("/coupons", status_code=201)
def create_coupon(body: CouponCreate, request: Request, db: Session = Depends(get_db)):
    request_id = get_request_id(request)
    try:
        if body.discount_type == PERCENTAGE and body.discount_value > 100:
            raise ValidationError("Desconto percentual não pode passar de 100%")

        coupon = CouponRepository(db).create(
            code=normalize_coupon_code(body.code),
            discount_type=body.discount_type,
            discount_value=body.discount_value,
            is_active=True,
            expires_at=body.expires_at,
            usage_limit=body.usage_limit,
            times_used=0,
        )
        db.commit()
        return {"id": str(coupon.id), "code": coupon.code}
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.get("/prices", response_model=PriceSettings)
def get_prices(db: Session = Depends(get_db)):
    prices = SettingsRepository(db)
    return PriceSettings(
        subscription_price_cents=prices.get_int(SUBSCRIPTION_PRICE_KEY, settings.subscription_price_cents),
        affiliate_price_cents=prices.get_int(AFFILIATE_PRICE_KEY, settings.affiliate_price_cents),
    )


@router.put("/prices", response_model=PriceSettings)
def update_prices(body: PriceSettings, db: Session = Depends(get_db)):
    prices = SettingsRepository(db)
    if body.subscription_price_cents is not None:
        prices.set(SUBSCRIPTION_PRICE_KEY, str(body.subscription_price_cents))
    if body.affiliate_price_cents is not None:
        prices.set(AFFILIATE_PRICE_KEY, str(body.affiliate_price_cents))
    db.commit()
    return get_prices(db)


@router.get("/tickets", response_model=List[TicketSchema])
def list_open_tickets(db: Session = Depends(get_db)):
    return [ticket_schema(t, with_messages=False) for t in SupportRepository(db).list_open()]


@router.post("/tickets/{ticket_id}/messages", response_model=TicketSchema)
def answer_ticket(ticket_id: uuid.UUID, body: MessageCreate, request: Request, db: Session = Depends(get_db)):
    request_id = get_request_id(request)
    try:
        tickets = SupportRepository(db)
        ticket = tickets.get_or_404(ticket_id)
        tickets.reply(ticket, SENDER_ADMIN, body.message.strip(), utcnow())
        db.commit()
        db.refresh(ticket)
        return ticket_schema(ticket)
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.post("/tickets/{ticket_id}/close", response_model=TicketSchema)
def close_ticket(ticket_id: uuid.UUID, request: Request, db: Session = Depends(get_db)):
    request_id = get_request_id(request)
    try:
        tickets = SupportRepository(db)
        ticket = tickets.close(tickets.get_or_404(ticket_id), utcnow())
        db.commit()
        return ticket_schema(ticket)
    except DomainException as e:
        raise to_http_error(e, db, request_id)
