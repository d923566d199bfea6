"""Paid subscriptions: pricing, PIX charges, payment tracking and activation"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from inova_gateway.api.dependencies import get_payment_client, get_payment_poller, get_request_id
from inova_gateway.api.errors import to_http_error
from inova_gateway.api.v1.schemas import (
    CouponQuoteRequest,
    PaymentStatusResponse,
    PaymentWebhook,
    PixDataSchema,
    PixSubscriptionRequest,
    PixSubscriptionResponse,
    QuoteResponse,
)
from inova_gateway.api.v1.users import check_admin_affiliate_link, validate_signup
from inova_gateway.config import settings
from inova_gateway.domain import subscription
from inova_gateway.domain.exceptions import DomainException, NotFoundError
from inova_gateway.domain.models import Payer
from inova_gateway.domain.pricing import Quote, check_coupon, normalize_coupon_code, quote_subscription
from inova_gateway.infrastructure.clients.payment import PaymentGatewayClient, PaymentStatusPoller
from inova_gateway.infrastructure.database.models import PixPayment, UserProfile
from inova_gateway.infrastructure.database.repositories import (
    AffiliateRepository,
    CouponRepository,
    PaymentRepository,
    SettingsRepository,
    UserRepository,
)
from inova_gateway.infrastructure.database.session import get_db, get_session_factory
from inova_gateway.infrastructure.observability.logging import log_payment_event
from inova_gateway.infrastructure.observability.metrics import record_payment_outcome
from inova_gateway.utils.date_utils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()

SUBSCRIPTION_PRICE_KEY = "subscription_price"
AFFILIATE_PRICE_KEY = "affiliate_price"
CHARGE_DESCRIPTION = "Assinatura INOVA Finance - 30 dias"


def price_signup(db: Session, affiliate_code: Optional[int], coupon_code: Optional[str], now: datetime) -> Quote:
    """
    Price a signup from the admin-set prices, the referral and an optional coupon.

    Raises:
        CouponError: coupon unknown, inactive, expired or exhausted
    """
    prices = SettingsRepository(db)
    referred = affiliate_code is not None and AffiliateRepository(db).find_approved_affiliate(affiliate_code) is not None

    coupon = None
    if coupon_code:
        coupon = check_coupon(CouponRepository(db).get(normalize_coupon_code(coupon_code)), now)

    return quote_subscription(
        default_price_cents=prices.get_int(SUBSCRIPTION_PRICE_KEY, settings.subscription_price_cents),
        affiliate_price_cents=prices.get_int(AFFILIATE_PRICE_KEY, settings.affiliate_price_cents),
        referred=referred,
        coupon=coupon,
    )


def settle_payment(db: Session, payment: PixPayment, status: str, now: datetime) -> Optional[UserProfile]:
    """
    Apply a gateway status to a stored payment.

    Approved payments activate the subscription (safe to repeat, including
    from concurrent requests); other terminal statuses are recorded;
    non-terminal statuses change nothing.
    """
    if status == subscription.PAYMENT_APPROVED:
        payment = PaymentRepository(db).lock(payment)
        first_time = payment.payment_status != subscription.PAYMENT_APPROVED
        user = PaymentRepository(db).activate(
            payment,
            now,
            subscription_days=settings.subscription_days,
            commission_percent=settings.affiliate_commission_percent,
        )
        if first_time:
            record_payment_outcome(status)
            log_payment_event(payment.user_temp_id, "activated", status, matricula=user.matricula)
        return user

    if status in subscription.TERMINAL_PAYMENT_STATUSES and payment.payment_status != status:
        payment.payment_status = status
        db.flush()
        record_payment_outcome(status)
        log_payment_event(payment.user_temp_id, "closed", status)
    return None


async def watch_pix_payment(
    temp_id: str,
    gateway_payment_id: str,
    client: PaymentGatewayClient,
    poller: PaymentStatusPoller,
    session_factory: Callable[[], Session],
) -> None:
    """Background task: poll the gateway until the charge settles or the poll window closes"""
    outcome = await poller.wait_for_terminal(lambda: client.get_payment_status(gateway_payment_id))
    log_payment_event(
        temp_id,
        "polled",
        outcome.status or "unknown",
        attempts=outcome.attempts,
        timed_out=outcome.timed_out,
    )
    if outcome.timed_out:
        record_payment_outcome("poll_timeout")
        return

    db = session_factory()
    try:
        payment = PaymentRepository(db).get_by_temp_id(temp_id)
        if payment is None:
            logger.warning("Polled payment no longer exists", extra={"user_temp_id": temp_id})
            return
        settle_payment(db, payment, outcome.status, utcnow())
        db.commit()
    except DomainException as e:
        db.rollback()
        logger.error(f"Payment activation failed: {e}", extra={"user_temp_id": temp_id})
    finally:
        db.close()


@router.post("/subscriptions/quote", response_model=QuoteResponse)
def quote(body: CouponQuoteRequest, request: Request, db: Session = Depends(get_db)):
    """Price preview for a coupon, before any charge is created"""
    request_id = get_request_id(request)
    try:
        q = price_signup(db, body.affiliate_code, body.code, utcnow())
    except DomainException as e:
        raise to_http_error(e, db, request_id)

    return QuoteResponse(
        base_price_cents=q.base_price_cents,
        discount_cents=q.discount_cents,
        amount_cents=q.amount_cents,
        coupon_code=q.coupon_code,
        is_affiliate_price=q.is_affiliate_price,
    )


@router.post("/subscriptions/pix", response_model=PixSubscriptionResponse, status_code=201)
async def create_pix_subscription(
    body: PixSubscriptionRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    payment_client: PaymentGatewayClient = Depends(get_payment_client),
    poller: PaymentStatusPoller = Depends(get_payment_poller),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """
    Start a paid signup.

    Flow:
    1. Validate signup data and reject contacts owned by another account
    2. Price the subscription (referral price, coupon)
    3. Store the pending payment with the signup data
    4. Create the PIX charge at the gateway
    5. Poll the charge in the background; approval creates the account
    """
    request_id = get_request_id(request)
    try:
        fields = validate_signup(body)
        affiliate_mode = check_admin_affiliate_link(db, body)
        users = UserRepository(db)
        existing = users.get_by_cpf(fields["cpf"])
        users.ensure_unique_contact(
            fields["phone"],
            fields["email"],
            fields["cpf"],
            exclude=existing.matricula if existing is not None else None,
        )

        now = utcnow()
        q = price_signup(db, body.affiliate_code, body.coupon_code, now)

        temp_id = str(uuid.uuid4())
        payment = PaymentRepository(db).create(
            **fields,
            user_temp_id=temp_id,
            amount_cents=q.amount_cents,
            payment_status=subscription.PAYMENT_PENDING,
            coupon_code=q.coupon_code,
            affiliate_code=body.affiliate_code if q.is_affiliate_price else None,
            activate_affiliate_mode=affiliate_mode,
        )

        payer = Payer(
            full_name=fields["full_name"],
            email=fields["email"] or f"{fields['cpf']}@inovabank.com",
            cpf=fields["cpf"],
        )
        charge = await payment_client.create_pix_payment(q.amount_cents, CHARGE_DESCRIPTION, payer, temp_id)
        payment.gateway_payment_id = charge.payment_id

        if q.coupon_code:
            CouponRepository(db).increment_usage(q.coupon_code)

        db.commit()

    except DomainException as e:
        raise to_http_error(e, db, request_id)

    log_payment_event(temp_id, "created", charge.status, request_id=request_id, amount_cents=q.amount_cents)
    background_tasks.add_task(
        watch_pix_payment, temp_id, charge.payment_id, payment_client, poller, session_factory
    )

    return PixSubscriptionResponse(
        payment_id=charge.payment_id,
        status=charge.status,
        status_detail=charge.status_detail,
        amount_cents=q.amount_cents,
        user_temp_id=temp_id,
        is_affiliate=affiliate_mode,
        pix=PixDataSchema(
            qr_code=charge.qr_code,
            qr_code_base64=charge.qr_code_base64,
            ticket_url=charge.ticket_url,
            expiration_date=charge.expires_at,
        ),
    )


@router.get("/subscriptions/payments/{temp_id}", response_model=PaymentStatusResponse)
async def check_payment(
    temp_id: str,
    request: Request,
    db: Session = Depends(get_db),
    payment_client: PaymentGatewayClient = Depends(get_payment_client),
):
    """Current payment status; asks the gateway once while still pending"""
    request_id = get_request_id(request)
    try:
        payment = PaymentRepository(db).get_by_temp_id(temp_id)
        if payment is None:
            raise NotFoundError("Pagamento não encontrado")

        if payment.payment_status == subscription.PAYMENT_PENDING and payment.gateway_payment_id:
            status = await payment_client.get_payment_status(payment.gateway_payment_id)
            settle_payment(db, payment, status, utcnow())
            db.commit()

        return PaymentStatusResponse(user_temp_id=temp_id, status=payment.payment_status, matricula=payment.matricula)

    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.post("/webhooks/payments")
async def payment_webhook(
    body: PaymentWebhook,
    request: Request,
    db: Session = Depends(get_db),
    payment_client: PaymentGatewayClient = Depends(get_payment_client),
):
    """
    Gateway notification.

    The notification only names the payment; its status is always re-read
    from the gateway. Unknown payments are acknowledged and ignored.
    """
    request_id = get_request_id(request)
    gateway_payment_id = body.data.get("id")
    if body.type != "payment" or gateway_payment_id is None:
        return {"received": True}

    try:
        payment = PaymentRepository(db).get_by_gateway_id(str(gateway_payment_id))
        if payment is None:
            logger.info("Webhook for unknown payment", extra={"request_id": request_id, "payment_id": gateway_payment_id})
            return {"received": True}

        status = await payment_client.get_payment_status(str(gateway_payment_id))
        settle_payment(db, payment, status, utcnow())
        db.commit()
        return {"received": True, "status": payment.payment_status}

    except DomainException as e:
        raise to_http_error(e, db, request_id)
