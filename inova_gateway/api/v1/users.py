"""User profiles: trial signup, profile, balance, subscription status, client flags"""

import logging
from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from inova_gateway.api.dependencies import get_request_id
from inova_gateway.api.errors import to_http_error
from inova_gateway.api.v1.context import load_finances, load_monthly_summary
from inova_gateway.api.v1.schemas import (
    BalanceResponse,
    ClientSessionSchema,
    ClientSessionUpdate,
    ProfileResponse,
    ProfileUpdate,
    SignupRequest,
    SubscriptionStatusResponse,
    TrialSignupResponse,
)
from inova_gateway.config import settings
from inova_gateway.domain import subscription
from inova_gateway.domain.balance import days_until_due
from inova_gateway.domain.exceptions import DomainException, ValidationError
from inova_gateway.domain.validation import normalize_cpf, normalize_email, normalize_full_name, normalize_phone
from inova_gateway.infrastructure.database.repositories import (
    AffiliateLinkRepository,
    AffiliateRepository,
    ClientSessionRepository,
    UserRepository,
)
from inova_gateway.infrastructure.database.session import get_db
from inova_gateway.utils.date_utils import utcnow

router = APIRouter()


def validate_signup(body: SignupRequest) -> Dict[str, Any]:
    """
    Normalize signup data.

    Raises:
        ValidationError: bad name, phone, CPF or email
    """
    return {
        "full_name": normalize_full_name(body.full_name),
        "phone": normalize_phone(body.phone),
        "cpf": normalize_cpf(body.cpf),
        "email": normalize_email(body.email),
        "has_credit_card": body.has_credit_card,
        "credit_limit_cents": body.credit_limit_cents if body.has_credit_card else 0,
        "credit_due_day": body.credit_due_day,
        "salary_amount_cents": body.salary_amount_cents,
        "salary_day": body.salary_day,
        "pix_key": (body.pix_key or "").strip() or None,
        "pix_key_type": body.pix_key_type,
    }


def check_admin_affiliate_link(db: Session, body: SignupRequest) -> bool:
    """
    True when the signup comes through a usable admin affiliate link.

    Raises:
        ValidationError: unknown, inactive or blocked link, or no PIX key
    """
    if body.admin_affiliate_link_code is None:
        return False
    AffiliateLinkRepository(db).check_usable(body.admin_affiliate_link_code)
    if not (body.pix_key or "").strip():
        raise ValidationError("Chave PIX é obrigatória para afiliados")
    return True


@router.post("/users/trial", response_model=TrialSignupResponse, status_code=201)
def create_trial_user(body: SignupRequest, request: Request, db: Session = Depends(get_db)):
    """
    Register without payment.

    Regular signups get a 24-hour trial. Signups through an admin affiliate
    link get a free, open-ended affiliate account.
    """
    request_id = get_request_id(request)
    try:
        fields = validate_signup(body)
        affiliate_mode = check_admin_affiliate_link(db, body)
        users = UserRepository(db)
        users.ensure_unique_contact(fields["phone"], fields["email"], fields["cpf"])

        now = utcnow()
        if affiliate_mode:
            status, start, end = subscription.SUBSCRIPTION_ACTIVE, now, None
        else:
            status = subscription.SUBSCRIPTION_TRIAL
            start, end = subscription.trial_period(now, settings.trial_hours)

        user = users.create(
            **fields,
            initial_balance_cents=body.initial_balance_cents,
            user_status=subscription.USER_APPROVED,
            subscription_status=status,
            subscription_start_date=start,
            subscription_end_date=end,
            is_affiliate=affiliate_mode,
            affiliate_balance_cents=0,
        )
        if affiliate_mode:
            user.affiliate_code = str(user.matricula)

        if body.affiliate_code is not None:
            affiliates = AffiliateRepository(db)
            if affiliates.find_approved_affiliate(body.affiliate_code) is not None:
                affiliates.create_invite(body.affiliate_code, user.matricula)

        db.commit()
        logging.info(
            "Trial signup completed",
            extra={"request_id": request_id, "matricula": user.matricula, "step": "trial_signup"},
        )

        return TrialSignupResponse(
            matricula=user.matricula,
            subscription_status=user.subscription_status,
            subscription_end_date=user.subscription_end_date,
            is_affiliate=user.is_affiliate,
        )

    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.get("/users/{matricula}", response_model=ProfileResponse)
def get_profile(matricula: int, db: Session = Depends(get_db)):
    try:
        return ProfileResponse.model_validate(UserRepository(db).get_or_404(matricula))
    except DomainException as e:
        raise to_http_error(e)


@router.patch("/users/{matricula}", response_model=ProfileResponse)
def update_profile(matricula: int, body: ProfileUpdate, request: Request, db: Session = Depends(get_db)):
    """Partial update; credit used is never editable here"""
    request_id = get_request_id(request)
    try:
        users = UserRepository(db)
        user = users.get_or_404(matricula)
        updates = body.model_dump(exclude_unset=True)

        if "full_name" in updates:
            updates["full_name"] = normalize_full_name(updates["full_name"])
        if "phone" in updates:
            updates["phone"] = normalize_phone(updates["phone"])
        if "email" in updates:
            updates["email"] = normalize_email(updates["email"])
        if "phone" in updates or "email" in updates:
            users.ensure_unique_contact(
                updates.get("phone", user.phone), updates.get("email", user.email), user.cpf, exclude=matricula
            )

        users.update(user, updates)
        db.commit()
        return ProfileResponse.model_validate(user)

    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.get("/users/{matricula}/balance", response_model=BalanceResponse)
def get_balance(matricula: int, db: Session = Depends(get_db)):
    """Debit balance, card usage and the end-of-month projection"""
    try:
        user = UserRepository(db).get_or_404(matricula)
    except DomainException as e:
        raise to_http_error(e)

    today = date.today()
    finances = load_finances(db, user)
    month = load_monthly_summary(db, user, finances.summary.debit_balance_cents, today)

    return BalanceResponse(
        matricula=matricula,
        balance_cents=finances.summary.balance_cents,
        debit_balance_cents=finances.summary.debit_balance_cents,
        total_income_cents=finances.summary.total_income_cents,
        total_expense_cents=finances.summary.total_expense_cents,
        credit_limit_cents=user.credit_limit_cents,
        credit_used_cents=user.credit_used_cents,
        credit_available_cents=finances.credit_available_cents,
        days_until_due=days_until_due(user.credit_due_day, today),
        projected_balance_cents=month.projected_balance_cents,
    )


@router.get("/users/{matricula}/subscription", response_model=SubscriptionStatusResponse)
def get_subscription_status(matricula: int, db: Session = Depends(get_db)):
    user = UserRepository(db).get(matricula)
    if user is None:
        raise HTTPException(status_code=404, detail="Matrícula não encontrada")

    now = utcnow()
    return SubscriptionStatusResponse(
        matricula=matricula,
        status=subscription.subscription_status(user.user_status, user.subscription_end_date, now),
        days_remaining=subscription.days_remaining(user.subscription_end_date, now),
        subscription_end_date=user.subscription_end_date,
    )


@router.get("/users/{matricula}/session", response_model=ClientSessionSchema)
def get_client_session(matricula: int, db: Session = Depends(get_db)):
    try:
        UserRepository(db).get_or_404(matricula)
        session = ClientSessionRepository(db).get_or_create(matricula)
        db.commit()
        return ClientSessionSchema.model_validate(session)
    except DomainException as e:
        raise to_http_error(e, db)


@router.put("/users/{matricula}/session", response_model=ClientSessionSchema)
def update_client_session(matricula: int, body: ClientSessionUpdate, db: Session = Depends(get_db)):
    try:
        UserRepository(db).get_or_404(matricula)
        session = ClientSessionRepository(db).update(matricula, body.model_dump(exclude_unset=True))
        db.commit()
        return ClientSessionSchema.model_validate(session)
    except DomainException as e:
        raise to_http_error(e, db)
