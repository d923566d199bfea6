"""Data access layer for INOVA entities"""

import logging
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inova_gateway.domain import affiliates, subscription
from inova_gateway.domain.exceptions import ConflictError, NotFoundError
from inova_gateway.domain.matricula import generate_matricula
from inova_gateway.domain.models import CREDIT, EXPENSE, Installment, ScheduledPayment, Transaction
from inova_gateway.domain.pricing import Coupon
from inova_gateway.domain.support import CLOSED, OPEN, SENDER_USER, status_after_reply
from inova_gateway.infrastructure.database.models import (
    AffiliateCommission,
    AffiliateInvite,
    AffiliateLink,
    AffiliateWithdrawal,
    ClientSession,
    CreditInstallment,
    DiscountCoupon,
    Goal,
    PixPayment,
    ScheduledPaymentRecord,
    SupportMessage,
    SupportTicket,
    SystemSetting,
    TransactionRecord,
    UserProfile,
)

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user profiles"""

    def __init__(self, db: Session):
        self.db = db

    def matricula_exists(self, matricula: int) -> bool:
        return self.db.query(UserProfile.id).filter(UserProfile.matricula == matricula).first() is not None

    def get(self, matricula: int) -> Optional[UserProfile]:
        return self.db.query(UserProfile).filter(UserProfile.matricula == matricula).first()

    def get_or_404(self, matricula: int) -> UserProfile:
        user = self.get(matricula)
        if user is None:
            raise NotFoundError(f"Matrícula {matricula} não encontrada")
        return user

    def get_by_cpf(self, cpf: str) -> Optional[UserProfile]:
        return self.db.query(UserProfile).filter(UserProfile.cpf == cpf).first()

    def ensure_unique_contact(self, phone: str, email: Optional[str], cpf: str, exclude: Optional[int] = None) -> None:
        """
        Raises:
            ConflictError: phone, email or CPF already registered
        """
        clauses = [UserProfile.phone == phone, UserProfile.cpf == cpf]
        if email:
            clauses.append(UserProfile.email == email)
        query = self.db.query(UserProfile).filter(or_(*clauses))
        if exclude is not None:
            query = query.filter(UserProfile.matricula != exclude)
        existing = query.first()
        if existing is None:
            return
        if existing.cpf == cpf:
            raise ConflictError("CPF já cadastrado")
        if existing.phone == phone:
            raise ConflictError("Telefone já cadastrado")
        raise ConflictError("E-mail já cadastrado")

    def create(self, **fields: Any) -> UserProfile:
        """Create a profile under a freshly generated matricula"""
        matricula = generate_matricula(self.matricula_exists)
        user = UserProfile(matricula=matricula, **fields)
        self.db.add(user)
        self.db.flush()
        return user

    def update(self, user: UserProfile, updates: Dict[str, Any]) -> UserProfile:
        for key, value in updates.items():
            setattr(user, key, value)
        self.db.flush()
        return user

    def delete_everything(self, matricula: int) -> Dict[str, int]:
        """
        Delete a user and every row they own, table by table.

        Returns the number of rows removed per table. Commissions the user
        generated for an inviter stay with the inviter, unlinked from the
        deleted account (counted under affiliate_commission_unlinked).
        """
        user = self.get_or_404(matricula)
        removed: Dict[str, int] = {}

        records = self.db.query(TransactionRecord).filter(TransactionRecord.matricula == matricula).all()
        for record in records:
            self.db.delete(record)  # cascades installments
        removed["transaction"] = len(records)

        tickets = self.db.query(SupportTicket).filter(SupportTicket.matricula == matricula).all()
        for ticket in tickets:
            self.db.delete(ticket)  # cascades messages
        removed["support_ticket"] = len(tickets)

        owned = [
            (Goal, Goal.matricula),
            (ScheduledPaymentRecord, ScheduledPaymentRecord.matricula),
            (AffiliateCommission, AffiliateCommission.affiliate_matricula),
            (AffiliateWithdrawal, AffiliateWithdrawal.affiliate_matricula),
            (ClientSession, ClientSession.matricula),
        ]
        for model, column in owned:
            removed[model.__tablename__] = (
                self.db.query(model).filter(column == matricula).delete(synchronize_session=False)
            )

        removed["affiliate_invite"] = (
            self.db.query(AffiliateInvite)
            .filter(or_(AffiliateInvite.inviter_matricula == matricula, AffiliateInvite.invited_matricula == matricula))
            .delete(synchronize_session=False)
        )

        removed["pix_payment"] = (
            self.db.query(PixPayment)
            .filter(or_(PixPayment.matricula == matricula, PixPayment.cpf == user.cpf))
            .delete(synchronize_session=False)
        )

        removed["affiliate_commission_unlinked"] = (
            self.db.query(AffiliateCommission)
            .filter(AffiliateCommission.invited_matricula == matricula)
            .update({AffiliateCommission.invited_matricula: None}, synchronize_session=False)
        )

        self.db.delete(user)
        removed["user_profile"] = 1
        self.db.flush()
        return removed

    def count(self) -> int:
        return self.db.query(func.count(UserProfile.id)).scalar() or 0

    def count_by_subscription(self, status: str) -> int:
        return (
            self.db.query(func.count(UserProfile.id)).filter(UserProfile.subscription_status == status).scalar() or 0
        )


def to_domain_transaction(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=str(record.id),
        amount_cents=record.amount_cents,
        type=record.type,
        payment_method=record.payment_method,
        category=record.category,
        description=record.description,
        date=record.date,
        matricula=record.matricula,
    )


class TransactionRepository:
    """Repository for transactions and card installments"""

    def __init__(self, db: Session):
        self.db = db

    def list_records(self, matricula: int, limit: Optional[int] = None) -> List[TransactionRecord]:
        """Newest first"""
        query = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.matricula == matricula)
            .order_by(TransactionRecord.date.desc(), TransactionRecord.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def list_for_user(self, matricula: int, limit: Optional[int] = None) -> List[Transaction]:
        return [to_domain_transaction(r) for r in self.list_records(matricula, limit)]

    def add(
        self,
        user: UserProfile,
        transaction: Transaction,
        installments: Optional[List[Installment]] = None,
    ) -> TransactionRecord:
        """
        Persist a transaction; card expenses raise the user's credit used.

        When an installment plan is given, the transaction is its first
        installment and the whole plan is stored alongside.
        """
        record = TransactionRecord(
            matricula=user.matricula,
            amount_cents=transaction.amount_cents,
            type=transaction.type,
            payment_method=transaction.payment_method or "debit",
            category=transaction.category,
            description=transaction.description,
            date=transaction.date,
        )
        self.db.add(record)
        self.db.flush()

        for inst in installments or []:
            self.db.add(
                CreditInstallment(
                    transaction_id=record.id,
                    matricula=user.matricula,
                    number=inst.number,
                    total_installments=len(installments),
                    due_date=inst.due_date,
                    amount_cents=inst.amount_cents,
                    status="charged" if inst.number == 1 else "scheduled",
                )
            )

        if transaction.type == EXPENSE and transaction.payment_method == CREDIT:
            user.credit_used_cents = (user.credit_used_cents or 0) + transaction.amount_cents

        self.db.flush()
        return record

    def list_installments(self, matricula: int) -> List[CreditInstallment]:
        return (
            self.db.query(CreditInstallment)
            .filter(CreditInstallment.matricula == matricula)
            .order_by(CreditInstallment.due_date.asc(), CreditInstallment.number.asc())
            .all()
        )


class GoalRepository:
    """Repository for savings goals"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, matricula: int, title: str, target_amount_cents: int, current_amount_cents: int, deadline: date) -> Goal:
        goal = Goal(
            matricula=matricula,
            title=title,
            target_amount_cents=target_amount_cents,
            current_amount_cents=current_amount_cents,
            deadline=deadline,
        )
        self.db.add(goal)
        self.db.flush()
        return goal

    def list_active(self, matricula: int) -> List[Goal]:
        return (
            self.db.query(Goal)
            .filter(Goal.matricula == matricula, Goal.is_active.is_(True))
            .order_by(Goal.created_at.desc())
            .all()
        )

    def get_or_404(self, matricula: int, goal_id: uuid.UUID) -> Goal:
        goal = self.db.query(Goal).filter(Goal.id == goal_id, Goal.matricula == matricula).first()
        if goal is None or not goal.is_active:
            raise NotFoundError("Meta não encontrada")
        return goal

    def update(self, goal: Goal, updates: Dict[str, Any]) -> Goal:
        for key, value in updates.items():
            setattr(goal, key, value)
        self.db.flush()
        return goal

    def deactivate(self, goal: Goal) -> None:
        """Goals are soft-deleted"""
        goal.is_active = False
        self.db.flush()


def to_domain_scheduled_payment(record: ScheduledPaymentRecord) -> ScheduledPayment:
    return ScheduledPayment(
        name=record.name,
        amount_cents=record.amount_cents,
        due_day=record.due_day,
        category=record.category,
        is_recurring=record.is_recurring,
        due_date=record.due_date,
    )


class ScheduledPaymentRepository:
    """Repository for bill reminders"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, matricula: int, **fields: Any) -> ScheduledPaymentRecord:
        record = ScheduledPaymentRecord(matricula=matricula, **fields)
        self.db.add(record)
        self.db.flush()
        return record

    def list_for_user(self, matricula: int) -> List[ScheduledPaymentRecord]:
        return (
            self.db.query(ScheduledPaymentRecord)
            .filter(ScheduledPaymentRecord.matricula == matricula)
            .order_by(ScheduledPaymentRecord.due_day.asc())
            .all()
        )

    def delete(self, matricula: int, payment_id: uuid.UUID) -> None:
        deleted = (
            self.db.query(ScheduledPaymentRecord)
            .filter(ScheduledPaymentRecord.id == payment_id, ScheduledPaymentRecord.matricula == matricula)
            .delete(synchronize_session=False)
        )
        if not deleted:
            raise NotFoundError("Pagamento agendado não encontrado")


class SettingsRepository:
    """Admin-editable prices"""

    def __init__(self, db: Session):
        self.db = db

    def get_int(self, key: str, default: int) -> int:
        setting = self.db.get(SystemSetting, key)
        if setting is None or setting.value is None:
            return default
        try:
            return int(setting.value)
        except ValueError:
            logger.warning(f"Ignoring non-integer setting {key}={setting.value!r}")
            return default

    def set(self, key: str, value: str) -> None:
        setting = self.db.get(SystemSetting, key)
        if setting is None:
            self.db.add(SystemSetting(key=key, value=value))
        else:
            setting.value = value
        self.db.flush()


class CouponRepository:
    """Repository for discount coupons"""

    def __init__(self, db: Session):
        self.db = db

    def get_record(self, code: str) -> Optional[DiscountCoupon]:
        return self.db.query(DiscountCoupon).filter(DiscountCoupon.code == code).first()

    def get(self, code: str) -> Optional[Coupon]:
        record = self.get_record(code)
        if record is None:
            return None
        return Coupon(
            code=record.code,
            discount_type=record.discount_type,
            discount_value=record.discount_value,
            is_active=record.is_active,
            expires_at=record.expires_at,
            usage_limit=record.usage_limit,
            times_used=record.times_used,
        )

    def create(self, **fields: Any) -> DiscountCoupon:
        if self.get_record(fields["code"]) is not None:
            raise ConflictError("Cupom já existe")
        record = DiscountCoupon(**fields)
        self.db.add(record)
        self.db.flush()
        return record

    def increment_usage(self, code: str) -> None:
        record = self.get_record(code)
        if record is not None:
            record.times_used += 1
            self.db.flush()


class AffiliateRepository:
    """Repository for invites, commissions and withdrawals"""

    def __init__(self, db: Session):
        self.db = db

    def find_approved_affiliate(self, code: int) -> Optional[UserProfile]:
        """A referral code is the matricula of an approved user"""
        return (
            self.db.query(UserProfile)
            .filter(UserProfile.matricula == code, UserProfile.user_status == subscription.USER_APPROVED)
            .first()
        )

    def create_invite(self, inviter: int, invited: int, status: str = affiliates.INVITE_PENDING) -> AffiliateInvite:
        invite = AffiliateInvite(inviter_matricula=inviter, invited_matricula=invited, status=status)
        self.db.add(invite)
        self.db.flush()
        return invite

    def invites(self, matricula: int) -> List[AffiliateInvite]:
        return (
            self.db.query(AffiliateInvite)
            .filter(AffiliateInvite.inviter_matricula == matricula)
            .order_by(AffiliateInvite.created_at.desc())
            .all()
        )

    def commissions(self, matricula: int) -> List[AffiliateCommission]:
        return self.db.query(AffiliateCommission).filter(AffiliateCommission.affiliate_matricula == matricula).all()

    def withdrawals(self, matricula: int) -> List[AffiliateWithdrawal]:
        return (
            self.db.query(AffiliateWithdrawal)
            .filter(AffiliateWithdrawal.affiliate_matricula == matricula)
            .order_by(AffiliateWithdrawal.created_at.desc())
            .all()
        )

    def stats(self, matricula: int):
        return affiliates.affiliate_stats(
            [i.status for i in self.invites(matricula)],
            [(c.amount_cents, c.status) for c in self.commissions(matricula)],
            [(w.amount_cents, w.status) for w in self.withdrawals(matricula)],
        )

    def credit_commission(self, inviter: UserProfile, invited_matricula: int, amount_cents: int, now: datetime) -> AffiliateCommission:
        """Approve the invite and release the commission to the inviter's balance"""
        invite = (
            self.db.query(AffiliateInvite)
            .filter(
                AffiliateInvite.inviter_matricula == inviter.matricula,
                AffiliateInvite.invited_matricula == invited_matricula,
            )
            .first()
        )
        if invite is None:
            invite = self.create_invite(inviter.matricula, invited_matricula)
        invite.status = affiliates.INVITE_APPROVED

        commission = AffiliateCommission(
            affiliate_matricula=inviter.matricula,
            invited_matricula=invited_matricula,
            amount_cents=amount_cents,
            status=affiliates.COMMISSION_RELEASED,
            released_at=now,
        )
        self.db.add(commission)
        inviter.affiliate_balance_cents = (inviter.affiliate_balance_cents or 0) + amount_cents
        self.db.flush()
        return commission

    def request_withdrawal(self, affiliate: UserProfile, amount_cents: int, pix_key: str) -> AffiliateWithdrawal:
        withdrawal = AffiliateWithdrawal(
            affiliate_matricula=affiliate.matricula,
            amount_cents=amount_cents,
            pix_key=pix_key,
        )
        self.db.add(withdrawal)
        affiliate.affiliate_balance_cents = max(0, (affiliate.affiliate_balance_cents or 0) - amount_cents)
        self.db.flush()
        return withdrawal

    def process_withdrawal(self, withdrawal_id: uuid.UUID, status: str, now: datetime) -> AffiliateWithdrawal:
        withdrawal = self.db.get(AffiliateWithdrawal, withdrawal_id)
        if withdrawal is None:
            raise NotFoundError("Saque não encontrado")
        if withdrawal.status in (affiliates.WITHDRAWAL_PAID, affiliates.WITHDRAWAL_CANCELLED):
            raise ConflictError(f"Saque já {withdrawal.status}")

        if status == affiliates.WITHDRAWAL_CANCELLED:
            owner = self.db.query(UserProfile).filter(UserProfile.matricula == withdrawal.affiliate_matricula).first()
            if owner is not None:
                owner.affiliate_balance_cents = (owner.affiliate_balance_cents or 0) + withdrawal.amount_cents

        withdrawal.status = status
        withdrawal.processed_at = now
        self.db.flush()
        return withdrawal

    def total_released(self) -> int:
        return (
            self.db.query(func.coalesce(func.sum(AffiliateCommission.amount_cents), 0))
            .filter(AffiliateCommission.status == affiliates.COMMISSION_RELEASED)
            .scalar()
            or 0
        )

    def count_pending_withdrawals(self) -> int:
        return (
            self.db.query(func.count(AffiliateWithdrawal.id))
            .filter(AffiliateWithdrawal.status == affiliates.WITHDRAWAL_PENDING)
            .scalar()
            or 0
        )


class AffiliateLinkRepository:
    """Repository for admin affiliate invite links"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str) -> Optional[AffiliateLink]:
        return self.db.query(AffiliateLink).filter(AffiliateLink.code == code).first()

    def code_exists(self, code: str) -> bool:
        return self.get_by_code(code) is not None

    def create(self, name: str, max_attempts: int = 10) -> AffiliateLink:
        """Issue a link under a fresh AFI- code"""
        for _ in range(max_attempts):
            code = affiliates.generate_link_code()
            if not self.code_exists(code):
                link = AffiliateLink(code=code, name=name, is_active=True, is_blocked=False)
                self.db.add(link)
                self.db.flush()
                return link
        raise ConflictError("Não foi possível gerar código de convite único")

    def list_all(self) -> List[AffiliateLink]:
        return self.db.query(AffiliateLink).order_by(AffiliateLink.created_at.desc()).all()

    def get_or_404(self, code: str) -> AffiliateLink:
        link = self.get_by_code(code)
        if link is None:
            raise NotFoundError("Convite não encontrado")
        return link

    def set_blocked(self, link: AffiliateLink, blocked: bool) -> AffiliateLink:
        link.is_blocked = blocked
        self.db.flush()
        return link

    def check_usable(self, code: str) -> AffiliateLink:
        """
        Raises:
            ValidationError: malformed, unknown, inactive or blocked code
        """
        link = self.get_by_code(affiliates.normalize_link_code(code))
        if link is None:
            affiliates.check_affiliate_link(found=False)
        affiliates.check_affiliate_link(True, link.is_active, link.is_blocked)
        return link


class PaymentRepository:
    """Repository for PIX subscription payments"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields: Any) -> PixPayment:
        payment = PixPayment(**fields)
        self.db.add(payment)
        self.db.flush()
        return payment

    def get_by_temp_id(self, user_temp_id: str) -> Optional[PixPayment]:
        return self.db.query(PixPayment).filter(PixPayment.user_temp_id == user_temp_id).first()

    def get_by_gateway_id(self, gateway_payment_id: str) -> Optional[PixPayment]:
        return self.db.query(PixPayment).filter(PixPayment.gateway_payment_id == gateway_payment_id).first()

    def lock(self, payment: PixPayment) -> PixPayment:
        """Take the row lock and reload the payment as committed by others"""
        return (
            self.db.query(PixPayment)
            .filter(PixPayment.id == payment.id)
            .with_for_update()
            .populate_existing()
            .one()
        )

    def revenue(self) -> int:
        return (
            self.db.query(func.coalesce(func.sum(PixPayment.amount_cents), 0))
            .filter(PixPayment.payment_status == subscription.PAYMENT_APPROVED)
            .scalar()
            or 0
        )

    def activate(
        self,
        payment: PixPayment,
        now: datetime,
        subscription_days: int,
        commission_percent: int,
    ) -> UserProfile:
        """
        Turn an approved payment into an active subscription.

        Idempotent: a payment already activated returns its user. A CPF that
        already has an account renews that account instead of creating one.
        """
        users = UserRepository(self.db)

        if payment.payment_status == subscription.PAYMENT_APPROVED and payment.matricula is not None:
            return users.get_or_404(payment.matricula)

        start, end = subscription.paid_period(now, subscription_days)
        user = users.get_by_cpf(payment.cpf)

        if user is None:
            try:
                user = users.create(
                    full_name=payment.full_name,
                    email=payment.email,
                    phone=payment.phone,
                    cpf=payment.cpf,
                    has_credit_card=payment.has_credit_card,
                    credit_limit_cents=payment.credit_limit_cents,
                    credit_due_day=payment.credit_due_day,
                    salary_amount_cents=payment.salary_amount_cents,
                    salary_day=payment.salary_day,
                    user_status=subscription.USER_APPROVED,
                    subscription_status=subscription.SUBSCRIPTION_ACTIVE,
                    subscription_start_date=start,
                    subscription_end_date=end,
                    pix_key=payment.pix_key,
                    pix_key_type=payment.pix_key_type,
                )
            except IntegrityError as e:
                raise ConflictError("Pagamento já ativado por outra requisição") from e
        else:
            users.update(
                user,
                {
                    "user_status": subscription.USER_APPROVED,
                    "subscription_status": subscription.SUBSCRIPTION_ACTIVE,
                    "subscription_start_date": start,
                    "subscription_end_date": end,
                },
            )

        if payment.activate_affiliate_mode:
            user.is_affiliate = True
            user.affiliate_code = str(user.matricula)

        if payment.affiliate_code is not None and payment.affiliate_code != user.matricula:
            inviter = AffiliateRepository(self.db).find_approved_affiliate(payment.affiliate_code)
            commission = affiliates.calculate_commission(payment.amount_cents, commission_percent)
            if inviter is not None and commission > 0:
                AffiliateRepository(self.db).credit_commission(inviter, user.matricula, commission, now)

        payment.payment_status = subscription.PAYMENT_APPROVED
        payment.matricula = user.matricula
        payment.approved_at = now
        self.db.flush()
        return user


class SupportRepository:
    """Repository for support tickets"""

    def __init__(self, db: Session):
        self.db = db

    def open_ticket(self, matricula: int, subject: str, message: str) -> SupportTicket:
        ticket = SupportTicket(matricula=matricula, subject=subject, status=OPEN, last_message_by=SENDER_USER)
        self.db.add(ticket)
        self.db.flush()
        self.db.add(SupportMessage(ticket_id=ticket.id, sender_type=SENDER_USER, message=message))
        self.db.flush()
        return ticket

    def list_for_user(self, matricula: int) -> List[SupportTicket]:
        return (
            self.db.query(SupportTicket)
            .filter(SupportTicket.matricula == matricula)
            .order_by(SupportTicket.updated_at.desc())
            .all()
        )

    def list_open(self) -> List[SupportTicket]:
        return (
            self.db.query(SupportTicket)
            .filter(SupportTicket.status != CLOSED)
            .order_by(SupportTicket.updated_at.desc())
            .all()
        )

    def get_or_404(self, ticket_id: uuid.UUID) -> SupportTicket:
        ticket = self.db.get(SupportTicket, ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket não encontrado")
        return ticket

    def reply(self, ticket: SupportTicket, sender: str, message: str, now: datetime) -> SupportMessage:
        """Append a message and move the ticket along its status flow"""
        ticket.status = status_after_reply(ticket.status, sender)
        ticket.last_message_by = sender
        ticket.updated_at = now
        reply = SupportMessage(ticket_id=ticket.id, sender_type=sender, message=message)
        self.db.add(reply)
        self.db.flush()
        return reply

    def close(self, ticket: SupportTicket, now: datetime) -> SupportTicket:
        ticket.status = CLOSED
        ticket.updated_at = now
        self.db.flush()
        return ticket


class ClientSessionRepository:
    """Repository for per-user client flags"""

    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self, matricula: int) -> ClientSession:
        session = self.db.get(ClientSession, matricula)
        if session is None:
            session = ClientSession(matricula=matricula, splash_shown=False, voice_enabled=True)
            self.db.add(session)
            self.db.flush()
        return session

    def update(self, matricula: int, updates: Dict[str, Any]) -> ClientSession:
        session = self.get_or_create(matricula)
        for key, value in updates.items():
            setattr(session, key, value)
        self.db.flush()
        return session
