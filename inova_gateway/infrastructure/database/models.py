"""SQLAlchemy ORM models"""

import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class UserProfile(Base):
    """Account holder, identified by a 6-digit matricula"""

    __tablename__ = "user_profile"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    matricula = Column(Integer, nullable=False, unique=True, index=True)
    full_name = Column(Text, nullable=False)
    email = Column(Text, nullable=True, unique=True)
    phone = Column(Text, nullable=False, unique=True)
    cpf = Column(Text, nullable=False, unique=True)

    initial_balance_cents = Column(BigInteger, nullable=False, default=0)
    has_credit_card = Column(Boolean, nullable=False, default=False)
    credit_limit_cents = Column(BigInteger, nullable=False, default=0)
    credit_used_cents = Column(BigInteger, nullable=False, default=0)
    credit_due_day = Column(Integer, nullable=False, default=5)
    salary_amount_cents = Column(BigInteger, nullable=False, default=0)
    salary_day = Column(Integer, nullable=False, default=5)

    user_status = Column(Text, nullable=False, default="approved")
    subscription_status = Column(Text, nullable=False, default="trial")
    subscription_start_date = Column(DateTime(timezone=True), nullable=True)
    subscription_end_date = Column(DateTime(timezone=True), nullable=True)

    is_affiliate = Column(Boolean, nullable=False, default=False)
    affiliate_code = Column(Text, nullable=True)
    affiliate_balance_cents = Column(BigInteger, nullable=False, default=0)
    pix_key = Column(Text, nullable=True)
    pix_key_type = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class TransactionRecord(Base):
    """Income or expense owned by a user"""

    __tablename__ = "transaction"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    matricula = Column(Integer, nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    type = Column(Text, nullable=False)
    payment_method = Column(Text, nullable=False, default="debit")
    category = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    installments = relationship("CreditInstallment", back_populates="transaction", cascade="all, delete-orphan")


class CreditInstallment(Base):
    """Scheduled installment of a split card purchase"""

    __tablename__ = "credit_installment"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    transaction_id = Column(Uuid, ForeignKey("transaction.id", ondelete="CASCADE"), nullable=False)
    matricula = Column(Integer, nullable=False, index=True)
    number = Column(Integer, nullable=False)
    total_installments = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    status = Column(Text, nullable=False, default="scheduled")

    transaction = relationship("TransactionRecord", back_populates="installments")


class Goal(Base):
    """Savings goal"""

    __tablename__ = "goal"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    matricula = Column(Integer, nullable=False, index=True)
    title = Column(Text, nullable=False)
    target_amount_cents = Column(BigInteger, nullable=False)
    current_amount_cents = Column(BigInteger, nullable=False, default=0)
    deadline = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ScheduledPaymentRecord(Base):
    """Bill reminder"""

    __tablename__ = "scheduled_payment"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    matricula = Column(Integer, nullable=False, index=True)
    name = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    due_day = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=True)
    category = Column(Text, nullable=False, default="Contas")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PixPayment(Base):
    """Subscription charge and the signup data it will activate"""

    __tablename__ = "pix_payment"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_temp_id = Column(Text, nullable=False, unique=True, index=True)
    gateway_payment_id = Column(Text, nullable=True, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    payment_status = Column(Text, nullable=False, default="pending")
    coupon_code = Column(Text, nullable=True)

    full_name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=False)
    cpf = Column(Text, nullable=False)
    has_credit_card = Column(Boolean, nullable=False, default=False)
    credit_limit_cents = Column(BigInteger, nullable=False, default=0)
    credit_due_day = Column(Integer, nullable=False, default=5)
    salary_amount_cents = Column(BigInteger, nullable=False, default=0)
    salary_day = Column(Integer, nullable=False, default=5)
    affiliate_code = Column(Integer, nullable=True)
    activate_affiliate_mode = Column(Boolean, nullable=False, default=False)
    pix_key = Column(Text, nullable=True)
    pix_key_type = Column(Text, nullable=True)

    matricula = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    approved_at = Column(DateTime(timezone=True), nullable=True)


class DiscountCoupon(Base):
    """Subscription discount coupon"""

    __tablename__ = "discount_coupon"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(Text, nullable=False, unique=True)
    discount_type = Column(Text, nullable=False)
    discount_value = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    usage_limit = Column(Integer, nullable=True)
    times_used = Column(Integer, nullable=False, default=0)


class AffiliateLink(Base):
    """Admin-issued invite link that opens a free affiliate account"""

    __tablename__ = "affiliate_link"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(Text, nullable=False, unique=True, index=True)
    name = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    is_blocked = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AffiliateInvite(Base):
    """Signup attributed to an affiliate"""

    __tablename__ = "affiliate_invite"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    inviter_matricula = Column(Integer, nullable=False, index=True)
    invited_matricula = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AffiliateCommission(Base):
    """Commission earned on an invitee's payment"""

    __tablename__ = "affiliate_commission"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    affiliate_matricula = Column(Integer, nullable=False, index=True)
    invited_matricula = Column(Integer, nullable=True)
    amount_cents = Column(BigInteger, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    released_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AffiliateWithdrawal(Base):
    """Payout request of commission balance"""

    __tablename__ = "affiliate_withdrawal"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    affiliate_matricula = Column(Integer, nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    pix_key = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    processed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SupportTicket(Base):
    """Help desk conversation"""

    __tablename__ = "support_ticket"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    matricula = Column(Integer, nullable=False, index=True)
    subject = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="aberto")
    last_message_by = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    messages = relationship(
        "SupportMessage",
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="SupportMessage.created_at",
    )


class SupportMessage(Base):
    """Single message in a support ticket"""

    __tablename__ = "support_message"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    ticket_id = Column(Uuid, ForeignKey("support_ticket.id", ondelete="CASCADE"), nullable=False)
    sender_type = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    ticket = relationship("SupportTicket", back_populates="messages")


class SystemSetting(Base):
    """Admin-editable key/value setting (prices)"""

    __tablename__ = "system_setting"

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=True)


class ClientSession(Base):
    """Per-user client preferences and the pending referral code"""

    __tablename__ = "client_session"

    matricula = Column(Integer, primary_key=True)
    splash_shown = Column(Boolean, nullable=False, default=False)
    voice_enabled = Column(Boolean, nullable=False, default=True)
    affiliate_ref = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
