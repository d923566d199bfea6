"""Pydantic schemas for API request/response validation"""

import datetime as dt
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TransactionType = Literal["income", "expense"]
PaymentMethod = Literal["debit", "credit"]


# Profiles

class SignupRequest(BaseModel):
    """Signup data shared by trial and paid registration"""

    full_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    cpf: str = Field(..., min_length=1)
    email: Optional[str] = None
    has_credit_card: bool = False
    credit_limit_cents: int = Field(0, ge=0)
    credit_due_day: int = Field(5, ge=1, le=31)
    salary_amount_cents: int = Field(0, ge=0)
    salary_day: int = Field(5, ge=1, le=31)
    initial_balance_cents: int = 0
    affiliate_code: Optional[int] = None
    admin_affiliate_link_code: Optional[str] = None
    pix_key: Optional[str] = None
    pix_key_type: Optional[Literal["cpf", "email", "phone", "random"]] = None


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    matricula: int
    full_name: str
    email: Optional[str]
    phone: str
    initial_balance_cents: int
    has_credit_card: bool
    credit_limit_cents: int
    credit_used_cents: int
    credit_due_day: int
    salary_amount_cents: int
    salary_day: int
    user_status: str
    subscription_status: str
    subscription_start_date: Optional[datetime]
    subscription_end_date: Optional[datetime]
    is_affiliate: bool
    affiliate_code: Optional[str]
    affiliate_balance_cents: int


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted fields are left untouched"""

    full_name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    initial_balance_cents: Optional[int] = None
    has_credit_card: Optional[bool] = None
    credit_limit_cents: Optional[int] = Field(None, ge=0)
    credit_due_day: Optional[int] = Field(None, ge=1, le=31)
    salary_amount_cents: Optional[int] = Field(None, ge=0)
    salary_day: Optional[int] = Field(None, ge=1, le=31)
    pix_key: Optional[str] = None


class BalanceResponse(BaseModel):
    matricula: int
    balance_cents: int
    debit_balance_cents: int
    total_income_cents: int
    total_expense_cents: int
    credit_limit_cents: int
    credit_used_cents: int
    credit_available_cents: int
    days_until_due: int
    projected_balance_cents: int


class SubscriptionStatusResponse(BaseModel):
    matricula: int
    status: str
    days_remaining: int
    subscription_end_date: Optional[datetime]


class ClientSessionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    splash_shown: bool = False
    voice_enabled: bool = True
    affiliate_ref: Optional[str] = None


class ClientSessionUpdate(BaseModel):
    splash_shown: Optional[bool] = None
    voice_enabled: Optional[bool] = None
    affiliate_ref: Optional[str] = None


# Transactions

class TransactionCreate(BaseModel):
    """Request body for recording a transaction directly"""

    amount_cents: int = Field(..., gt=0)
    type: TransactionType
    payment_method: PaymentMethod = "debit"
    installments: int = Field(1, ge=1, le=12)
    category: str = Field(..., min_length=1)
    description: str = ""
    date: Optional[dt.date] = None


class TransactionSchema(BaseModel):
    id: str
    amount_cents: int
    type: str
    payment_method: str
    category: str
    description: str
    date: dt.date


class TransactionListResponse(BaseModel):
    matricula: int
    transactions: List[TransactionSchema]


class ProposalRequest(BaseModel):
    amount_cents: int = Field(..., gt=0)
    type: TransactionType
    category: str = Field(..., min_length=1)
    description: str = ""


class ProposalResponse(BaseModel):
    accepted: bool
    amount_cents: int
    type: str
    category: str
    description: str
    payment_method: str
    advice: str
    debit_balance_cents: int
    credit_available_cents: int
    min_installments: Optional[int] = None


class InstallmentSchema(BaseModel):
    number: int
    due_date: date
    amount_cents: int
    status: str = "scheduled"


class ConfirmResponse(BaseModel):
    transaction: TransactionSchema
    charged_cents: int
    installments: List[InstallmentSchema]
    debit_balance_cents: int
    credit_available_cents: int


# Goals

class GoalCreate(BaseModel):
    title: str = Field(..., min_length=1)
    target_amount_cents: int = Field(..., gt=0)
    current_amount_cents: int = Field(0, ge=0)
    deadline: date


class GoalUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    target_amount_cents: Optional[int] = Field(None, gt=0)
    current_amount_cents: Optional[int] = Field(None, ge=0)
    deadline: Optional[date] = None


class GoalContribution(BaseModel):
    amount_cents: int = Field(..., gt=0)


class GoalSchema(BaseModel):
    id: str
    title: str
    target_amount_cents: int
    current_amount_cents: int
    deadline: date
    progress_percent: float
    days_remaining: int
    completed: bool


# Scheduled payments

class ScheduledPaymentCreate(BaseModel):
    name: str = Field(..., min_length=1)
    amount_cents: int = Field(..., gt=0)
    due_day: int = Field(..., ge=1, le=31)
    is_recurring: bool = True
    due_date: Optional[date] = None
    category: str = "Contas"


class ScheduledPaymentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    amount_cents: int
    due_day: int
    is_recurring: bool
    due_date: Optional[date]
    category: str


class MonthlySummaryResponse(BaseModel):
    total_payments_cents: int
    pending_payments_cents: int
    pending_salary_cents: int
    projected_balance_cents: int
    payments: List[ScheduledPaymentSchema]


# Subscriptions

class CouponQuoteRequest(BaseModel):
    code: str = Field(..., min_length=1)
    affiliate_code: Optional[int] = None


class QuoteResponse(BaseModel):
    base_price_cents: int
    discount_cents: int
    amount_cents: int
    coupon_code: Optional[str]
    is_affiliate_price: bool


class PixSubscriptionRequest(SignupRequest):
    coupon_code: Optional[str] = None


class PixDataSchema(BaseModel):
    qr_code: Optional[str]
    qr_code_base64: Optional[str]
    ticket_url: Optional[str]
    expiration_date: Optional[str]


class PixSubscriptionResponse(BaseModel):
    payment_id: str
    status: str
    status_detail: Optional[str]
    amount_cents: int
    user_temp_id: str
    is_affiliate: bool
    pix: PixDataSchema


class PaymentStatusResponse(BaseModel):
    user_temp_id: str
    status: str
    matricula: Optional[int] = None


class PaymentWebhook(BaseModel):
    """Gateway notification: {"type": "payment", "data": {"id": "..."}}"""

    type: Optional[str] = None
    action: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class TrialSignupResponse(BaseModel):
    matricula: int
    subscription_status: str
    subscription_end_date: Optional[datetime]
    is_affiliate: bool


# Affiliates

class AffiliateStatsResponse(BaseModel):
    matricula: int
    affiliate_code: Optional[str]
    total_invites: int
    pending_invites: int
    approved_invites: int
    rejected_invites: int
    total_commission_cents: int
    available_balance_cents: int


class WithdrawalRequest(BaseModel):
    amount_cents: int = Field(..., gt=0)
    pix_key: Optional[str] = None


class WithdrawalSchema(BaseModel):
    id: str
    affiliate_matricula: int
    amount_cents: int
    pix_key: str
    status: str


class WithdrawalAction(BaseModel):
    action: Literal["approve", "pay", "cancel"]


# Support

class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class MessageCreate(BaseModel):
    message: str = Field(..., min_length=1)


class MessageSchema(BaseModel):
    id: str
    sender_type: str
    message: str
    created_at: datetime


class TicketSchema(BaseModel):
    id: str
    matricula: int
    subject: str
    status: str
    last_message_by: Optional[str]
    messages: List[MessageSchema] = []


# Assistant

class ChatRequest(BaseModel):
    matricula: int
    message: str = Field(..., min_length=1)


class BalanceSnapshot(BaseModel):
    debit_cents: int
    credit_cents: int


class ChatResponse(BaseModel):
    message: str
    proposal: Optional[ProposalResponse] = None
    is_balance_query: bool = False
    balance: Optional[BalanceSnapshot] = None


class SpeechRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


# Admin

class CouponCreate(BaseModel):
    code: str = Field(..., min_length=1)
    discount_type: Literal["percentage", "fixed"]
    discount_value: int = Field(..., gt=0)
    expires_at: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, gt=0)


class PriceSettings(BaseModel):
    subscription_price_cents: Optional[int] = Field(None, gt=0)
    affiliate_price_cents: Optional[int] = Field(None, gt=0)


class DashboardResponse(BaseModel):
    total_users: int
    active_subscriptions: int
    trial_subscriptions: int
    revenue_cents: int
    commissions_released_cents: int
    pending_withdrawals: int
    open_tickets: int


class AffiliateLinkCreate(BaseModel):
    name: str = Field(..., min_length=1)


class AffiliateLinkSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    name: str
    is_active: bool
    is_blocked: bool
    created_at: Optional[datetime]


class DeleteUserResponse(BaseModel):
    matricula: int
    removed: Dict[str, int]
