"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

INCOME = "income"
EXPENSE = "expense"
DEBIT = "debit"
CREDIT = "credit"

EXPENSE_CATEGORIES = [
    "Alimentação",
    "Transporte",
    "Lazer",
    "Compras",
    "Saúde",
    "Educação",
    "Contas",
    "Outros",
]

INCOME_CATEGORIES = ["Salário", "Freelance", "Investimentos", "Presente", "Outros"]


@dataclass
class Transaction:
    """Signed money movement owned by a user"""

    amount_cents: int
    type: str  # "income" or "expense"
    category: str
    description: str
    date: date
    matricula: int
    payment_method: Optional[str] = DEBIT  # "debit" or "credit"
    id: Optional[str] = None


@dataclass
class BalanceSummary:
    """Result of folding a transaction list over an initial balance"""

    balance_cents: int
    debit_balance_cents: int
    total_income_cents: int
    total_expense_cents: int
    credit_expense_cents: int


@dataclass
class ScheduledPayment:
    """Bill reminder due on a day of the month"""

    name: str
    amount_cents: int
    due_day: int
    category: str
    is_recurring: bool = True
    due_date: Optional[date] = None  # one-off payments only


@dataclass
class MonthlySummary:
    """Salary and bills still pending in the current month"""

    total_payments_cents: int
    pending_payments_cents: int
    pending_salary_cents: int
    projected_balance_cents: int


@dataclass
class Installment:
    """Single payment in a credit card installment plan"""

    number: int
    due_date: date
    amount_cents: int


@dataclass
class TransactionProposal:
    """Outcome of evaluating a transaction before the user confirms it"""

    amount_cents: int
    type: str
    category: str
    description: str
    accepted: bool
    payment_method: str
    advice: str
    debit_balance_cents: int
    credit_available_cents: int
    min_installments: Optional[int] = None


@dataclass
class Payer:
    """Identity data sent to the payment gateway"""

    full_name: str
    email: str
    cpf: str

    @property
    def first_name(self) -> str:
        return self.full_name.split(" ")[0]

    @property
    def last_name(self) -> str:
        return " ".join(self.full_name.split(" ")[1:]) or "Cliente"


@dataclass
class PixCharge:
    """PIX payment request created at the gateway"""

    payment_id: str
    status: str
    status_detail: Optional[str]
    qr_code: Optional[str]
    qr_code_base64: Optional[str]
    ticket_url: Optional[str]
    expires_at: Optional[str]


@dataclass
class AffiliateStats:
    """Referral program summary for an affiliate"""

    total_invites: int
    pending_invites: int
    approved_invites: int
    rejected_invites: int
    total_commission_cents: int
    available_balance_cents: int


@dataclass
class FinancialContext:
    """Snapshot of a user's finances handed to the assistant"""

    balance_cents: int
    debit_balance_cents: int
    total_income_cents: int
    total_expense_cents: int
    credit_limit_cents: int
    credit_used_cents: int
    credit_due_day: int
    days_until_due: int
    salary_amount_cents: int
    salary_day: int
    monthly_payments_cents: int
    projected_balance_cents: int
    today_expenses_cents: int
    today_income_cents: int
    scheduled_payments: List[ScheduledPayment] = field(default_factory=list)
    recent_transactions: List[Transaction] = field(default_factory=list)


@dataclass
class AssistantReply:
    """Message from the AI gateway, optionally carrying a tool call"""

    message: str
    function_name: Optional[str] = None
    function_args: Optional[dict] = None
