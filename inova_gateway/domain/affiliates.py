"""Affiliate program: admin invite links, commissions, balances and withdrawals"""

import random
import string
from typing import Iterable

from inova_gateway.domain.exceptions import ValidationError
from inova_gateway.domain.models import AffiliateStats

# Admin invite links: "AFI-" + 8 uppercase letters/digits; legacy links use "INV-"
LINK_PREFIX = "AFI-"
LINK_PREFIXES = ("AFI-", "INV-")
LINK_CODE_LENGTH = 8
LINK_ALPHABET = string.ascii_uppercase + string.digits

INVITE_PENDING = "pending"
INVITE_APPROVED = "approved"
INVITE_REJECTED = "rejected"

COMMISSION_PENDING = "pending"
COMMISSION_RELEASED = "released"

WITHDRAWAL_PENDING = "pending"
WITHDRAWAL_APPROVED = "approved"
WITHDRAWAL_PAID = "paid"
WITHDRAWAL_CANCELLED = "cancelled"

WITHDRAWAL_ACTIONS = {
    "approve": WITHDRAWAL_APPROVED,
    "pay": WITHDRAWAL_PAID,
    "cancel": WITHDRAWAL_CANCELLED,
}


def calculate_commission(amount_paid_cents: int, commission_percent: int) -> int:
    """Commission owed to the inviter on a confirmed subscription payment"""
    if amount_paid_cents <= 0 or commission_percent <= 0:
        return 0
    return amount_paid_cents * commission_percent // 100


def affiliate_stats(
    invite_statuses: Iterable[str],
    commissions: Iterable[tuple[int, str]],
    withdrawals: Iterable[tuple[int, str]],
) -> AffiliateStats:
    """
    Summarize an affiliate's invites and money.

    Available balance is released commissions minus every withdrawal that
    has not been cancelled.
    """
    statuses = list(invite_statuses)
    commission_list = list(commissions)

    total_commission = sum(amount for amount, _ in commission_list)
    released = sum(amount for amount, status in commission_list if status == COMMISSION_RELEASED)
    withdrawn = sum(amount for amount, status in withdrawals if status != WITHDRAWAL_CANCELLED)

    return AffiliateStats(
        total_invites=len(statuses),
        pending_invites=statuses.count(INVITE_PENDING),
        approved_invites=statuses.count(INVITE_APPROVED),
        rejected_invites=statuses.count(INVITE_REJECTED),
        total_commission_cents=total_commission,
        available_balance_cents=max(0, released - withdrawn),
    )


def check_withdrawal(amount_cents: int, available_balance_cents: int, pix_key: str | None) -> None:
    """
    Raises:
        ValidationError: non-positive amount, above balance, or no PIX key
    """
    if amount_cents <= 0:
        raise ValidationError("Valor de saque inválido")
    if amount_cents > available_balance_cents:
        raise ValidationError("Saldo de comissões insuficiente")
    if not pix_key or not pix_key.strip():
        raise ValidationError("Chave PIX é obrigatória para saque")


def withdrawal_status_for(action: str) -> str:
    try:
        return WITHDRAWAL_ACTIONS[action]
    except KeyError:
        raise ValidationError(f"Unknown withdrawal action: {action}") from None


def generate_link_code(rng: random.Random | None = None) -> str:
    rng = rng or random.SystemRandom()
    return LINK_PREFIX + "".join(rng.choice(LINK_ALPHABET) for _ in range(LINK_CODE_LENGTH))


def normalize_link_code(code: str) -> str:
    """
    Raises:
        ValidationError: code without a known link prefix
    """
    normalized = code.strip().upper()
    if not normalized.startswith(LINK_PREFIXES):
        raise ValidationError("Código de convite inválido")
    return normalized


def check_affiliate_link(found: bool, is_active: bool = False, is_blocked: bool = False) -> None:
    """
    Only an existing, active, unblocked link grants affiliate mode.

    Raises:
        ValidationError: unknown, inactive or blocked link
    """
    if not found or not is_active or is_blocked:
        raise ValidationError("Este convite não existe, está inativo ou foi bloqueado.")
