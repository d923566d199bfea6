"""Signup data validation (CPF, phone, email)"""

import re

from inova_gateway.domain.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def normalize_cpf(cpf: str) -> str:
    """Strip formatting and require 11 digits"""
    cleaned = digits_only(cpf)
    if len(cleaned) != 11:
        raise ValidationError("CPF válido é obrigatório")
    return cleaned


def normalize_phone(phone: str) -> str:
    cleaned = digits_only(phone)
    if len(cleaned) < 10:
        raise ValidationError("Telefone válido é obrigatório")
    return cleaned


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match((email or "").strip()))


def normalize_email(email: str | None) -> str | None:
    """Empty email is allowed; a present one must be well formed"""
    if not email or not email.strip():
        return None
    email = email.strip().lower()
    if not is_valid_email(email):
        raise ValidationError("E-mail inválido")
    return email


def normalize_full_name(full_name: str) -> str:
    name = (full_name or "").strip()
    if not name:
        raise ValidationError("Nome completo é obrigatório")
    return name


def capitalize_category(name: str) -> str:
    """Custom categories are stored as 'Farmácia', whatever the user typed"""
    name = name.strip()
    return name[:1].upper() + name[1:].lower()
