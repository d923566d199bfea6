"""Unit tests for signup data validation"""

import pytest
from inova_gateway.domain.exceptions import ValidationError
from inova_gateway.domain.validation import (
    capitalize_category,
    is_valid_email,
    normalize_cpf,
    normalize_email,
    normalize_full_name,
    normalize_phone,
)


def test_normalize_cpf_strips_formatting():
    assert normalize_cpf("123.456.789-09") == "12345678909"


@pytest.mark.parametrize("cpf", ["", "123.456.789", "123456789012"])
def test_normalize_cpf_rejects_wrong_length(cpf):
    with pytest.raises(ValidationError):
        normalize_cpf(cpf)


def test_normalize_phone():
    assert normalize_phone("(11) 98765-4321") == "11987654321"
    with pytest.raises(ValidationError):
        normalize_phone("98765-432")


@pytest.mark.parametrize("email", ["ana@inova.com", "a.b+c@mail.com.br"])
def test_valid_emails(email):
    assert is_valid_email(email)


@pytest.mark.parametrize("email", ["ana", "ana@inova", "ana @inova.com", "@inova.com"])
def test_invalid_emails(email):
    assert not is_valid_email(email)


def test_normalize_email():
    assert normalize_email("  Ana@Inova.COM ") == "ana@inova.com"
    assert normalize_email("") is None
    assert normalize_email(None) is None
    with pytest.raises(ValidationError):
        normalize_email("ana@")


def test_normalize_full_name():
    assert normalize_full_name("  Ana Souza ") == "Ana Souza"
    with pytest.raises(ValidationError):
        normalize_full_name("   ")


def test_capitalize_category():
    assert capitalize_category("fARMÁCIA ") == "Farmácia"
