"""Unit tests for assistant prompts, message classification and reply parsing"""

import json
import pytest
from datetime import date
from inova_gateway.domain.assistant import (
    RECORD_TRANSACTION,
    build_chat_payload,
    build_system_prompt,
    is_balance_query,
    is_transaction_request,
    normalize_text,
    parse_transaction_args,
)
from inova_gateway.domain.exceptions import AssistantError
from inova_gateway.domain.models import FinancialContext, ScheduledPayment, Transaction
from inova_gateway.infrastructure.clients.assistant import FALLBACK_MESSAGE, TOOL_CALL_MESSAGE, parse_chat_response


@pytest.fixture
def context() -> FinancialContext:
    return FinancialContext(
        balance_cents=120000,
        debit_balance_cents=150000,
        total_income_cents=300000,
        total_expense_cents=180000,
        credit_limit_cents=100000,
        credit_used_cents=30000,
        credit_due_day=10,
        days_until_due=4,
        salary_amount_cents=300000,
        salary_day=5,
        monthly_payments_cents=80000,
        projected_balance_cents=70000,
        today_expenses_cents=2500,
        today_income_cents=0,
        scheduled_payments=[ScheduledPayment(name="Aluguel", amount_cents=80000, due_day=10, category="Contas")],
        recent_transactions=[
            Transaction(
                amount_cents=2500,
                type="expense",
                category="Alimentação",
                description="Padaria",
                date=date(2025, 3, 15),
                matricula=123456,
            )
        ],
    )


def test_normalize_text_strips_accents():
    assert normalize_text("Disponível AGORA") == "disponivel agora"


@pytest.mark.parametrize("message", ["Gastei 50 reais no mercado", "recebi meu salário", "Paguei a conta"])
def test_transaction_requests(message):
    assert is_transaction_request(message)


def test_plain_question_is_not_transaction():
    assert not is_transaction_request("Como posso economizar?")


def test_balance_query_from_message():
    assert is_balance_query("Qual é o meu saldo?")
    assert is_balance_query("quanto tenho disponível")


def test_balance_query_from_reply():
    assert is_balance_query("e aí?", "Você tem R$ 1500.00 em conta")


def test_not_balance_query():
    assert not is_balance_query("me dá uma dica", "Tente cozinhar em casa")


def test_system_prompt_uses_exact_figures(context):
    prompt = build_system_prompt(context)

    assert "R$ 1500.00" in prompt  # debit balance
    assert "R$ 700.00" in prompt  # credit available
    assert "Dia 10 (faltam 4 dias)" in prompt
    assert "- Aluguel: R$ 800.00 (dia 10)" in prompt
    assert "Padaria (2025-03-15)" in prompt


def test_chat_payload_forces_tool_for_transactions(context):
    payload = build_chat_payload("model-x", "gastei 30 no uber", context)

    assert payload["model"] == "model-x"
    assert payload["tool_choice"] == {"type": "function", "function": {"name": RECORD_TRANSACTION}}
    assert payload["messages"][1] == {"role": "user", "content": "gastei 30 no uber"}


def test_chat_payload_auto_tool_for_questions(context):
    assert build_chat_payload("model-x", "oi", context)["tool_choice"] == "auto"


def test_parse_transaction_args_converts_reais_to_cents():
    fields = parse_transaction_args({"amount": 49.9, "type": "expense", "category": "Lazer", "description": "Cinema"})

    assert fields == {"amount_cents": 4990, "type": "expense", "category": "Lazer", "description": "Cinema"}


def test_parse_transaction_args_defaults():
    fields = parse_transaction_args({"amount": "10", "type": "income"})
    assert fields["category"] == "Outros"
    assert fields["description"] == ""


@pytest.mark.parametrize("args", [{"type": "expense"}, {"amount": "dez", "type": "expense"}, {"amount": 10, "type": "gift"}])
def test_parse_transaction_args_rejects(args):
    with pytest.raises(AssistantError):
        parse_transaction_args(args)


def test_parse_chat_response_text():
    reply = parse_chat_response({"choices": [{"message": {"content": "Olá!"}}]})

    assert reply.message == "Olá!"
    assert reply.function_name is None


def test_parse_chat_response_tool_call():
    arguments = json.dumps({"amount": 30, "type": "expense", "category": "Transporte", "description": "Uber"})
    reply = parse_chat_response(
        {
            "choices": [
                {
                    "message": {
                        "content": None,
                        "tool_calls": [{"function": {"name": RECORD_TRANSACTION, "arguments": arguments}}],
                    }
                }
            ]
        }
    )

    assert reply.message == TOOL_CALL_MESSAGE
    assert reply.function_name == RECORD_TRANSACTION
    assert reply.function_args["amount"] == 30


def test_parse_chat_response_empty_content():
    assert parse_chat_response({"choices": [{"message": {}}]}).message == FALLBACK_MESSAGE


def test_parse_chat_response_without_choices():
    with pytest.raises(AssistantError):
        parse_chat_response({"choices": []})


def test_parse_chat_response_malformed_arguments():
    with pytest.raises(AssistantError):
        parse_chat_response(
            {"choices": [{"message": {"tool_calls": [{"function": {"name": RECORD_TRANSACTION, "arguments": "{oops"}}]}}]}
        )
