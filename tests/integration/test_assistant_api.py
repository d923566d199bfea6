"""Integration tests for the finance assistant chat and speech endpoints"""

from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from inova_gateway.domain.assistant import RECORD_TRANSACTION
from inova_gateway.domain.exceptions import AssistantError, SpeechSynthesisError
from inova_gateway.domain.models import AssistantReply


def test_chat_plain_answer(client: TestClient, make_user, assistant_client):
    user = make_user()
    assistant_client.chat.return_value = AssistantReply(message="Tente separar 10% do salário.")

    response = client.post("/v1/assistant/chat", json={"matricula": user.matricula, "message": "Me dá uma dica"})

    assert response.status_code == 200
    assert response.json() == {
        "message": "Tente separar 10% do salário.",
        "proposal": None,
        "is_balance_query": False,
        "balance": None,
    }

    message, context = assistant_client.chat.await_args.args
    assert message == "Me dá uma dica"
    assert context.debit_balance_cents == 0


def test_chat_tool_call_becomes_proposal(client: TestClient, make_user, assistant_client):
    """R$ 200 with R$ 160 of debit and R$ 50 of credit: credit in 4x, nothing recorded"""
    user = make_user(initial_balance_cents=16000, has_credit_card=True, credit_limit_cents=5000)
    assistant_client.chat.return_value = AssistantReply(
        message="Vou registrar para você.",
        function_name=RECORD_TRANSACTION,
        function_args={"amount": 200, "type": "expense", "category": "compras", "description": "TV"},
    )

    data = client.post("/v1/assistant/chat", json={"matricula": user.matricula, "message": "Comprei uma TV de 200"}).json()

    proposal = data["proposal"]
    assert proposal["amount_cents"] == 20000
    assert proposal["category"] == "Compras"
    assert proposal["payment_method"] == "credit"
    assert proposal["min_installments"] == 4
    assert client.get(f"/v1/users/{user.matricula}/transactions").json()["transactions"] == []


def test_chat_balance_question_returns_snapshot(client: TestClient, make_user, assistant_client):
    user = make_user(initial_balance_cents=150000, has_credit_card=True, credit_limit_cents=100000, credit_used_cents=30000)
    assistant_client.chat.return_value = AssistantReply(message="Você tem R$ 1500.00 em conta.")

    data = client.post("/v1/assistant/chat", json={"matricula": user.matricula, "message": "Qual meu saldo?"}).json()

    assert data["is_balance_query"] is True
    assert data["balance"] == {"debit_cents": 150000, "credit_cents": 70000}


def test_chat_balance_snapshot_never_negative(client: TestClient, make_user, assistant_client):
    user = make_user(initial_balance_cents=-5000)
    assistant_client.chat.return_value = AssistantReply(message="Seu saldo está negativo.")

    data = client.post("/v1/assistant/chat", json={"matricula": user.matricula, "message": "meu saldo"}).json()

    assert data["balance"] == {"debit_cents": 0, "credit_cents": 0}


def test_chat_upstream_failure(client: TestClient, make_user, assistant_client):
    user = make_user()
    assistant_client.chat.side_effect = AssistantError("AI gateway unreachable")

    response = client.post("/v1/assistant/chat", json={"matricula": user.matricula, "message": "oi"})
    assert response.status_code == 502


def test_chat_unknown_user(client: TestClient, assistant_client):
    response = client.post("/v1/assistant/chat", json={"matricula": 999999, "message": "oi"})

    assert response.status_code == 404
    assistant_client.chat.assert_not_awaited()


def test_chat_unusable_tool_arguments(client: TestClient, make_user, assistant_client):
    user = make_user()
    assistant_client.chat.return_value = AssistantReply(
        message="Vou registrar.", function_name=RECORD_TRANSACTION, function_args={"type": "expense"}
    )

    response = client.post("/v1/assistant/chat", json={"matricula": user.matricula, "message": "gastei"})
    assert response.status_code == 502


def test_speech_returns_mp3(client: TestClient, speech_client):
    response = client.post("/v1/assistant/speech", json={"session_id": "s1", "text": "Olá, Ana"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.content == b"ID3-mp3-bytes"
    speech_client.synthesize.assert_awaited_once_with("Olá, Ana")


def test_speech_upstream_failure(client: TestClient, speech_client):
    speech_client.synthesize = AsyncMock(side_effect=SpeechSynthesisError("tts down"))

    response = client.post("/v1/assistant/speech", json={"session_id": "s1", "text": "Olá"})
    assert response.status_code == 502


def test_stop_speech_when_idle(client: TestClient):
    response = client.delete("/v1/assistant/speech/s1")
    assert response.json() == {"stopped": False}
