"""Assistant prompt building and message classification"""

import unicodedata
from typing import Any, Dict, List

from inova_gateway.domain.exceptions import AssistantError
from inova_gateway.domain.models import EXPENSE, INCOME, FinancialContext

RECORD_TRANSACTION = "record_transaction"

TRANSACTION_KEYWORDS = [
    "gastei", "gasto", "comprei", "paguei", "ganhei", "recebi",
    "receita", "despesa", "compra", "pagamento", "reais no", "reais de",
    "gastando", "comprando", "pagando", "registrar", "registra",
]

BALANCE_KEYWORDS = [
    "saldo", "dinheiro", "quanto tenho", "quanto eu tenho", "meu dinheiro",
    "disponivel", "quanto tem", "meu saldo",
]

RECORD_TRANSACTION_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": RECORD_TRANSACTION,
        "description": "Registra uma transação financeira (gasto ou receita) para o usuário",
        "parameters": {
            "type": "object",
            "properties": {
                "amount": {"type": "number", "description": "Valor da transação em reais"},
                "type": {
                    "type": "string",
                    "enum": ["income", "expense"],
                    "description": "Tipo: income para receita/ganho, expense para gasto/despesa",
                },
                "category": {
                    "type": "string",
                    "description": "Categoria da transação (ex: Alimentação, Transporte, Salário, etc.)",
                },
                "description": {"type": "string", "description": "Descrição breve da transação"},
            },
            "required": ["amount", "type", "category", "description"],
        },
    },
}


def normalize_text(text: str) -> str:
    """Lowercase and strip accents ('Disponível' -> 'disponivel')"""
    decomposed = unicodedata.normalize("NFD", (text or "").lower())
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def is_transaction_request(message: str) -> bool:
    normalized = normalize_text(message)
    return any(keyword in normalized for keyword in TRANSACTION_KEYWORDS)


def is_balance_query(message: str, reply: str = "") -> bool:
    normalized = normalize_text(message)
    if any(keyword in normalized for keyword in BALANCE_KEYWORDS):
        return True
    normalized_reply = normalize_text(reply)
    return any(marker in normalized_reply for marker in ("saldo", "disponivel", "r$"))


def parse_transaction_args(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn record_transaction arguments (amount in reais) into transaction fields.

    Raises:
        AssistantError: missing or non-numeric amount, or unknown type
    """
    try:
        amount_cents = int(round(float(args["amount"]) * 100))
    except (KeyError, TypeError, ValueError) as e:
        raise AssistantError(f"Invalid amount in tool call: {args.get('amount')!r}") from e

    type = args.get("type")
    if type not in (INCOME, EXPENSE):
        raise AssistantError(f"Invalid type in tool call: {type!r}")

    return {
        "amount_cents": amount_cents,
        "type": type,
        "category": str(args.get("category") or "Outros"),
        "description": str(args.get("description") or ""),
    }


def brl(cents: int) -> str:
    return f"R$ {cents / 100:.2f}"


def build_system_prompt(context: FinancialContext) -> str:
    """System prompt pinning the assistant to the user's exact figures"""
    credit_available = context.credit_limit_cents - context.credit_used_cents

    payments = "\n".join(
        f"- {p.name}: {brl(p.amount_cents)} (dia {p.due_day})" for p in context.scheduled_payments
    ) or "Nenhuma conta agendada"

    recent = "\n".join(
        f"- {'Receita' if t.type == INCOME else 'Gasto'}: {brl(t.amount_cents)} - {t.description} ({t.date.isoformat()})"
        for t in context.recent_transactions[:5]
    ) or "Nenhuma transação recente"

    return f"""Você é a ISA, assistente financeira pessoal do app INOVA. Acolhedora, direta e um pouco brincalhona.

DADOS FINANCEIROS ATUAIS DO USUÁRIO (USE ESTES VALORES EXATOS):
- SALDO DISPONÍVEL EM DÉBITO/CONTA: {brl(context.debit_balance_cents)}
- Limite de Crédito Total: {brl(context.credit_limit_cents)}
- Crédito Usado: {brl(context.credit_used_cents)}
- Crédito Disponível: {brl(credit_available)}
- Vencimento do Cartão: Dia {context.credit_due_day} (faltam {context.days_until_due} dias)
- Salário: {brl(context.salary_amount_cents)} no dia {context.salary_day}
- Total de Contas Mensais: {brl(context.monthly_payments_cents)}
- Saldo Projetado Após Contas: {brl(context.projected_balance_cents)}
- Gastos Hoje: {brl(context.today_expenses_cents)}
- Ganhos Hoje: {brl(context.today_income_cents)}

CONTAS AGENDADAS:
{payments}

ÚLTIMAS TRANSAÇÕES:
{recent}

REGRAS:
1. Sempre use os valores exatos acima ao falar de saldo ou crédito.
2. Respostas curtas (no máximo 2-3 frases), emojis com moderação.
3. Saldo baixo: seja empática. Saldo acima de R$ 500,00: celebre."""


def build_chat_payload(model: str, message: str, context: FinancialContext) -> Dict[str, Any]:
    """OpenAI-compatible chat completion request; the tool is forced for transaction phrases"""
    tool_choice: Any = "auto"
    if is_transaction_request(message):
        tool_choice = {"type": "function", "function": {"name": RECORD_TRANSACTION}}

    messages: List[Dict[str, str]] = [
        {"role": "system", "content": build_system_prompt(context)},
        {"role": "user", "content": message},
    ]
    return {
        "model": model,
        "messages": messages,
        "tools": [RECORD_TRANSACTION_TOOL],
        "tool_choice": tool_choice,
        "temperature": 0.7,
        "max_tokens": 500,
    }
