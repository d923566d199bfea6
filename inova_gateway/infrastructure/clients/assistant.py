"""Generative-AI chat client (OpenAI-compatible chat completions with tool calling)"""

import json
from typing import Any, Dict

import httpx

from inova_gateway.config import settings
from inova_gateway.domain.assistant import build_chat_payload
from inova_gateway.domain.exceptions import AssistantError
from inova_gateway.domain.models import AssistantReply, FinancialContext
from inova_gateway.infrastructure.observability.metrics import assistant_failures_counter, upstream_latency_histogram

FALLBACK_MESSAGE = "Desculpe, não consegui processar sua solicitação."
TOOL_CALL_MESSAGE = "Registrando transação..."


class AssistantClient:
    """Client for the AI gateway answering finance questions"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url or settings.assistant_api_base
        self.api_key = api_key if api_key is not None else settings.assistant_api_key
        self.model = model or settings.assistant_model
        self.timeout = timeout or settings.http_timeout_seconds

    async def chat(self, message: str, context: FinancialContext) -> AssistantReply:
        """
        Ask the assistant; the reply may carry a record_transaction call.

        Raises:
            AssistantError: missing key, HTTP errors, or a reply without choices
        """
        if not self.api_key:
            raise AssistantError("Assistant API key not configured")

        payload = build_chat_payload(self.model, message, context)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with upstream_latency_histogram.labels(service="assistant").time():
                    response = await client.post(
                        f"{self.base_url}/chat/completions",
                        json=payload,
                        headers={"Authorization": f"Bearer {self.api_key}"},
                    )
                response.raise_for_status()
                return parse_chat_response(response.json())

            except httpx.TimeoutException as e:
                assistant_failures_counter.inc()
                raise AssistantError(f"Assistant timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                assistant_failures_counter.inc()
                raise AssistantError(f"Assistant error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                assistant_failures_counter.inc()
                raise AssistantError(f"Assistant unreachable: {e}") from e


def parse_chat_response(data: Dict[str, Any]) -> AssistantReply:
    """Extract text and the first tool call from a chat completion body"""
    choices = data.get("choices") or []
    if not choices:
        assistant_failures_counter.inc()
        raise AssistantError("No response from AI")

    ai_message = choices[0].get("message") or {}
    tool_calls = ai_message.get("tool_calls") or []

    if tool_calls:
        function = tool_calls[0].get("function") or {}
        try:
            args = json.loads(function.get("arguments") or "{}")
        except json.JSONDecodeError as e:
            assistant_failures_counter.inc()
            raise AssistantError(f"Malformed tool arguments: {e}") from e
        return AssistantReply(
            message=ai_message.get("content") or TOOL_CALL_MESSAGE,
            function_name=function.get("name"),
            function_args=args,
        )

    return AssistantReply(message=ai_message.get("content") or FALLBACK_MESSAGE)
