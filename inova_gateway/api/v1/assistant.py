"""Finance assistant: chat with tool-driven transaction proposals, and speech"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from inova_gateway.api.dependencies import (
    get_assistant_client,
    get_request_id,
    get_speech_channel,
    get_speech_client,
)
from inova_gateway.api.errors import to_http_error
from inova_gateway.api.v1.context import build_financial_context, load_finances
from inova_gateway.api.v1.schemas import BalanceSnapshot, ChatRequest, ChatResponse, SpeechRequest
from inova_gateway.api.v1.transactions import proposal_response
from inova_gateway.domain.assistant import RECORD_TRANSACTION, is_balance_query, parse_transaction_args
from inova_gateway.domain.audio import SpeechChannel
from inova_gateway.domain.confirmation import propose_transaction
from inova_gateway.domain.exceptions import DomainException
from inova_gateway.domain.validation import capitalize_category
from inova_gateway.infrastructure.clients.assistant import AssistantClient
from inova_gateway.infrastructure.clients.speech import SpeechClient
from inova_gateway.infrastructure.database.repositories import UserRepository
from inova_gateway.infrastructure.database.session import get_db
from inova_gateway.infrastructure.observability.metrics import record_proposal

router = APIRouter()


@router.post("/assistant/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    request: Request,
    db: Session = Depends(get_db),
    assistant: AssistantClient = Depends(get_assistant_client),
):
    """
    Answer a message with the user's live figures.

    Flow:
    1. Build the financial context (balances, card, bills, recent activity)
    2. Ask the AI gateway; transaction phrases force the record_transaction tool
    3. A tool call becomes a proposal the user must confirm; nothing is recorded here
    4. Balance questions also return the clamped debit/credit snapshot
    """
    request_id = get_request_id(request)
    try:
        user = UserRepository(db).get_or_404(body.matricula)
        context = build_financial_context(db, user, date.today())
        reply = await assistant.chat(body.message, context)

        if reply.function_name == RECORD_TRANSACTION and reply.function_args:
            fields = parse_transaction_args(reply.function_args)
            finances = load_finances(db, user)
            proposal = propose_transaction(
                amount_cents=fields["amount_cents"],
                type=fields["type"],
                category=capitalize_category(fields["category"]),
                description=fields["description"],
                debit_balance_cents=finances.summary.debit_balance_cents,
                credit_available_cents=finances.credit_available_cents,
                has_credit_card=user.has_credit_card,
            )
            record_proposal(proposal.advice)
            logging.info(
                "Assistant proposed transaction",
                extra={"request_id": request_id, "matricula": body.matricula, "advice": proposal.advice},
            )
            return ChatResponse(message=reply.message, proposal=proposal_response(proposal))

        if not is_balance_query(body.message, reply.message):
            return ChatResponse(message=reply.message)

        finances = load_finances(db, user)
        return ChatResponse(
            message=reply.message,
            is_balance_query=True,
            balance=BalanceSnapshot(
                debit_cents=max(0, finances.summary.debit_balance_cents),
                credit_cents=finances.credit_available_cents,
            ),
        )

    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.post("/assistant/speech")
async def speak(
    body: SpeechRequest,
    request: Request,
    speech: SpeechClient = Depends(get_speech_client),
    channel: SpeechChannel = Depends(get_speech_channel),
):
    """MP3 rendering of text; a newer request for the same session interrupts this one"""
    request_id = get_request_id(request)
    try:
        audio = await channel.speak(body.session_id, lambda: speech.synthesize(body.text))
    except DomainException as e:
        raise to_http_error(e, request_id=request_id)
    return Response(content=audio, media_type="audio/mpeg")


@router.delete("/assistant/speech/{session_id}")
def stop_speaking(session_id: str, channel: SpeechChannel = Depends(get_speech_channel)):
    return {"stopped": channel.stop(session_id)}
