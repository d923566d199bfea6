"""Dependency injection for FastAPI endpoints"""

from fastapi import Header, HTTPException, Request

from inova_gateway.config import settings
from inova_gateway.domain.audio import SpeechChannel
from inova_gateway.infrastructure.clients.assistant import AssistantClient
from inova_gateway.infrastructure.clients.payment import PaymentGatewayClient, PaymentStatusPoller
from inova_gateway.infrastructure.clients.speech import SpeechClient

_speech_channel = SpeechChannel()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_payment_client() -> PaymentGatewayClient:
    """Provide payment gateway client instance"""
    return PaymentGatewayClient()


def get_payment_poller() -> PaymentStatusPoller:
    """Provide PIX status poller (5s interval, 30 min cap by default)"""
    return PaymentStatusPoller()


def get_assistant_client() -> AssistantClient:
    """Provide AI gateway client instance"""
    return AssistantClient()


def get_speech_client() -> SpeechClient:
    """Provide text-to-speech client instance"""
    return SpeechClient()


def get_speech_channel() -> SpeechChannel:
    """Process-wide speech channel shared by every request"""
    return _speech_channel


def require_admin(x_admin_token: str | None = Header(default=None)) -> None:
    """Reject admin calls without the configured token"""
    if not x_admin_token or x_admin_token != settings.admin_token:
        raise HTTPException(status_code=401, detail="Unauthorized")
