"""Pytest fixtures for testing"""

import itertools
import pytest
from typing import Callable, Generator
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from inova_gateway.api.dependencies import (
    get_assistant_client,
    get_payment_client,
    get_payment_poller,
    get_speech_channel,
    get_speech_client,
)
from inova_gateway.api.main import create_app
from inova_gateway.config import settings
from inova_gateway.domain.audio import SpeechChannel
from inova_gateway.domain.models import PixCharge
from inova_gateway.infrastructure.clients.assistant import AssistantClient
from inova_gateway.infrastructure.clients.payment import PaymentGatewayClient, PaymentStatusPoller
from inova_gateway.infrastructure.clients.speech import SpeechClient
from inova_gateway.infrastructure.database.models import Base, UserProfile
from inova_gateway.infrastructure.database.repositories import UserRepository
from inova_gateway.infrastructure.database.session import get_db, get_session_factory


# Test database: one in-memory SQLite connection shared by the request and background sessions
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_HEADERS = {"X-Admin-Token": settings.admin_token}


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def payment_client() -> MagicMock:
    """Payment gateway double: every charge is created pending, every status check says approved"""
    client = MagicMock(spec=PaymentGatewayClient)
    client.create_pix_payment = AsyncMock(
        return_value=PixCharge(
            payment_id="9001",
            status="pending",
            status_detail="pending_waiting_transfer",
            qr_code="00020126pix",
            qr_code_base64="cGl4",
            ticket_url="https://gateway.test/tickets/9001",
            expires_at=None,
        )
    )
    client.get_payment_status = AsyncMock(return_value="approved")
    return client


@pytest.fixture
def fake_clock() -> Callable[[], float]:
    """Monotonic clock that advances one second per reading"""
    ticks = itertools.count()
    return lambda: float(next(ticks))


@pytest.fixture
def poller(fake_clock) -> PaymentStatusPoller:
    """Poller that never really sleeps and gives up after a few ticks"""
    return PaymentStatusPoller(interval_seconds=1, timeout_seconds=10, clock=fake_clock, sleep=AsyncMock())


@pytest.fixture
def assistant_client() -> MagicMock:
    client = MagicMock(spec=AssistantClient)
    client.chat = AsyncMock()
    return client


@pytest.fixture
def speech_client() -> MagicMock:
    client = MagicMock(spec=SpeechClient)
    client.synthesize = AsyncMock(return_value=b"ID3-mp3-bytes")
    return client


@pytest.fixture
def client(
    db: Session,
    payment_client: MagicMock,
    poller: PaymentStatusPoller,
    assistant_client: MagicMock,
    speech_client: MagicMock,
) -> TestClient:
    """Create FastAPI test client with test database and upstream doubles"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    channel = SpeechChannel()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_payment_client] = lambda: payment_client
    app.dependency_overrides[get_payment_poller] = lambda: poller
    app.dependency_overrides[get_assistant_client] = lambda: assistant_client
    app.dependency_overrides[get_speech_client] = lambda: speech_client
    app.dependency_overrides[get_speech_channel] = lambda: channel
    return TestClient(app)


@pytest.fixture
def make_user(db: Session) -> Callable[..., UserProfile]:
    """Create a committed profile; keyword arguments override the defaults"""
    counter = itertools.count(1)

    def _make_user(**overrides) -> UserProfile:
        n = next(counter)
        fields = {
            "full_name": f"Usuário {n}",
            "phone": f"1199999{n:04d}",
            "cpf": f"{n:011d}",
            "email": f"user{n}@example.com",
            "initial_balance_cents": 0,
            "has_credit_card": False,
            "credit_limit_cents": 0,
            "credit_used_cents": 0,
            "credit_due_day": 5,
            "salary_amount_cents": 0,
            "salary_day": 5,
            "user_status": "approved",
            "subscription_status": "active",
            "is_affiliate": False,
            "affiliate_balance_cents": 0,
        }
        fields.update(overrides)
        user = UserRepository(db).create(**fields)
        db.commit()
        return user

    return _make_user
