"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from inova_gateway.api.dependencies import get_speech_channel
from inova_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from inova_gateway.api.v1 import admin, affiliates, assistant, goals, planner, subscriptions, support, transactions, users
from inova_gateway.infrastructure.observability.logging import setup_logging
from inova_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Cut off any speech still being synthesized
    get_speech_channel().stop_all()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="INOVA Finance Gateway",
        description="Personal finance, card installments, PIX subscriptions and assistant",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(users.router, prefix="/v1", tags=["users"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(goals.router, prefix="/v1", tags=["goals"])
    app.include_router(planner.router, prefix="/v1", tags=["planner"])
    app.include_router(subscriptions.router, prefix="/v1", tags=["subscriptions"])
    app.include_router(affiliates.router, prefix="/v1", tags=["affiliates"])
    app.include_router(support.router, prefix="/v1", tags=["support"])
    app.include_router(assistant.router, prefix="/v1", tags=["assistant"])
    app.include_router(admin.router, prefix="/v1", tags=["admin"])

    return app


app = create_app()
