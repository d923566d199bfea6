"""Translate domain exceptions into HTTP errors"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from inova_gateway.domain.exceptions import (
    AssistantError,
    ConflictError,
    CreditLimitExceededError,
    DomainException,
    InsufficientFundsError,
    MatriculaGenerationError,
    NotFoundError,
    PaymentGatewayError,
    SpeechInterruptedError,
    SpeechSynthesisError,
    ValidationError,
)

STATUS_BY_EXCEPTION = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (SpeechInterruptedError, 409),
    (InsufficientFundsError, 422),
    (CreditLimitExceededError, 422),
    (PaymentGatewayError, 502),
    (AssistantError, 502),
    (SpeechSynthesisError, 502),
    (MatriculaGenerationError, 503),
]


def to_http_error(error: DomainException, db: Session | None = None, request_id: str = "unknown") -> HTTPException:
    """Roll back, log and map a domain exception to its HTTP status"""
    if db is not None:
        db.rollback()

    status = next((code for kind, code in STATUS_BY_EXCEPTION if isinstance(error, kind)), 500)
    if status >= 500:
        logging.error(f"{type(error).__name__}: {error}", extra={"request_id": request_id})
    else:
        logging.warning(f"{type(error).__name__}: {error}", extra={"request_id": request_id})

    return HTTPException(status_code=status, detail=str(error))
