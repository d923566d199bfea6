"""Structured JSON logging for production observability"""

import logging
import sys
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from inova_gateway.utils.date_utils import utcnow


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = utcnow().isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "inova-gateway"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_transaction(
    request_id: str,
    matricula: int,
    type: str,
    payment_method: str,
    amount_cents: int,
    installments: int,
) -> None:
    """Log a confirmed transaction"""
    logging.info(
        "Transaction recorded",
        extra={
            "request_id": request_id,
            "matricula": matricula,
            "step": "transaction_recorded",
            "type": type,
            "payment_method": payment_method,
            "amount_cents": amount_cents,
            "installments": installments,
        },
    )


def log_payment_event(temp_id: str, step: str, status: str, **fields: Any) -> None:
    """Log a PIX payment lifecycle step (created, polled, activated)"""
    logging.info(
        "Payment %s",
        step,
        extra={"user_temp_id": temp_id, "step": step, "payment_status": status, **fields},
    )
