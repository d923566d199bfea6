"""PIX payment gateway client (Mercado Pago) and payment status poller"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict

import httpx

from inova_gateway.config import settings
from inova_gateway.domain.exceptions import PaymentGatewayError
from inova_gateway.domain.models import Payer, PixCharge
from inova_gateway.domain.subscription import TERMINAL_PAYMENT_STATUSES
from inova_gateway.infrastructure.observability.metrics import (
    payment_gateway_failures_counter,
    payment_poll_counter,
    upstream_latency_histogram,
)

logger = logging.getLogger(__name__)


class PaymentGatewayClient:
    """Client for the PIX payment gateway REST API"""

    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        notification_url: str | None = None,
    ):
        self.base_url = base_url or settings.payment_api_base
        self.access_token = access_token if access_token is not None else settings.payment_access_token
        self.timeout = timeout or settings.http_timeout_seconds
        self.notification_url = notification_url or settings.payment_notification_url

    def _headers(self, idempotency_key: str | None = None) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        if idempotency_key:
            headers["X-Idempotency-Key"] = idempotency_key
        return headers

    async def create_pix_payment(
        self,
        amount_cents: int,
        description: str,
        payer: Payer,
        external_reference: str,
    ) -> PixCharge:
        """
        Create a PIX charge.

        The external reference doubles as idempotency key, so a retried
        request never charges twice.

        Raises:
            PaymentGatewayError: On timeout, HTTP errors, or invalid response
        """
        if not self.access_token:
            raise PaymentGatewayError("Payment gateway access token not configured")

        body: Dict[str, Any] = {
            "transaction_amount": round(amount_cents / 100, 2),
            "description": description,
            "payment_method_id": "pix",
            "payer": {
                "email": payer.email,
                "first_name": payer.first_name,
                "last_name": payer.last_name,
                "identification": {"type": "CPF", "number": payer.cpf},
            },
            "notification_url": self.notification_url,
            "external_reference": external_reference,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with upstream_latency_histogram.labels(service="payment").time():
                    response = await client.post(
                        f"{self.base_url}/v1/payments",
                        json=body,
                        headers=self._headers(external_reference),
                    )
                response.raise_for_status()
                data = response.json()

                pix = (data.get("point_of_interaction") or {}).get("transaction_data") or {}
                return PixCharge(
                    payment_id=str(data["id"]),
                    status=data["status"],
                    status_detail=data.get("status_detail"),
                    qr_code=pix.get("qr_code"),
                    qr_code_base64=pix.get("qr_code_base64"),
                    ticket_url=pix.get("ticket_url"),
                    expires_at=data.get("date_of_expiration"),
                )

            except httpx.TimeoutException as e:
                payment_gateway_failures_counter.inc()
                raise PaymentGatewayError(f"Payment gateway timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                payment_gateway_failures_counter.inc()
                raise PaymentGatewayError(f"Payment gateway error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                payment_gateway_failures_counter.inc()
                raise PaymentGatewayError(f"Payment gateway unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                payment_gateway_failures_counter.inc()
                raise PaymentGatewayError(f"Invalid payment data from gateway: {e}") from e

    async def get_payment_status(self, payment_id: str) -> str:
        """
        Fetch the current status of a charge ("pending", "approved", ...).

        Raises:
            PaymentGatewayError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with upstream_latency_histogram.labels(service="payment").time():
                    response = await client.get(
                        f"{self.base_url}/v1/payments/{payment_id}",
                        headers=self._headers(),
                    )
                response.raise_for_status()
                return str(response.json()["status"])

            except httpx.TimeoutException as e:
                payment_gateway_failures_counter.inc()
                raise PaymentGatewayError(f"Payment gateway timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                payment_gateway_failures_counter.inc()
                raise PaymentGatewayError(f"Payment gateway error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                payment_gateway_failures_counter.inc()
                raise PaymentGatewayError(f"Payment gateway unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                payment_gateway_failures_counter.inc()
                raise PaymentGatewayError(f"Invalid payment data from gateway: {e}") from e


@dataclass
class PollOutcome:
    """How a polling run ended"""

    status: str | None
    attempts: int
    timed_out: bool


class PaymentStatusPoller:
    """
    Fixed-interval status poll bounded by a wall-clock timeout.

    Polling stops on the first terminal status or once the timeout has
    elapsed, whichever comes first. A failed request is logged and retried
    on the next tick.
    """

    def __init__(
        self,
        interval_seconds: float | None = None,
        timeout_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.interval = interval_seconds if interval_seconds is not None else settings.payment_poll_interval_seconds
        self.timeout = timeout_seconds if timeout_seconds is not None else settings.payment_poll_timeout_seconds
        self.clock = clock
        self.sleep = sleep

    async def wait_for_terminal(self, fetch_status: Callable[[], Awaitable[str]]) -> PollOutcome:
        deadline = self.clock() + self.timeout
        attempts = 0
        status = None

        while True:
            await self.sleep(self.interval)
            if self.clock() >= deadline:
                return PollOutcome(status=status, attempts=attempts, timed_out=True)

            attempts += 1
            payment_poll_counter.inc()
            try:
                status = await fetch_status()
            except PaymentGatewayError as e:
                logger.warning(f"Payment status check failed: {e}", extra={"attempt": attempts})
                continue

            if status in TERMINAL_PAYMENT_STATUSES:
                return PollOutcome(status=status, attempts=attempts, timed_out=False)
