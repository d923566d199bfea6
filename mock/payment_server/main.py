from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel
from typing import Any, Dict, Optional
import itertools
import os

app = FastAPI(title="Mock Payment Gateway", version="1.0.0")

# Charges above this amount stay pending forever; set to 0 to keep every charge pending
AUTO_APPROVE_MAX = float(os.getenv("MOCK_AUTO_APPROVE_MAX", "1000"))

_ids = itertools.count(1_000_000)
_payments: Dict[str, Dict[str, Any]] = {}
_by_idempotency_key: Dict[str, str] = {}


class PaymentIn(BaseModel):
    transaction_amount: float
    description: str
    payment_method_id: str
    payer: Dict[str, Any]
    notification_url: Optional[str] = None
    external_reference: Optional[str] = None


def _public(payment: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in payment.items() if not k.startswith("_")}


@app.get("/health")
def health(): return {"status": "ok"}


@app.post("/v1/payments", status_code=201)
def create_payment(body: PaymentIn, x_idempotency_key: Optional[str] = Header(default=None)):
    if body.payment_method_id != "pix":
        raise HTTPException(status_code=400, detail="only pix is supported")
    if x_idempotency_key and x_idempotency_key in _by_idempotency_key:
        return _public(_payments[_by_idempotency_key[x_idempotency_key]])

    payment_id = str(next(_ids))
    _payments[payment_id] = {
        "id": int(payment_id),
        "status": "pending",
        "status_detail": "pending_waiting_transfer",
        "transaction_amount": body.transaction_amount,
        "external_reference": body.external_reference,
        "date_of_expiration": None,
        "point_of_interaction": {
            "transaction_data": {
                "qr_code": f"00020126mock{payment_id}",
                "qr_code_base64": "bW9jaw==",
                "ticket_url": f"http://localhost:9000/tickets/{payment_id}",
            }
        },
        "_polls": 0,
    }
    if x_idempotency_key:
        _by_idempotency_key[x_idempotency_key] = payment_id
    return _public(_payments[payment_id])


@app.get("/v1/payments/{payment_id}")
def get_payment(payment_id: str):
    payment = _payments.get(payment_id)
    if payment is None:
        raise HTTPException(status_code=404, detail="payment not found")

    # Approve on the third status check, like a user paying a few seconds later
    payment["_polls"] += 1
    if payment["status"] == "pending" and payment["_polls"] >= 3 and payment["transaction_amount"] <= AUTO_APPROVE_MAX:
        payment["status"] = "approved"
        payment["status_detail"] = "accredited"
    return _public(payment)


@app.post("/v1/payments/{payment_id}/status/{status}")
def force_status(payment_id: str, status: str):
    if payment_id not in _payments:
        raise HTTPException(status_code=404, detail="payment not found")
    _payments[payment_id]["status"] = status
    return {"id": payment_id, "status": status}
