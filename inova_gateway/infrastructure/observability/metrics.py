"""Prometheus metrics for monitoring confirmations, billing and upstream services"""

from prometheus_client import Counter, Histogram

# Transaction metrics
transaction_counter = Counter(
    "inova_transactions_total",
    "Transactions recorded",
    ["type", "payment_method"],  # income|expense, debit|credit
)

proposal_counter = Counter(
    "inova_transaction_proposals_total",
    "Transaction proposals by advice",
    ["advice"],
)

rejected_expense_counter = Counter(
    "inova_rejected_expenses_total",
    "Expenses rejected at confirmation",
    ["reason"],  # insufficient_funds | credit_limit
)

# Billing metrics
pix_payment_counter = Counter(
    "inova_pix_payments_total",
    "PIX charges by final status",
    ["status"],
)

payment_poll_counter = Counter(
    "inova_payment_polls_total",
    "Payment status requests issued by the poller",
)

payment_gateway_failures_counter = Counter(
    "payment_gateway_failures_total",
    "Failed payment gateway calls",
)

# Upstream latency
upstream_latency_histogram = Histogram(
    "upstream_latency_seconds",
    "External service response time",
    ["service"],  # payment | assistant | speech
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

assistant_failures_counter = Counter(
    "assistant_failures_total",
    "Failed AI gateway calls",
)

speech_failures_counter = Counter(
    "speech_failures_total",
    "Failed text-to-speech calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transaction(type: str, payment_method: str) -> None:
    transaction_counter.labels(type=type, payment_method=payment_method).inc()


def record_proposal(advice: str) -> None:
    proposal_counter.labels(advice=advice).inc()


def record_payment_outcome(status: str) -> None:
    pix_payment_counter.labels(status=status).inc()
