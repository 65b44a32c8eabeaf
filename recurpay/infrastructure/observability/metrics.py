"""Prometheus metrics for client onboarding, payment review and overdue installments"""

from prometheus_client import Counter, Histogram

# Client metrics
client_created_counter = Counter(
    "recurpay_clients_created_total",
    "Clients registered",
    ["plan_shape"],  # financing | single_payment | recurring
)

financing_quote_counter = Counter(
    "recurpay_financing_quotes_total",
    "Financing breakdowns computed on request",
    ["plan_months"],
)

# Payment metrics
payment_submitted_counter = Counter(
    "recurpay_payments_submitted_total",
    "Payment proofs submitted for review",
)

payment_review_counter = Counter(
    "recurpay_payment_reviews_total",
    "Payment reviews by outcome",
    ["outcome"],  # validated | rejected
)

payment_registered_counter = Counter(
    "recurpay_payments_registered_total",
    "Payments registered directly by an admin, already validated",
)

overdue_installments_counter = Counter(
    "recurpay_overdue_installments_observed_total",
    "Overdue installments returned by schedule reads",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_client_created(plan_shape: str) -> None:
    client_created_counter.labels(plan_shape=plan_shape).inc()


def record_financing_quote(plan_months: int) -> None:
    financing_quote_counter.labels(plan_months=str(plan_months)).inc()


def record_overdue(installments) -> None:
    """Count overdue entries in a schedule read"""
    overdue = sum(1 for i in installments if i.status == "overdue")
    if overdue:
        overdue_installments_counter.inc(overdue)
