"""Prometheus metrics for issuance, collections, standing and assistant calls"""

from decimal import Decimal
from prometheus_client import Counter, Histogram, Gauge

# Lending metrics
loans_issued_counter = Counter(
    "microlend_loans_issued_total",
    "Loans issued",
    ["frequency"],  # daily | weekly | monthly | lump_sum
)

payments_recorded_counter = Counter(
    "microlend_payments_recorded_total",
    "Payments recorded",
    ["outcome"],  # partial | settled
)

payment_amount_histogram = Histogram(
    "microlend_payment_amount",
    "Recorded payment amounts in currency units",
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

worklist_size_gauge = Gauge(
    "microlend_collection_worklist_size",
    "Loans due in the most recently built collection worklist",
)

standing_counter = Counter(
    "microlend_standing_classifications_total",
    "Borrower standing classifications",
    ["status"],
)

# Assistant metrics
assistant_latency_histogram = Histogram(
    "assistant_latency_seconds",
    "Generative-text assistant response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0],
)

assistant_failure_counter = Counter(
    "assistant_failures_total",
    "Failed assistant calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_loan_issued(frequency: str) -> None:
    loans_issued_counter.labels(frequency=frequency).inc()


def record_payment(amount: Decimal, settled: bool) -> None:
    """Record a payment and whether it settled the loan"""
    payments_recorded_counter.labels(outcome="settled" if settled else "partial").inc()
    payment_amount_histogram.observe(float(amount))


def record_standing(status: str) -> None:
    standing_counter.labels(status=status).inc()
