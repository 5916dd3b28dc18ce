"""Prometheus metrics for monitoring debt activity, auth and request latency"""

from prometheus_client import Counter, Histogram

# Debt metrics
debt_created_counter = Counter(
    "fintrack_debt_created_total",
    "Debts recorded (one per batch, regardless of tenor)",
)

installments_per_debt_histogram = Histogram(
    "fintrack_installments_per_debt",
    "Number of installments a debt is split into",
    buckets=[1, 2, 3, 6, 12, 24, 36, 60],
)

debt_paid_counter = Counter(
    "fintrack_debt_paid_total",
    "Debt installments marked as paid",
)

entry_counter = Counter(
    "fintrack_entry_total",
    "Income and expense entries recorded",
    ["kind"],  # income | expense
)

# Identity provider metrics
auth_event_counter = Counter(
    "fintrack_auth_events_total",
    "Auth state transitions",
    ["event"],  # signed_in | signed_out
)

identity_failures_counter = Counter(
    "identity_verify_failures_total",
    "Failed identity provider calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_debt_created(tenor: int) -> None:
    """Record a debt batch for monitoring installment usage"""
    debt_created_counter.inc()
    installments_per_debt_histogram.observe(tenor)


def record_auth_change(signed_in: bool) -> None:
    auth_event_counter.labels(event="signed_in" if signed_in else "signed_out").inc()
