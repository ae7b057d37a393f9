"""Prometheus metrics for ledger activity and webhook performance"""

from prometheus_client import Counter, Histogram

# Ledger metrics
expense_counter = Counter(
    "pot_ledger_expenses_total",
    "Expenses recorded",
    ["currency"],
)

settlement_counter = Counter(
    "pot_ledger_settlements_total",
    "Settlements recorded",
    ["currency"],
)

debts_suggested_histogram = Histogram(
    "pot_ledger_debts_suggested",
    "Simplified debts produced per balance computation",
    buckets=[0, 1, 2, 3, 5, 8, 13, 21, 50],
)

invariant_violation_counter = Counter(
    "pot_ledger_invariant_violations_total",
    "Balance computations aborted by an internal consistency check",
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Settlement webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_settle_up(debt_counts: list[int]) -> None:
    """Record how many debts each currency's simplification produced"""
    for count in debt_counts:
        debts_suggested_histogram.observe(count)
