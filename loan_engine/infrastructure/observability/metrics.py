"""Prometheus metrics for loan origination, payments and overdue tracking"""

from prometheus_client import Counter, Histogram

# Loan metrics
loans_created_counter = Counter(
    "loan_engine_loans_created_total",
    "Loans created with a generated schedule",
    ["frequency"],
)

schedule_items_generated_counter = Counter(
    "loan_engine_schedule_items_generated_total",
    "Schedule items generated at loan creation",
)

# Payment metrics
payment_counter = Counter(
    "loan_engine_payments_total",
    "Payment attempts by outcome",
    ["outcome"],  # recorded | AmountMismatch | ExceedsOutstanding | ...
)

loans_completed_counter = Counter(
    "loan_engine_loans_completed_total",
    "Loans fully repaid by a payment",
)

# Overdue scanner
overdue_items_counter = Counter(
    "loan_engine_schedule_items_overdue_total",
    "Schedule items moved from Pending to Overdue",
)

loans_defaulted_counter = Counter(
    "loan_engine_loans_defaulted_total",
    "Active loans moved to Defaulted by the overdue scanner",
)

overdue_scan_failures_counter = Counter(
    "loan_engine_overdue_scan_failures_total",
    "Overdue scan passes that raised",
)

# Storage
serialization_conflict_counter = Counter(
    "loan_engine_serialization_conflicts_total",
    "Units of work aborted by a storage-level concurrency conflict",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment_outcome(outcome: str) -> None:
    """Count a payment attempt; outcome is "recorded" or the rejection kind"""
    payment_counter.labels(outcome=outcome).inc()
