"""Prometheus metrics for intent mix, extraction health, and repayment reconciliation"""

from prometheus_client import Counter, Histogram

# Utterance metrics
utterance_counter = Counter(
    "fintalk_utterances_total",
    "Utterances processed",
    ["intent", "outcome"],  # outcome: recorded | degraded | no_matching_loan | reconciled_active | reconciled_paid_off
)

extraction_failure_counter = Counter(
    "fintalk_extraction_failures_total",
    "Failed calls to external language services",
    ["service"],  # extraction | transcription
)

# Reconciliation metrics
repayment_counter = Counter(
    "fintalk_repayments_total",
    "Loan repayments by reconciliation outcome",
    ["outcome"],
)

loan_conflict_counter = Counter(
    "fintalk_loan_update_conflicts_total",
    "Loan balance compare-and-swap conflicts",
)

partial_write_counter = Counter(
    "fintalk_partial_write_failures_total",
    "Multi-step writes that failed after the first step",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_utterance(intent: str, outcome: str) -> None:
    """Count one processed utterance by intent and outcome"""
    utterance_counter.labels(intent=intent, outcome=outcome).inc()
    if intent == "loan_repayment" and outcome != "degraded":
        repayment_counter.labels(outcome=outcome).inc()
