"""Monitoring and metrics instrumentation for NPS Insights.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from nps_insights.monitoring.metrics import (
    classification_outcomes_total,
    enrichment_rows_total,
    enrichment_runs_total,
    llm_latency_seconds,
    llm_tokens_total,
    reply_validation_failures_total,
)

__all__ = [
    "reply_validation_failures_total",
    "classification_outcomes_total",
    "enrichment_rows_total",
    "enrichment_runs_total",
    "llm_latency_seconds",
    "llm_tokens_total",
]
