"""Custom Prometheus metrics for NPS Insights.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Alert rules should be configured for:
- classification_outcomes_total (rising fallback share means model drift or outage)
- enrichment_rows_total (failed rows)
- llm_latency_seconds (slow inference stalls enrichment runs)
"""

from prometheus_client import Counter, Histogram

# === Reply Validation Metrics ===

reply_validation_failures_total = Counter(
    "reply_validation_failures_total",
    "Model replies rejected by the parser, by stage and error type",
    ["stage", "error_type"],
)
"""
Reply validation failures by stage and error type.

Labels:
- stage: stage1 (JSON extraction), stage2 (reply schema)
- error_type: empty_content, no_json_object, missing_key, schema_validation_error

Each failure turns into a keyword fallback, so this tracks how often the
model ignores the reply format.
"""

# === Classification Metrics ===

classification_outcomes_total = Counter(
    "classification_outcomes_total",
    "Classification results by kind and source",
    ["kind", "source"],
)
"""
Classification outcome counter.

Labels:
- kind: sentiment, topics
- source: model, fallback_parse, fallback_transport, fallback_error, empty

Alert thresholds:
- WARN: fallback_* share > 10% over 1h
- CRITICAL: fallback_transport share > 50% (model server down)
"""

# === Enrichment Metrics ===

enrichment_rows_total = Counter(
    "enrichment_rows_total",
    "Rows attempted by enrichment runs, by outcome",
    ["outcome"],
)
"""
Per-row enrichment outcome.

Labels:
- outcome: enriched (written), skipped (model unreachable, row left pending), failed
"""

enrichment_runs_total = Counter(
    "enrichment_runs_total",
    "Enrichment runs by final outcome",
    ["outcome"],
)
"""
Enrichment runs counter.

Labels:
- outcome: completed, cancelled, empty (nothing pending), rejected (busy), store_unavailable
"""

# === LLM Performance Metrics ===

llm_latency_seconds = Histogram(
    "llm_latency_seconds",
    "LLM generation latency in seconds",
    ["model", "success"],
    buckets=[0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)
"""
LLM generation latency histogram.

Labels:
- model: Model name (e.g., qwen2.5:3b)
- success: true (generation succeeded), false (generation failed)

Buckets sized for small local models answering with ~200 tokens.
"""

llm_tokens_total = Counter(
    "llm_tokens_total",
    "Total tokens consumed by model and type",
    ["model", "token_type"],
)
"""
Token consumption counter.

Labels:
- model: Model name
- token_type: prompt (input tokens), completion (output tokens)
"""
