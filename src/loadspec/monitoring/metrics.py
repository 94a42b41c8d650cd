"""Custom Prometheus metrics for loadspec.

Exposed through the default prometheus_client registry; the embedding
service decides how to serve them. Alert rules should be configured for:
- parse_results_total (rising template-based share means inputs are not understood)
- recovery_sessions_total (exhausted / max_retries_exceeded outcomes)
- errors_classified_total (spikes in ai-level errors)
"""

from prometheus_client import Counter, Gauge, Histogram

# === Parsing Metrics ===

parse_results_total = Counter(
    "loadspec_parse_results_total",
    "Total extraction cascade results by tier",
    ["method"],
)
"""
Cascade results counter by tier.

Labels:
- method: pattern-matching, keyword-extraction, template-based

Alert thresholds:
- WARN: template-based > 20% of parses
"""

parse_confidence = Histogram(
    "loadspec_parse_confidence",
    "Confidence of extraction cascade results",
    ["method"],
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

# === Classification Metrics ===

errors_classified_total = Counter(
    "loadspec_errors_classified_total",
    "Total classified pipeline errors by stage and type",
    ["level", "error_type"],
)
"""
Classified errors counter.

Labels:
- level: input, ai, validation
- error_type: rate_limit, ai_timeout, schema_validation_error, <stage>_processing_error, etc.
"""

# === Recovery Metrics ===

recovery_attempts_total = Counter(
    "loadspec_recovery_attempts_total",
    "Total recovery strategy attempts by strategy and outcome",
    ["strategy", "success"],
)
"""
Recovery attempts counter.

Labels:
- strategy: retry, fallback, enhance_prompt
- success: true (callback produced a spec), false (callback failed)
"""

recovery_sessions_total = Counter(
    "loadspec_recovery_sessions_total",
    "Total recovery sessions by outcome",
    ["outcome"],
)
"""
Recovery sessions counter.

Labels:
- outcome: success, exhausted, max_retries_exceeded

Alert thresholds:
- WARN: max_retries_exceeded rate > 1% of sessions
"""

recovery_active_sessions = Gauge(
    "loadspec_recovery_active_sessions",
    "Recovery sessions currently counted against the retry ceiling",
)

# === Validation Metrics ===

validation_failures_total = Counter(
    "loadspec_validation_failures_total",
    "Total interpreter-output validation failures by stage and error type",
    ["stage", "error_type"],
)
"""
Validation failures counter.

Labels:
- stage: stage1, stage2, stage3
- error_type: empty_content, json_decode_error, not_json_object, schema_violation, model_error, <rule name>
"""
