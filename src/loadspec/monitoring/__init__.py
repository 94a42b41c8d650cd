"""Monitoring and metrics instrumentation for loadspec.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from loadspec.monitoring.metrics import (
    errors_classified_total,
    parse_confidence,
    parse_results_total,
    recovery_active_sessions,
    recovery_attempts_total,
    recovery_sessions_total,
    validation_failures_total,
)

__all__ = [
    "parse_results_total",
    "parse_confidence",
    "errors_classified_total",
    "recovery_attempts_total",
    "recovery_sessions_total",
    "recovery_active_sessions",
    "validation_failures_total",
]
