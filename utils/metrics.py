"""
Prometheus metrics for Review Gate observability.

Defines the metrics emitted while gating pull requests: webhook intake,
pipeline and per-check latency, publication failures and notification
delivery results.
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# Webhook Metrics
# ============================================================================

webhook_received_total = Counter(
    "reviewgate_webhook_received_total",
    "Total webhooks received",
    labelnames=("event_type",),
)

webhook_parse_errors_total = Counter(
    "reviewgate_webhook_parse_errors_total",
    "Total webhook payloads rejected as malformed",
    labelnames=("event_type",),
)

webhook_signature_verified_total = Counter(
    "reviewgate_webhook_signature_verified_total",
    "Total webhook signature verifications",
    labelnames=("result",),  # result: success/failure
)

# ============================================================================
# Pipeline Metrics
# ============================================================================

pipeline_duration_seconds = Histogram(
    "reviewgate_pipeline_duration_seconds",
    "Time taken to process a pull request event from receipt to publication",
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, float("inf")),
    labelnames=("outcome",),
)

check_duration_seconds = Histogram(
    "reviewgate_check_duration_seconds",
    "Time taken to run a single check",
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, float("inf")),
    labelnames=("check", "status"),
)

merge_decisions_total = Counter(
    "reviewgate_merge_decisions_total",
    "Total merge policy evaluations",
    labelnames=("allowed",),
)

# ============================================================================
# Publication Metrics
# ============================================================================

publication_failures_total = Counter(
    "reviewgate_publication_failures_total",
    "Total failed status or comment publications",
    labelnames=("operation",),  # operation: status/comment
)

# ============================================================================
# Notification Metrics
# ============================================================================

notifications_total = Counter(
    "reviewgate_notifications_total",
    "Total third-party notification attempts",
    labelnames=("result",),  # result: sent/failed/dropped/cancelled
)
