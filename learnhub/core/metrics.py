"""Prometheus metric inventory.

Every metric the service exports is defined here; the owning module
imports it and increments at the point of action.  Workflow counters carry
an ``outcome`` label so a dashboard can plot success vs. each rejection
reason without parsing logs.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# ---------------------------------------------------------------------------
# Workflow metrics
# ---------------------------------------------------------------------------

ENROLLMENTS = Counter(
    "learnhub_enrollments_total",
    "Enrollment workflow outcomes",
    # created|course_not_found|payment_not_completed|payment_mismatch|
    # already_enrolled|persistence_failed
    ["outcome"],
)

PROGRESS_UPDATES = Counter(
    "learnhub_progress_updates_total",
    "Lesson progress updates by outcome",
    ["outcome"],  # recorded|unchanged|skipped|persistence_failed
)

CERTIFICATES = Counter(
    "learnhub_certificates_total",
    "Certificate issuance attempts by outcome",
    ["outcome"],  # issued|existing|ineligible|persistence_failed
)

PAYMENTS = Counter(
    "learnhub_payments_total",
    "Payments processed locally and mirrored to the payment store",
    ["outcome"],  # completed|rejected|persist_ok|persist_failed
)

ACHIEVEMENTS = Counter(
    "learnhub_achievements_total",
    "Achievement side effects by type and outcome",
    ["type", "outcome"],  # outcome: recorded|failed
)

ACTIVE_SESSIONS = Gauge(
    "learnhub_active_sessions",
    "Engine sessions currently held by the API process",
)

QUEUE_DEPTH = Gauge(
    "task_queue_depth",
    "Number of tasks waiting in a queue",
    ["queue_name"],
)
