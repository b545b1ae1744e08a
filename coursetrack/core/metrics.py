"""Prometheus metric inventory.

All metrics are defined here; the middleware and the enrollment service
import and update them where the behaviour happens.  Domain counters are
only incremented after the unit of work commits, so a rolled-back
operation never shows up as a completion or an issued certificate.
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

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Enrollment domain metrics
# ---------------------------------------------------------------------------

ENROLLMENTS_CREATED = Counter(
    "enrollments_created_total",
    "Enrollment requests by outcome",
    ["outcome"],  # "created" or "existing"
)

LESSONS_COMPLETED = Counter(
    "lessons_completed_total",
    "Lesson progress records moved to done",
)

ENROLLMENTS_COMPLETED = Counter(
    "enrollments_completed_total",
    "Enrollments that reached the completed state",
    ["path"],  # "organic" (all lessons done) or "forced"
)

CERTIFICATES_ISSUED = Counter(
    "certificates_issued_total",
    "Certificates issued",
)

DOMAIN_ERRORS = Counter(
    "enrollment_domain_errors_total",
    "Business-rule violations surfaced to callers",
    ["code"],
)
