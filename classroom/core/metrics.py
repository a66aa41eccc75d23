"""Prometheus metrics for the classroom progress service.

All metrics live here so there is one inventory of what the service
measures.  Modules import the metric they own and increment it at the
point of action.

HTTP metrics are fed by MetricsMiddleware.  The engine metrics answer the
questions an operator asks about the progress core:

  - How often is progress recomputed, and at which scope?
    (every query recomputes from scratch, so this tracks store load)
  - How many enrollments flipped to completed?
  - Are badge grants landing, or hitting existing grants?
  - Is the store failing underneath us?
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
    # Progress reads fan out to five store queries; 100-250ms is normal
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Progress engine metrics
# ---------------------------------------------------------------------------

PROGRESS_COMPUTATIONS = Counter(
    "progress_computations_total",
    "Progress evaluations by scope",
    ["scope"],  # "module" | "class" | "streak" | "access" | "summary"
)

ENROLLMENT_COMPLETIONS = Counter(
    "enrollment_completions_total",
    "Enrollments flipped from active to completed by the completion trigger",
)

BADGE_GRANTS = Counter(
    "badge_grants_total",
    "Class badge grant attempts by result",
    ["result"],  # "granted" | "existing"
)

STORE_FAILURES = Counter(
    "store_failures_total",
    "Store errors caught by the engine and surfaced as absent results",
    ["operation"],
)

EVENTS_PUBLISHED = Counter(
    "events_published_total",
    "Engine events handed to the task queue",
    ["queue"],  # "class_completed" | "module_completed"
)
