"""Prometheus metrics definitions for shopbot."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "shopbot_http_requests_total",
    "Total number of HTTP requests processed by the shopbot API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "shopbot_http_request_duration_seconds",
    "Latency of HTTP requests processed by the shopbot API",
    ["method", "path"],
)

INTERACTIONS = Counter(
    "shopbot_interactions_total",
    "Interactions handled by kind and response outcome",
    ["kind", "outcome"],
)

STORE_ERRORS = Counter(
    "shopbot_store_errors_total",
    "Item store failures by error type",
    ["error"],
)

ORPHANED_MESSAGES = Counter(
    "shopbot_orphaned_messages_total",
    "Rendered list messages whose record could not be inserted",
)

RECONCILE_REPAIRS = Counter(
    "shopbot_reconcile_repairs_total",
    "Divergences between stored and visible state repaired by the sweep",
    ["repair"],
)

SUGGESTION_LATENCY = Histogram(
    "shopbot_suggestion_duration_seconds",
    "Time spent building autocomplete suggestions",
    ["field"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "INTERACTIONS",
    "STORE_ERRORS",
    "ORPHANED_MESSAGES",
    "RECONCILE_REPAIRS",
    "SUGGESTION_LATENCY",
]
