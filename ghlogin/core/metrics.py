"""Prometheus metrics — the single inventory of what the service measures.

HTTP metrics are filled in by MetricsMiddleware.  The provider metrics are
recorded by the OAuth services at the point of each outbound call, so a slow
or failing GitHub shows up separately from our own request latency.
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
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Provider (GitHub) metrics
# ---------------------------------------------------------------------------

PROVIDER_REQUESTS = Counter(
    "provider_requests_total",
    "Outbound calls to GitHub by call and outcome",
    # call: token_exchange | user | user_orgs
    # outcome: ok | unauthorized | transport_error | decode_error | provider_error
    ["call", "outcome"],
)

PROVIDER_DURATION = Histogram(
    "provider_request_duration_seconds",
    "Outbound call duration to GitHub in seconds",
    ["call"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

LOGIN_OUTCOMES = Counter(
    "github_logins_total",
    "Completed callback requests by terminal state",
    ["outcome"],  # "authenticated" or the failing OAuthFlowError subclass name
)
