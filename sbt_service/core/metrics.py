"""Application metrics using the Prometheus client library.

Single inventory of everything the service measures.  Other modules
import specific metrics and increment/observe them at the point of action.

Counters only go up (request totals, issued credentials).  Gauges go up
and down (in-flight requests, live credentials).  Histograms bucket
observations so Prometheus can derive percentiles:

  histogram_quantile(0.95, rate(http_request_duration_seconds_bucket[5m]))
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
# Registry and gate metrics
# ---------------------------------------------------------------------------

CREDENTIAL_OPERATIONS = Counter(
    "credential_operations_total",
    "Registry mutations by operation and outcome",
    ["operation", "result"],  # issue|revoke|burn, ok|<error code>
)

TRANSFER_REJECTIONS = Counter(
    "credential_transfer_rejections_total",
    "Transfer attempts rejected because credentials are locked",
    ["variant"],  # transfer_from|safe_transfer_from
)

ACTIVE_CREDENTIALS = Gauge(
    "credentials_active",
    "Number of live (issued, not revoked or burned) credentials",
)

GATE_INCREMENTS = Counter(
    "gate_increments_total",
    "Access gate increment attempts by result",
    ["result"],  # "ok" or "no_credential"
)
