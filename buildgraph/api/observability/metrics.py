from __future__ import annotations

from prometheus_client import Counter, Histogram


def normalize_path(path: str) -> str:
    """Keep metric labels low-cardinality: unknown paths collapse to one label."""
    p = path or "/"
    if p in KNOWN_PATHS:
        return p
    return "/:other"


KNOWN_PATHS = frozenset(
    {
        "/health/live",
        "/api/v1/health/live",
        "/metrics",
        "/api/v1/plans/resolve",
        "/api/v1/graph/validate",
        "/api/v1/metrics/snapshot",
    }
)

HTTP_REQUESTS_TOTAL = Counter(
    "buildgraph_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "buildgraph_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
