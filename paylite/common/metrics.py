"""Prometheus metric definitions for the payments API."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_requests_total = Counter(
    "payment_requests_total",
    "Total payment requests by operation and outcome",
    ["service", "operation", "outcome"],
)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)
repository_latency_seconds = Histogram(
    "repository_latency_seconds",
    "Payment repository call latency seconds",
    ["service", "operation"],
)
cache_hits_total = Counter("cache_hits_total", "Cache lookups served from memory", ["cache"])
cache_misses_total = Counter("cache_misses_total", "Cache lookups that found nothing usable", ["cache"])
cache_expirations_total = Counter("cache_expirations_total", "Entries dropped on read after TTL", ["cache"])
cache_evictions_total = Counter("cache_evictions_total", "Entries evicted to respect capacity", ["cache"])


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
