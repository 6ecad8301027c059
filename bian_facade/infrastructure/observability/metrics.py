"""Prometheus metrics for monitoring retrieval outcomes and proxy performance"""

from prometheus_client import Counter, Histogram

# Retrieval metrics
retrieval_counter = Counter(
    "bian_facility_retrieval_total",
    "Credit card facility retrievals by source and outcome",
    ["source", "outcome"],  # source: proxy | fallback
)

facilities_returned_histogram = Histogram(
    "bian_facilities_returned",
    "Number of facilities returned per successful retrieval",
    buckets=[0, 1, 2, 3, 5, 10, 25],
)

# Proxy metrics
upstream_latency_histogram = Histogram(
    "proxy_latency_seconds",
    "Legacy proxy response time",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_retrieval(source: str, outcome: str, facility_count: int | None = None) -> None:
    """Record one pipeline outcome; facility_count is only known on success"""
    retrieval_counter.labels(source=source, outcome=outcome).inc()

    if facility_count is not None:
        facilities_returned_histogram.observe(facility_count)
