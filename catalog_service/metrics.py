"""
Prometheus metrics for Catalog Service.

Tracks HTTP traffic and document store operations.
"""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from fastapi import Response

# Request metrics
http_requests_total = Counter(
    "catalog_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "catalog_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0)
)

# Document store metrics
store_operations_total = Counter(
    "catalog_store_operations_total",
    "Total document store operations",
    ["operation", "status"]
)

store_operation_duration_seconds = Histogram(
    "catalog_store_operation_duration_seconds",
    "Document store operation duration in seconds",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
)

store_query_pages = Histogram(
    "catalog_store_query_pages",
    "Pages drained per document store query",
    buckets=(1, 2, 3, 5, 10, 25, 50, 100)
)


def track_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Track HTTP request metrics."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_store_operation(operation: str, success: bool, duration: float):
    """Track document store operation metrics."""
    status = "success" if success else "failure"
    store_operations_total.labels(operation=operation, status=status).inc()
    store_operation_duration_seconds.labels(operation=operation).observe(duration)


def track_query_pages(pages: int):
    """Track how many pages a query had to drain."""
    store_query_pages.observe(pages)


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
