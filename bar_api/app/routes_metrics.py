# routes_metrics.py

"""Prometheus metrics and /metrics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest

# Counters
http_requests_total = Counter(
    "http_requests_total", "Total HTTP requests", ["path", "method", "status"]
)

http_errors_total = Counter(
    "http_errors_total", "Total HTTP error responses", ["path", "status"]
)

orders_created_total = Counter(
    "orders_created_total", "Total orders created", ["source"]
)
orders_created_total.labels(source="counter").inc(0)
orders_created_total.labels(source="verified_table").inc(0)

code_conflicts_total = Counter(
    "code_conflicts_total",
    "Uniqueness conflicts hit while generating human codes",
    ["kind"],
)
code_conflicts_total.labels(kind="order").inc(0)
code_conflicts_total.labels(kind="session").inc(0)

table_signature_rejections_total = Counter(
    "table_signature_rejections_total",
    "Table claims downgraded to counter orders after a failed signature check",
)
table_signature_rejections_total.inc(0)

print_jobs_total = Counter("print_jobs_total", "Print jobs dispatched", ["result"])
print_jobs_total.labels(result="ok").inc(0)
print_jobs_total.labels(result="error").inc(0)

print_queue_depth = Gauge("print_queue_depth", "Tickets waiting for the printer")
print_queue_depth.set(0)

router = APIRouter()


@router.get("/metrics")
async def metrics_endpoint(request: Request) -> Response:
    """Expose Prometheus metrics."""
    queue = getattr(request.app.state, "print_queue", None)
    if queue is not None:
        print_queue_depth.set(queue.pending)
    data = generate_latest()
    return Response(data, media_type=CONTENT_TYPE_LATEST)
