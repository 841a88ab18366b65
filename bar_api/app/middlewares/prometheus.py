"""Prometheus middleware for HTTP request and error metrics."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..routes_metrics import http_errors_total, http_requests_total


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Count every response, and 4xx/5xx responses separately.

    The route template is used as the ``path`` label when one matched so
    order ids do not explode label cardinality.
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        route = request.scope.get("route")
        path = getattr(route, "path", None) or request.url.path
        status = str(response.status_code)
        http_requests_total.labels(
            path=path, method=request.method, status=status
        ).inc()
        if response.status_code >= 400:
            http_errors_total.labels(path=path, status=status).inc()
        return response
