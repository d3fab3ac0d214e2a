"""Prometheus HTTP request metrics middleware for the relay.

Tracks:
- ``relay_http_requests_total`` (counter) — requests by method, route, status
- ``relay_http_request_duration_seconds`` (histogram) — duration by method, route
- ``relay_http_requests_in_flight`` (gauge) — requests currently being served

Routes are labelled by their template (``/api/sponsor``) rather than the raw
URL, and probe endpoints are not counted.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Gauge, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

if TYPE_CHECKING:
    from collections.abc import Callable

    from prometheus_client import CollectorRegistry
    from starlette.requests import Request
    from starlette.responses import Response

_EXCLUDED_PATHS = frozenset({"/health", "/metrics"})
_UNMATCHED_ROUTE = "<unmatched>"


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) else _UNMATCHED_ROUTE


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that records request count, duration and concurrency."""

    def __init__(self, app: object, *, registry: CollectorRegistry) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._requests = Counter(
            "relay_http_requests_total",
            "Total relay HTTP requests",
            ("method", "route", "status_code"),
            registry=registry,
        )
        self._duration = Histogram(
            "relay_http_request_duration_seconds",
            "Relay HTTP request duration in seconds",
            ("method", "route"),
            registry=registry,
        )
        self._in_flight = Gauge(
            "relay_http_requests_in_flight",
            "Relay HTTP requests currently being served",
            registry=registry,
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:  # type: ignore[type-arg]
        if request.url.path in _EXCLUDED_PATHS:
            return await call_next(request)

        start = time.monotonic()
        self._in_flight.inc()
        try:
            response: Response = await call_next(request)
        finally:
            self._in_flight.dec()

        route = _route_label(request)
        self._requests.labels(
            method=request.method,
            route=route,
            status_code=str(response.status_code),
        ).inc()
        self._duration.labels(method=request.method, route=route).observe(
            time.monotonic() - start
        )
        return response
