"""Metrics collector — Prometheus counters and histograms for the relay.

- ``aidchain_sponsor_requests_total`` counter (operation, outcome)
- ``aidchain_sponsor_upstream_histogram`` histogram (operation)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator


_PREFIX = "aidchain_sponsor"

OP_SPONSOR = "sponsor"
OP_EXECUTE = "execute"

OUTCOME_OK = "ok"
OUTCOME_REJECTED = "rejected"
OUTCOME_UPSTREAM_ERROR = "upstream_error"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`RelayMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class RelayMetrics:
    """Relay operation metrics.

    Outcomes: ``ok``, ``rejected`` (client input refused before any upstream
    call) and ``upstream_error``.
    """

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._requests = self._collector.counter(
            f"{_PREFIX}_requests_total",
            "Relay operations by outcome",
            ("operation", "outcome"),
        )
        self._upstream = self._collector.histogram(
            f"{_PREFIX}_upstream_histogram",
            "Duration of upstream sponsorship API calls",
            ("operation",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def record(self, operation: str, outcome: str) -> None:
        """Count one relay operation with its outcome."""
        self._requests.labels(operation=operation, outcome=outcome).inc()

    @contextmanager
    def track_upstream(self, operation: str) -> Iterator[None]:
        """Track the duration of an upstream call."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._upstream.labels(operation=operation).observe(time.monotonic() - start)
