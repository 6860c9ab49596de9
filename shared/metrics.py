"""
Shared metrics configuration for the contributions service.
"""

from typing import Any, Dict, Optional
import time
from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram, Info, generate_latest


class MetricsCollector:
    """Centralized metrics collector for services.

    Each collector owns a registry so several service instances (tests
    build one per app) never collide on metric names.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Service info
        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        # Health check metrics
        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        self._setup_contributions_metrics()

    def _setup_contributions_metrics(self):
        """Set up cache and upstream metrics."""
        self._metrics["contributions_cache_events_total"] = Counter(
            "contributions_cache_events_total",
            "Cache outcomes for contribution requests",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["upstream_fetch_duration_seconds"] = Histogram(
            "upstream_fetch_duration_seconds",
            "GraphQL upstream fetch duration in seconds",
            ["status"],
            registry=self.registry
        )

        self._metrics["upstream_errors_total"] = Counter(
            "upstream_errors_total",
            "Upstream failures by kind",
            ["kind"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def render(self) -> bytes:
        """Render the registry in Prometheus exposition format."""
        return generate_latest(self.registry)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_cache_event(self, outcome: str):
        """Count a cache outcome: hit, fetched, upstream_error or inconsistent."""
        self._metrics["contributions_cache_events_total"].labels(outcome=outcome).inc()

    def record_upstream_error(self, kind: str):
        self._metrics["upstream_errors_total"].labels(kind=kind).inc()

    @contextmanager
    def time_upstream_fetch(self):
        """Time an upstream fetch, labelling the sample by success or error."""
        start_time = time.perf_counter()
        status = "error"
        try:
            yield
            status = "ok"
        finally:
            duration = time.perf_counter() - start_time
            self._metrics["upstream_fetch_duration_seconds"].labels(status=status).observe(duration)

    def sample(self, metric_name: str, **labels) -> float:
        """Read the current value of a counter sample (used by health and tests)."""
        value = self.registry.get_sample_value(metric_name, labels)
        return value or 0.0


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
