"""
Shared metrics configuration for the Policy Assembly services.
"""

from typing import Dict, Any, Optional
import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # A private registry per collector so several service instances
        # (one per test) can coexist in one process.
        self.registry = registry or CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

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

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        self._setup_policy_metrics()

    def _setup_policy_metrics(self):
        """Set up rule engine and assembly metrics."""
        self._metrics["rules_evaluated_total"] = Counter(
            "rules_evaluated_total",
            "Rules considered by the rule firing engine",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["policy_assemblies_total"] = Counter(
            "policy_assemblies_total",
            "Policy assemblies performed",
            ["template"],
            registry=self.registry
        )

        self._metrics["policy_generation_duration_seconds"] = Histogram(
            "policy_generation_duration_seconds",
            "End-to-end document generation duration in seconds",
            ["template"],
            registry=self.registry
        )

        self._metrics["unresolved_tokens_total"] = Counter(
            "unresolved_tokens_total",
            "Template tokens left unresolved in generated documents",
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def export(self) -> bytes:
        """Render the registry in Prometheus text format."""
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

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    def record_rules_fired(self, rules_fired):
        """Count fired / skipped rules from a rules_fired audit trail."""
        for entry in rules_fired:
            outcome = "fired" if entry.condition_met else "not_fired"
            self._metrics["rules_evaluated_total"].labels(outcome=outcome).inc()

    def record_assembly(self, template_code: str):
        """Record a completed assembly."""
        self._metrics["policy_assemblies_total"].labels(template=template_code).inc()

    def record_unresolved_tokens(self, count: int):
        """Record tokens left literal in a rendered document."""
        if count:
            self._metrics["unresolved_tokens_total"].inc(count)

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            if operation_name in self._metrics:
                self._metrics[operation_name].labels(**labels).observe(duration)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
