"""
Protocols for API Gateway Service.

Defines the interfaces used for dependency injection. Routers and the
forwarding pipeline depend on these protocols, not concrete implementations.
"""

from __future__ import annotations

from typing import Protocol

from prometheus_client import Counter, Histogram

from services.api_gateway_service.models import (
    ForwardRequest,
    ForwardResult,
    HealthReport,
    ServiceDescriptor,
)


class DownstreamClientProtocol(Protocol):
    """Protocol for the single-shot downstream HTTP client."""

    async def send(
        self,
        descriptor: ServiceDescriptor,
        forward_request: ForwardRequest,
        timeout: float,
    ) -> ForwardResult:
        """Issue exactly one request to the backend and report the outcome."""
        ...


class HealthMonitorProtocol(Protocol):
    """Protocol for the aggregate health monitor."""

    async def check_all(
        self, extra: list[ServiceDescriptor] | None = None
    ) -> HealthReport:
        """Check every registered service concurrently and join the results."""
        ...


class MetricsProtocol(Protocol):
    """Protocol for metrics collection matching GatewayMetrics exactly."""

    @property
    def http_requests_total(self) -> Counter:
        """Total HTTP requests counter."""
        ...

    @property
    def http_request_duration_seconds(self) -> Histogram:
        """HTTP request duration histogram."""
        ...

    @property
    def downstream_service_calls_total(self) -> Counter:
        """Downstream service calls counter."""
        ...

    @property
    def downstream_service_call_duration_seconds(self) -> Histogram:
        """Downstream service call duration histogram."""
        ...

    @property
    def api_errors_total(self) -> Counter:
        """API errors counter."""
        ...

    @property
    def health_checks_total(self) -> Counter:
        """Per-service health check outcomes."""
        ...
