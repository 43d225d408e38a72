"""
Aggregate health monitor.

Calls ``<base_url>/health`` on every registered backend concurrently and
joins the outcomes into one ``HealthReport``. Each check is bounded by the
same timeout, so a full check takes roughly one timeout regardless of how
many services are slow.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone

import httpx

from common_core.error_enums import HealthFailureReason
from taskflow_service_libs.logging_utils import create_service_logger
from services.api_gateway_service.implementations.service_registry import ServiceRegistry
from services.api_gateway_service.models import (
    HealthReport,
    HealthyService,
    ServiceDescriptor,
    ServiceHealth,
    UnhealthyService,
)
from services.api_gateway_service.protocols import MetricsProtocol

logger = create_service_logger("api_gateway.health_monitor")


class HealthMonitor:
    def __init__(
        self,
        registry: ServiceRegistry,
        client: httpx.AsyncClient,
        timeout: float,
        metrics: MetricsProtocol,
    ) -> None:
        self._registry = registry
        self._client = client
        self._timeout = timeout
        self._metrics = metrics

    async def check_all(self, extra: list[ServiceDescriptor] | None = None) -> HealthReport:
        """Check every registered service (plus ``extra``) and wait for all of them."""
        descriptors = self._registry.descriptors() + list(extra or [])
        outcomes = await asyncio.gather(*(self._check_one(descriptor) for descriptor in descriptors))

        services: dict[str, ServiceHealth] = {
            descriptor.name: outcome for descriptor, outcome in zip(descriptors, outcomes)
        }
        overall_healthy = all(isinstance(outcome, HealthyService) for outcome in outcomes)
        if not overall_healthy:
            logger.warning(
                "Aggregate health check found unhealthy services",
                unhealthy=[name for name, item in services.items() if item.status == "unhealthy"],
            )
        return HealthReport(
            services=services,
            overall_healthy=overall_healthy,
            checked_at=datetime.now(timezone.utc),
        )

    async def _check_one(self, descriptor: ServiceDescriptor) -> ServiceHealth:
        url = f"{descriptor.base_url}/health"
        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self._client.get(url, timeout=self._timeout), timeout=self._timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return self._unhealthy(
                descriptor,
                url,
                start,
                HealthFailureReason.TIMEOUT,
                f"No response within {self._timeout:g}s",
            )
        except httpx.TransportError as exc:
            return self._unhealthy(
                descriptor,
                url,
                start,
                HealthFailureReason.TRANSPORT_ERROR,
                str(exc) or type(exc).__name__,
            )

        if not response.is_success:
            return self._unhealthy(
                descriptor,
                url,
                start,
                HealthFailureReason.UNEXPECTED_STATUS,
                f"Health endpoint returned HTTP {response.status_code}",
            )

        try:
            payload = response.json()
        except ValueError as exc:
            return self._unhealthy(
                descriptor, url, start, HealthFailureReason.MALFORMED_BODY, str(exc)
            )
        if not isinstance(payload, dict):
            return self._unhealthy(
                descriptor,
                url,
                start,
                HealthFailureReason.MALFORMED_BODY,
                "Health payload is not a JSON object",
            )

        self._metrics.health_checks_total.labels(
            service=descriptor.name, status="healthy", reason="none"
        ).inc()
        return HealthyService(
            name=descriptor.name,
            display_name=descriptor.display_name,
            url=url,
            latency_ms=_elapsed_ms(start),
            payload=payload,
        )

    def _unhealthy(
        self,
        descriptor: ServiceDescriptor,
        url: str,
        start: float,
        reason: HealthFailureReason,
        error: str,
    ) -> UnhealthyService:
        self._metrics.health_checks_total.labels(
            service=descriptor.name, status="unhealthy", reason=reason.value
        ).inc()
        logger.info(
            "Health check failed", service=descriptor.name, reason=reason.value, error=error
        )
        return UnhealthyService(
            name=descriptor.name,
            display_name=descriptor.display_name,
            url=url,
            latency_ms=_elapsed_ms(start),
            reason=reason,
            error=error,
        )


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
