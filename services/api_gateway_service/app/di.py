from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from dishka import Provider, Scope, provide
from prometheus_client import REGISTRY, CollectorRegistry

from services.api_gateway_service.app.metrics import GatewayMetrics
from services.api_gateway_service.config import Settings, settings
from services.api_gateway_service.implementations.health_monitor import HealthMonitor
from services.api_gateway_service.implementations.http_client import (
    DownstreamServiceClient,
    without_cookie_persistence,
)
from services.api_gateway_service.implementations.request_forwarder import RequestForwarder
from services.api_gateway_service.implementations.route_table import RouteTable
from services.api_gateway_service.implementations.service_registry import ServiceRegistry
from services.api_gateway_service.protocols import (
    DownstreamClientProtocol,
    HealthMonitorProtocol,
    MetricsProtocol,
)
from services.api_gateway_service.route_definitions import load_route_rules


class ApiGatewayProvider(Provider):
    scope = Scope.APP

    def __init__(self, config: Settings | None = None) -> None:
        super().__init__()
        self._config = config or settings

    @provide
    def get_config(self) -> Settings:
        return self._config

    @provide
    def provide_service_registry(self, config: Settings) -> ServiceRegistry:
        return ServiceRegistry.from_settings(config)

    @provide
    def provide_route_table(self, config: Settings, registry: ServiceRegistry) -> RouteTable:
        return RouteTable.compile(load_route_rules(config.ROUTE_TABLE_PATH), registry)

    @provide
    async def get_http_client(self, config: Settings) -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(
                config.FORWARD_TIMEOUT_SECONDS,
                connect=config.HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS,
            ),
            follow_redirects=False,
        ) as client:
            yield without_cookie_persistence(client)

    @provide
    def provide_downstream_client(
        self, client: httpx.AsyncClient, metrics: MetricsProtocol
    ) -> DownstreamClientProtocol:
        return DownstreamServiceClient(client, metrics)

    @provide
    def provide_request_forwarder(
        self,
        registry: ServiceRegistry,
        route_table: RouteTable,
        client: DownstreamClientProtocol,
        config: Settings,
        metrics: MetricsProtocol,
    ) -> RequestForwarder:
        return RequestForwarder(registry, route_table, client, config, metrics)

    @provide
    def provide_health_monitor(
        self,
        registry: ServiceRegistry,
        client: httpx.AsyncClient,
        config: Settings,
        metrics: MetricsProtocol,
    ) -> HealthMonitorProtocol:
        return HealthMonitor(registry, client, config.HEALTH_CHECK_TIMEOUT_SECONDS, metrics)

    @provide
    def provide_registry(self) -> CollectorRegistry:
        return REGISTRY

    @provide
    def provide_metrics(self, registry: CollectorRegistry) -> MetricsProtocol:
        return GatewayMetrics(registry=registry)
