"""
Shared fixtures for API Gateway Service tests.

App-level tests build the real application through ``create_app`` with a
test container; component tests construct implementations directly.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from services.api_gateway_service.app.metrics import GatewayMetrics
from services.api_gateway_service.config import Settings
from services.api_gateway_service.implementations.service_registry import ServiceRegistry
from services.api_gateway_service.models import ServiceDescriptor
from services.api_gateway_service.tests.test_provider import (
    build_test_app,
    make_test_settings,
)


@pytest.fixture
def test_settings() -> Settings:
    return make_test_settings()


@pytest.fixture
def service_registry(test_settings: Settings) -> ServiceRegistry:
    return ServiceRegistry.from_settings(test_settings)


@pytest.fixture
def task_descriptor(service_registry: ServiceRegistry) -> ServiceDescriptor:
    return service_registry.resolve("task")


@pytest.fixture
def metrics_registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def gateway_metrics(metrics_registry: CollectorRegistry) -> GatewayMetrics:
    """GatewayMetrics bound to an isolated registry for test independence."""
    return GatewayMetrics(registry=metrics_registry)


@pytest.fixture
def gateway_app(test_settings: Settings) -> FastAPI:
    return build_test_app(test_settings)


@pytest.fixture
def client(gateway_app: FastAPI) -> Iterator[TestClient]:
    """TestClient running the app lifespan; the container closes on exit."""
    with TestClient(gateway_app) as test_client:
        yield test_client
