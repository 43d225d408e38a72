"""Startup setup for API Gateway Service."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dishka import AsyncContainer, Provider, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from taskflow_service_libs.logging_utils import create_service_logger
from services.api_gateway_service.app.di import ApiGatewayProvider
from services.api_gateway_service.config import Settings
from services.api_gateway_service.implementations.route_table import RouteTable
from services.api_gateway_service.implementations.service_registry import ServiceRegistry

logger = create_service_logger("api_gateway_service.startup")


def create_di_container(
    config: Settings | None = None, *providers: Provider
) -> AsyncContainer:
    """Create and configure the DI container."""
    try:
        logger.info("Creating DI container...")
        container = make_async_container(
            *(providers or (ApiGatewayProvider(config),)),
            FastapiProvider(),  # Provides Request object to context
        )
        logger.info("DI container created successfully")
        return container
    except Exception as e:
        logger.critical(f"Failed to create DI container: {e}", exc_info=True)
        raise


def setup_dependency_injection(app: FastAPI, container: AsyncContainer) -> None:
    """Setup Dishka integration with FastAPI."""
    try:
        logger.info("Setting up dependency injection...")
        setup_dishka(container, app)
        logger.info("Dependency injection setup completed")
    except Exception as e:
        logger.critical(f"Failed to setup dependency injection: {e}", exc_info=True)
        raise


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Validate the route table before serving and close the container on shutdown.

    An unknown service name or an ambiguous rule pair aborts startup.
    """
    container: AsyncContainer = app.state.dishka_container
    registry = await container.get(ServiceRegistry)
    route_table = await container.get(RouteTable)
    logger.info(
        "API Gateway Service started",
        services=registry.names(),
        routes=len(route_table),
    )
    try:
        yield
    finally:
        await container.close()
        logger.info("API Gateway Service shutdown completed")
