"""Health and metrics routes for API Gateway Service."""

from __future__ import annotations

from datetime import datetime, timezone

from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from taskflow_service_libs.logging_utils import create_service_logger
from services.api_gateway_service.implementations.service_registry import ServiceRegistry
from services.api_gateway_service.protocols import HealthMonitorProtocol

router = APIRouter(tags=["Health"])
logger = create_service_logger("api_gateway_service.routers.health")


@router.get("/health")
@inject
async def health_check(registry: FromDishka[ServiceRegistry]) -> dict:
    """Gateway liveness; does not contact the backends."""
    return {
        "status": "OK",
        "message": "API Gateway is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {descriptor.name: descriptor.base_url for descriptor in registry.descriptors()},
    }


@router.get("/health/services")
@inject
async def services_health(monitor: FromDishka[HealthMonitorProtocol]) -> JSONResponse:
    """Aggregate health of every backend: 200 when all are healthy, 503 otherwise."""
    report = await monitor.check_all()
    return JSONResponse(
        status_code=200 if report.overall_healthy else 503,
        content=report.model_dump(mode="json"),
    )


@router.get("/metrics", response_class=PlainTextResponse)
@inject
async def metrics(registry: FromDishka[CollectorRegistry]):
    """Prometheus metrics endpoint."""
    try:
        metrics_data = generate_latest(registry)
        return PlainTextResponse(content=metrics_data, media_type=CONTENT_TYPE_LATEST)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}", exc_info=True)
        return PlainTextResponse(content="Error generating metrics", status_code=500)
