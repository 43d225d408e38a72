"""CLI tool for checking the health of the gateway and every backend service.

Usage:
    # Check the gateway and all registered backends
    taskflow-healthcheck

    # Backends only, machine-readable output
    taskflow-healthcheck --no-gateway --json

Exit Codes:
    0: All services healthy
    1: At least one service unhealthy
"""

from __future__ import annotations

import asyncio
from enum import Enum

import httpx
import typer
from prometheus_client import CollectorRegistry
from rich.console import Console
from rich.markup import escape

from services.api_gateway_service.app.metrics import GatewayMetrics
from services.api_gateway_service.config import Settings
from services.api_gateway_service.implementations.health_monitor import HealthMonitor
from services.api_gateway_service.implementations.service_registry import ServiceRegistry
from services.api_gateway_service.models import (
    HealthReport,
    HealthyService,
    ServiceDescriptor,
    UnhealthyService,
)

APP = typer.Typer(help="Check the health of the API gateway and its backend services")
console = Console()

GATEWAY_NAME = "gateway"


class ExitCode(int, Enum):
    """CLI exit codes."""

    ALL_HEALTHY = 0
    UNHEALTHY = 1


async def run_health_check(
    settings: Settings,
    gateway_url: str | None = None,
    timeout: float | None = None,
) -> HealthReport:
    """Check every registered backend, plus the gateway itself when ``gateway_url`` is set."""
    registry = ServiceRegistry.from_settings(settings)
    extra = (
        [ServiceDescriptor(GATEWAY_NAME, "API Gateway", gateway_url.rstrip("/"))]
        if gateway_url
        else []
    )
    check_timeout = timeout or settings.HEALTH_CHECK_TIMEOUT_SECONDS
    async with httpx.AsyncClient() as client:
        monitor = HealthMonitor(
            registry,
            client,
            check_timeout,
            GatewayMetrics(registry=CollectorRegistry()),
        )
        return await monitor.check_all(extra=extra)


def render_report(report: HealthReport) -> None:
    console.print("🔍 Checking service health...\n")
    for item in report.services.values():
        if isinstance(item, HealthyService):
            console.print(f"✅ {escape(item.display_name)} ({escape(item.url)}): healthy")
        elif isinstance(item, UnhealthyService):
            console.print(f"❌ {escape(item.display_name)} ({escape(item.url)}): unhealthy")
            console.print(f"   Error [{item.reason.value}]: {item.error}", markup=False)

    console.print("\n" + "=" * 50)
    if report.overall_healthy:
        console.print("🎉 All services are healthy!")
    else:
        console.print("⚠️  Some services are unhealthy!")


@APP.command()
def check(
    json_output: bool = typer.Option(
        False, "--json", help="Print the full health report as JSON"
    ),
    include_gateway: bool = typer.Option(
        True, "--gateway/--no-gateway", help="Also check the gateway's own /health"
    ),
    gateway_url: str | None = typer.Option(
        None, "--gateway-url", help="Gateway base URL (default: http://localhost:<HTTP_PORT>)"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", "-t", min=0.001, help="Per-service timeout in seconds"
    ),
) -> None:
    """Check every service's /health endpoint concurrently."""
    settings = Settings()
    target_gateway = None
    if include_gateway:
        target_gateway = gateway_url or f"http://localhost:{settings.HTTP_PORT}"

    report = asyncio.run(run_health_check(settings, target_gateway, timeout))

    if json_output:
        typer.echo(report.model_dump_json(indent=2))
    else:
        render_report(report)

    exit_code = ExitCode.ALL_HEALTHY if report.overall_healthy else ExitCode.UNHEALTHY
    raise typer.Exit(code=exit_code.value)


def main() -> None:
    APP()


if __name__ == "__main__":
    main()
