"""
Gateway-specific errors.

All three are ``TaskflowError`` subclasses so the shared FastAPI handlers
render them. ``NoRouteMatched`` is a per-request outcome (404);
``UnknownService`` and ``AmbiguousRouteTable`` are configuration faults
raised while compiling the route table at startup.
"""

from __future__ import annotations

from uuid import UUID

from common_core.error_enums import ErrorCode
from taskflow_service_libs.error_handling import (
    TaskflowError,
    create_error_detail_with_context,
)

SERVICE = "api_gateway_service"


class NoRouteMatched(TaskflowError):
    def __init__(self, method: str, path: str, correlation_id: UUID | None = None) -> None:
        super().__init__(
            create_error_detail_with_context(
                error_code=ErrorCode.ROUTE_NOT_FOUND,
                message=f"Cannot {method} {path}",
                service=SERVICE,
                operation="route_table.match",
                correlation_id=correlation_id,
                details={"method": method, "path": path},
                title="Route not found",
            )
        )
        self.method = method
        self.path = path


class UnknownService(TaskflowError):
    def __init__(self, name: str) -> None:
        super().__init__(
            create_error_detail_with_context(
                error_code=ErrorCode.UNKNOWN_SERVICE,
                message=f"Service '{name}' is not registered",
                service=SERVICE,
                operation="service_registry.resolve",
                details={"service_name": name},
                title="Unknown Service",
            )
        )
        self.name = name


class AmbiguousRouteTable(TaskflowError):
    def __init__(self, method: str, first: str, second: str) -> None:
        super().__init__(
            create_error_detail_with_context(
                error_code=ErrorCode.AMBIGUOUS_ROUTE,
                message=(
                    f"Routes {method} {first} and {method} {second} match the same requests"
                ),
                service=SERVICE,
                operation="route_table.compile",
                details={"method": method, "patterns": [first, second]},
                title="Ambiguous Route Table",
            )
        )
