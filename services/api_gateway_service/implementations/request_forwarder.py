"""Request forwarding pipeline: match, resolve, dispatch, relay."""

from __future__ import annotations

from uuid import UUID

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from common_core.error_enums import ErrorCode
from taskflow_service_libs.error_handling import raise_payload_too_large
from taskflow_service_libs.error_handling.fastapi import build_error_body
from taskflow_service_libs.logging_utils import create_service_logger
from services.api_gateway_service.config import Settings
from services.api_gateway_service.exceptions import SERVICE, NoRouteMatched
from services.api_gateway_service.implementations.route_table import RouteTable
from services.api_gateway_service.implementations.service_registry import ServiceRegistry
from services.api_gateway_service.models import (
    ForwardRequest,
    ForwardResult,
    ServiceDescriptor,
    Unavailable,
)
from services.api_gateway_service.protocols import DownstreamClientProtocol, MetricsProtocol

logger = create_service_logger("api_gateway.request_forwarder")


def inbound_path(scope: dict) -> str:
    """Return the request path as received, minus the gateway's own mount prefix.

    ``raw_path`` keeps percent-encoding intact; ``path`` is the decoded
    fallback for servers that do not supply it.
    """
    raw_path = scope.get("raw_path")
    if raw_path:
        path = raw_path.decode("latin-1").split("?", 1)[0]
    else:
        path = scope.get("path", "/")

    root_path = scope.get("root_path", "")
    if root_path and (path == root_path or path.startswith(root_path + "/")):
        path = path[len(root_path):] or "/"
    return path


async def build_forward_request(
    request: Request,
    max_body_bytes: int,
    correlation_id: UUID | None = None,
) -> ForwardRequest:
    """Snapshot the inbound request; raises a 413 error once the body exceeds the limit."""
    declared_length = request.headers.get("content-length")
    if declared_length and declared_length.isdigit() and int(declared_length) > max_body_bytes:
        raise_payload_too_large(SERVICE, "build_forward_request", max_body_bytes, correlation_id)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_body_bytes:
            raise_payload_too_large(SERVICE, "build_forward_request", max_body_bytes, correlation_id)

    return ForwardRequest(
        method=request.method.upper(),
        path=inbound_path(request.scope),
        query=request.scope.get("query_string", b"").decode("latin-1"),
        headers=[
            (name.decode("latin-1"), value.decode("latin-1"))
            for name, value in request.scope.get("headers", [])
        ],
        body=bytes(body),
        client_ip=request.client.host if request.client else None,
        scheme=request.url.scheme,
        host=request.headers.get("host"),
    )


def translate(
    result: ForwardResult,
    descriptor: ServiceDescriptor,
    correlation_id: UUID | None = None,
) -> Response:
    """Turn a downstream outcome into the response relayed to the caller."""
    if isinstance(result, Unavailable):
        return JSONResponse(
            status_code=503,
            content=build_error_body(
                f"{descriptor.display_name} Unavailable",
                f"Unable to connect to {descriptor.display_name.lower()}",
                error_code=ErrorCode.SERVICE_UNAVAILABLE,
                correlation_id=correlation_id,
                reason=result.reason.value,
            ),
        )

    response = Response(content=result.body, status_code=result.status)
    for name, value in result.headers:
        response.headers.append(name, value)
    return response


class RequestForwarder:
    """Pure pass-through proxy from the gateway to one backend per request."""

    def __init__(
        self,
        registry: ServiceRegistry,
        route_table: RouteTable,
        client: DownstreamClientProtocol,
        settings: Settings,
        metrics: MetricsProtocol,
    ) -> None:
        self._registry = registry
        self._route_table = route_table
        self._client = client
        self._settings = settings
        self._metrics = metrics

    async def handle(self, request: Request) -> Response:
        correlation_id: UUID | None = getattr(request.state, "correlation_id", None)
        forward_request = await build_forward_request(
            request, self._settings.MAX_REQUEST_BODY_BYTES, correlation_id
        )

        try:
            service_name = self._route_table.match(forward_request.method, forward_request.path)
        except NoRouteMatched:
            self._metrics.api_errors_total.labels(
                endpoint="unmatched", error_type="route_not_found"
            ).inc()
            raise

        descriptor = self._registry.resolve(service_name)
        logger.debug(
            "Forwarding request",
            service=descriptor.name,
            method=forward_request.method,
            path=forward_request.path,
        )
        result = await self._client.send(
            descriptor, forward_request, self._settings.FORWARD_TIMEOUT_SECONDS
        )

        if isinstance(result, Unavailable):
            self._metrics.api_errors_total.labels(
                endpoint=descriptor.name, error_type="service_unavailable"
            ).inc()
        return translate(result, descriptor, correlation_id)
