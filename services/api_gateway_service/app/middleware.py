"""Middleware for API Gateway Service."""

import time
from uuid import UUID, uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from taskflow_service_libs.logging_utils import bind_request_context, create_service_logger
from services.api_gateway_service.protocols import MetricsProtocol

logger = create_service_logger("api_gateway.middleware")

# helmet() defaults that apply to a JSON API
SECURITY_HEADERS: dict[str, str] = {
    "Content-Security-Policy": "default-src 'self'",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Middleware to ensure every request has a correlation ID as UUID."""

    async def dispatch(self, request: Request, call_next):
        """Extract or generate correlation ID and store as UUID in request state."""
        x_correlation_id = request.headers.get("X-Correlation-ID")
        if x_correlation_id:
            try:
                correlation_id = UUID(x_correlation_id)
            except ValueError:
                logger.warning(
                    f"Invalid correlation ID format: {x_correlation_id}, generating new one"
                )
                correlation_id = uuid4()
        else:
            correlation_id = uuid4()

        request.state.correlation_id = correlation_id

        response = await call_next(request)

        response.headers["X-Correlation-ID"] = str(correlation_id)

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Set security headers the backend has not already set."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            if name not in response.headers:
                response.headers[name] = value
        if "x-powered-by" in response.headers:
            del response.headers["x-powered-by"]
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind request context for structured logs and record HTTP metrics.

    Must run inside ``CorrelationIDMiddleware`` so the correlation ID is set.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = getattr(request.state, "correlation_id", None)
        bind_request_context(
            correlation_id=str(correlation_id) if correlation_id else None,
            method=request.method,
            path=request.url.path,
        )
        endpoint = _endpoint_label(request.url.path)
        start = time.perf_counter()
        logger.info(
            "Request started",
            client=request.client.host if request.client else "unknown",
        )

        response = await call_next(request)

        duration = time.perf_counter() - start
        metrics: MetricsProtocol = await request.app.state.dishka_container.get(MetricsProtocol)
        metrics.http_requests_total.labels(
            method=request.method, endpoint=endpoint, http_status=str(response.status_code)
        ).inc()
        metrics.http_request_duration_seconds.labels(
            method=request.method, endpoint=endpoint
        ).observe(duration)

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )
        return response


def _endpoint_label(path: str) -> str:
    """Collapse forwarded paths to their mount prefix to keep label cardinality bounded."""
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) >= 2 and segments[0] == "api":
        return f"/api/{segments[1]}"
    if path in ("/health", "/health/services", "/metrics"):
        return path
    return "other"
