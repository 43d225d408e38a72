from __future__ import annotations

import time

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from common_core.error_enums import ErrorCode
from taskflow_service_libs.error_handling.fastapi import build_error_body
from services.api_gateway_service.config import Settings


def build_limiter(config: Settings) -> Limiter:
    """Per-client limiter; Redis-backed in production when ``REDIS_URL`` is set."""
    use_distributed = config.is_production() and bool(config.REDIS_URL)

    if use_distributed:
        return Limiter(
            key_func=get_remote_address,
            default_limits=[config.rate_limit_expression()],
            storage_uri=config.REDIS_URL,
            enabled=config.RATE_LIMIT_ENABLED,
            headers_enabled=True,
        )
    # Outside production or without a Redis URL, use in-memory storage
    return Limiter(
        key_func=get_remote_address,
        default_limits=[config.rate_limit_expression()],
        enabled=config.RATE_LIMIT_ENABLED,
        headers_enabled=True,
    )


def rate_limit_headers(limiter: Limiter, view_limit: tuple) -> dict[str, str]:
    """``X-RateLimit-*`` and ``Retry-After`` values for the limit that was hit.

    Read from the ``limits`` window statistics; slowapi only exposes header
    injection as a private helper.
    """
    limit_item, key_parts = view_limit
    reset_at, remaining = limiter.limiter.get_window_stats(limit_item, *key_parts)
    reset_in = 1 + reset_at
    return {
        "X-RateLimit-Limit": str(limit_item.amount),
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(reset_in),
        "Retry-After": str(max(int(reset_in - time.time()), 0)),
    }


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> Response:
    """Render a 429 in the gateway's error body shape.

    Synchronous because ``SlowAPIMiddleware`` calls the handler without awaiting.
    """
    detail = exc.detail if isinstance(exc, RateLimitExceeded) else str(exc)
    headers: dict[str, str] = {}
    limiter: Limiter | None = getattr(request.app.state, "limiter", None)
    view_limit = getattr(request.state, "view_rate_limit", None)
    if limiter is not None and view_limit is not None:
        headers = rate_limit_headers(limiter, view_limit)
    return JSONResponse(
        status_code=429,
        content=build_error_body(
            "Too Many Requests",
            "Too many requests from this IP, please try again later.",
            error_code=ErrorCode.RATE_LIMIT,
            correlation_id=getattr(request.state, "correlation_id", None),
            limit=detail,
        ),
        headers=headers,
    )
