"""
FastAPI integration for the Taskflow error-handling framework.

Renders every error as ``{"error": <summary>, "message": <detail>, ...}`` so
clients see one body shape regardless of where the failure originated.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common_core.error_enums import ErrorCode

from ..logging_utils import create_service_logger
from .taskflow_error import TaskflowError

logger = create_service_logger("taskflow_service_libs.error_handling")

ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    ErrorCode.ROUTE_NOT_FOUND: 404,
    ErrorCode.METHOD_NOT_ALLOWED: 405,
    ErrorCode.PAYLOAD_TOO_LARGE: 413,
    ErrorCode.RATE_LIMIT: 429,
    ErrorCode.SERVICE_UNAVAILABLE: 503,
}

DEFAULT_TITLES: dict[ErrorCode, str] = {
    ErrorCode.ROUTE_NOT_FOUND: "Route not found",
    ErrorCode.METHOD_NOT_ALLOWED: "Method Not Allowed",
    ErrorCode.PAYLOAD_TOO_LARGE: "Payload Too Large",
    ErrorCode.RATE_LIMIT: "Too Many Requests",
    ErrorCode.SERVICE_UNAVAILABLE: "Service Unavailable",
}


def build_error_body(
    error: str,
    message: str,
    *,
    error_code: ErrorCode | str | None = None,
    correlation_id: UUID | str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Assemble the client-facing JSON error body."""
    body: dict[str, Any] = {"error": error, "message": message}
    if error_code is not None:
        body["error_code"] = error_code.value if isinstance(error_code, ErrorCode) else error_code
    if correlation_id is not None:
        body["correlation_id"] = str(correlation_id)
    body.update(extra)
    return body


def _request_correlation_id(request: Request) -> UUID | None:
    return getattr(request.state, "correlation_id", None)


def register_error_handlers(app: FastAPI) -> None:
    """Attach Taskflow error handlers to a FastAPI application."""

    @app.exception_handler(TaskflowError)
    async def handle_taskflow_error(request: Request, exc: TaskflowError) -> JSONResponse:
        detail = exc.error_detail
        status_code = ERROR_CODE_TO_STATUS.get(detail.error_code, 500)
        title = detail.title or DEFAULT_TITLES.get(detail.error_code, "Internal Server Error")
        log = logger.warning if status_code < 500 else logger.error
        log(
            "Request failed",
            error_code=detail.error_code.value,
            status_code=status_code,
            operation=detail.operation,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=status_code,
            content=build_error_body(
                title,
                detail.message,
                error_code=detail.error_code,
                correlation_id=_request_correlation_id(request) or detail.correlation_id,
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == 404:
            body = build_error_body(
                "Route not found",
                f"Cannot {request.method} {request.url.path}",
                error_code=ErrorCode.ROUTE_NOT_FOUND,
                correlation_id=_request_correlation_id(request),
            )
        elif exc.status_code == 405:
            body = build_error_body(
                "Method Not Allowed",
                f"Cannot {request.method} {request.url.path}",
                error_code=ErrorCode.METHOD_NOT_ALLOWED,
                correlation_id=_request_correlation_id(request),
            )
        else:
            body = build_error_body(
                "HTTP Error",
                str(exc.detail),
                correlation_id=_request_correlation_id(request),
            )
        return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled error: {exc}",
            path=request.url.path,
            method=request.method,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=build_error_body(
                "Internal Server Error",
                str(exc) or "Something went wrong",
                error_code=ErrorCode.UNKNOWN_ERROR,
                correlation_id=_request_correlation_id(request),
            ),
        )
