"""
Factory functions that raise ``TaskflowError`` for well-known failure classes.

Each factory builds the ErrorDetail and raises; none of them return.
"""

from __future__ import annotations

from typing import Any, NoReturn
from uuid import UUID

from common_core.error_enums import ErrorCode

from .error_detail_factory import create_error_detail_with_context
from .taskflow_error import TaskflowError


def _raise(
    error_code: ErrorCode,
    *,
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID | None,
    title: str | None = None,
    **details: Any,
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=error_code,
        message=message,
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details=details,
        title=title,
    )
    raise TaskflowError(error_detail)


def raise_configuration_error(
    service: str,
    operation: str,
    config_key: str,
    message: str,
    correlation_id: UUID | None = None,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.CONFIGURATION_ERROR,
        service=service,
        operation=operation,
        message=message,
        correlation_id=correlation_id,
        config_key=config_key,
        **additional_context,
    )


def raise_payload_too_large(
    service: str,
    operation: str,
    limit_bytes: int,
    correlation_id: UUID | None = None,
) -> NoReturn:
    _raise(
        ErrorCode.PAYLOAD_TOO_LARGE,
        service=service,
        operation=operation,
        message=f"Request body exceeds the {limit_bytes} byte limit",
        correlation_id=correlation_id,
        title="Payload Too Large",
        limit_bytes=limit_bytes,
    )
