"""Factory for ``ErrorDetail`` instances with automatic context capture."""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from common_core.error_enums import ErrorCode
from common_core.models.error_models import ErrorDetail


def create_error_detail_with_context(
    error_code: ErrorCode,
    message: str,
    service: str,
    operation: str,
    correlation_id: UUID | None = None,
    details: dict[str, Any] | None = None,
    title: str | None = None,
    capture_stack: bool = False,
) -> ErrorDetail:
    """
    Build an ErrorDetail, filling in timestamp and correlation ID.

    Args:
        error_code: Canonical error code
        message: Human readable detail
        service: Name of the service raising the error
        operation: Operation that failed
        correlation_id: Request correlation ID (generated when omitted)
        details: Additional structured context
        title: Short summary rendered as ``error`` in HTTP bodies
        capture_stack: Whether to record the current stack

    Returns:
        A frozen ErrorDetail
    """
    stack_trace = "".join(traceback.format_stack()[:-1]) if capture_stack else None
    return ErrorDetail(
        error_code=error_code,
        message=message,
        correlation_id=correlation_id or uuid4(),
        timestamp=datetime.now(timezone.utc),
        service=service,
        operation=operation,
        title=title,
        details=details or {},
        stack_trace=stack_trace,
    )
