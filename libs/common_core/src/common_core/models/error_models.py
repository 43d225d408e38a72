"""
common_core.models.error_models - Structured error payloads shared by services.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from common_core.error_enums import ErrorCode


class ErrorDetail(BaseModel):
    """Canonical description of a failure raised inside a service.

    The ``title`` is the short human summary rendered as ``error`` in HTTP
    bodies; ``message`` carries the detail.
    """

    model_config = ConfigDict(frozen=True)

    error_code: ErrorCode
    message: str
    correlation_id: UUID
    timestamp: datetime
    service: str
    operation: str
    title: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    stack_trace: str | None = None
