"""Pydantic models for aggregate health reporting."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from common_core.error_enums import HealthFailureReason


class HealthyService(BaseModel):
    status: Literal["healthy"] = "healthy"
    name: str
    display_name: str
    url: str
    latency_ms: float
    payload: dict[str, Any]


class UnhealthyService(BaseModel):
    status: Literal["unhealthy"] = "unhealthy"
    name: str
    display_name: str
    url: str
    latency_ms: float
    reason: HealthFailureReason
    error: str


ServiceHealth = Annotated[HealthyService | UnhealthyService, Field(discriminator="status")]


class HealthReport(BaseModel):
    """Consolidated verdict over every registered service."""

    services: dict[str, ServiceHealth]
    overall_healthy: bool
    checked_at: datetime

    @property
    def unhealthy(self) -> list[UnhealthyService]:
        return [item for item in self.services.values() if isinstance(item, UnhealthyService)]
