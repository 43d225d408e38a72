"""
Data models for API Gateway Service.

Routing and forwarding values are frozen dataclasses built once per request or
once per process; health reporting uses Pydantic models because it is
serialized straight into HTTP responses.
"""

from .forwarding import (
    ForwardRequest,
    ForwardResult,
    HeaderList,
    Success,
    Unavailable,
    UnavailableReason,
    UpstreamError,
)
from .health import HealthReport, HealthyService, ServiceHealth, UnhealthyService
from .routing import HttpMethod, RouteRule, ServiceDescriptor, split_path

__all__ = [
    "ForwardRequest",
    "ForwardResult",
    "HeaderList",
    "HealthReport",
    "HealthyService",
    "HttpMethod",
    "RouteRule",
    "ServiceDescriptor",
    "ServiceHealth",
    "Success",
    "Unavailable",
    "UnavailableReason",
    "UnhealthyService",
    "UpstreamError",
    "split_path",
]
