"""
common_core.error_enums - Centralized error code definitions.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Routing and dispatch
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    UNKNOWN_SERVICE = "UNKNOWN_SERVICE"  # Route names a service the registry lacks
    AMBIGUOUS_ROUTE = "AMBIGUOUS_ROUTE"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"

    # Downstream failures
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    RATE_LIMIT = "RATE_LIMIT"


class HealthFailureReason(str, Enum):
    """Why a single service health check was judged unhealthy."""

    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"
    MALFORMED_BODY = "malformed_body"
    UNEXPECTED_STATUS = "unexpected_status"
