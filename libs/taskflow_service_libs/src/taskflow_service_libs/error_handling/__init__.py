"""Structured error handling for Taskflow services."""

from .error_detail_factory import create_error_detail_with_context
from .factories import (
    raise_configuration_error,
    raise_payload_too_large,
)
from .taskflow_error import TaskflowError

__all__ = [
    "TaskflowError",
    "create_error_detail_with_context",
    "raise_configuration_error",
    "raise_payload_too_large",
]
