"""Shared pydantic models for Taskflow services."""

from .error_models import ErrorDetail

__all__ = ["ErrorDetail"]
