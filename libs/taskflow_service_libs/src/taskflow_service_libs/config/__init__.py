"""Configuration utilities for Taskflow services."""

from .base_settings import TaskflowServiceSettings

__all__ = ["TaskflowServiceSettings"]
