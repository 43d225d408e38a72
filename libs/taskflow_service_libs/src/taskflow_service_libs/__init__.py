"""
Taskflow Service Libraries Package.

Shared infrastructure used by Taskflow HTTP services: structured logging,
the error-handling framework and base configuration.
"""

from .config import TaskflowServiceSettings
from .error_handling import TaskflowError
from .logging_utils import configure_service_logging, create_service_logger

__all__ = [
    "TaskflowError",
    "TaskflowServiceSettings",
    "configure_service_logging",
    "create_service_logger",
]
