"""
Taskflow Common Core Package.
"""

from .config_enums import Environment
from .error_enums import ErrorCode, HealthFailureReason
from .models.error_models import ErrorDetail

__all__ = [
    "Environment",
    "ErrorCode",
    "ErrorDetail",
    "HealthFailureReason",
]
