"""
Core exception type for Taskflow services.

Every error raised deliberately by service code is a ``TaskflowError`` that
wraps an immutable ``ErrorDetail``. HTTP handlers render the detail; callers
inspect ``error_code`` rather than exception subclasses where possible.
"""

from __future__ import annotations

from typing import Any

from common_core.models.error_models import ErrorDetail


class TaskflowError(Exception):
    """Exception carrying a structured ``ErrorDetail``."""

    def __init__(self, error_detail: ErrorDetail) -> None:
        super().__init__(error_detail.message)
        self.error_detail = error_detail

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def correlation_id(self) -> str:
        return str(self.error_detail.correlation_id)

    @property
    def service(self) -> str:
        return self.error_detail.service

    @property
    def operation(self) -> str:
        return self.error_detail.operation

    def add_detail(self, key: str, value: Any) -> "TaskflowError":
        """Return a new error of the same type with one extra detail entry."""
        details = {**self.error_detail.details, key: value}
        new_detail = self.error_detail.model_copy(update={"details": details})
        clone = self.__class__.__new__(self.__class__)
        TaskflowError.__init__(clone, new_detail)
        return clone

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": str(self),
            "error_detail": self.error_detail.model_dump(mode="json"),
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.error_detail.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.error_code}, "
            f"message={self.error_detail.message!r}, "
            f"service={self.service}, "
            f"operation={self.operation}, "
            f"correlation_id={self.correlation_id})"
        )
