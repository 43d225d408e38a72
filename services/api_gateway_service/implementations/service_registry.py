"""Static registry of backend services, built once from settings."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from services.api_gateway_service.config import Settings
from services.api_gateway_service.exceptions import UnknownService
from services.api_gateway_service.models import ServiceDescriptor

# (logical name, display name, settings attribute) in registration order
SERVICE_DEFINITIONS: tuple[tuple[str, str, str], ...] = (
    ("auth", "Auth Service", "AUTH_SERVICE_URL"),
    ("task", "Task Service", "TASK_SERVICE_URL"),
    ("notification", "Notification Service", "NOTIFICATION_SERVICE_URL"),
    ("reporting", "Reporting Service", "REPORTING_SERVICE_URL"),
    ("admin", "Admin Service", "ADMIN_SERVICE_URL"),
)


class ServiceRegistry:
    """Read-only mapping from logical service name to descriptor.

    Safe to share across concurrent requests; nothing mutates it after
    construction.
    """

    def __init__(self, descriptors: Iterable[ServiceDescriptor]) -> None:
        entries: dict[str, ServiceDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in entries:
                raise ValueError(f"Service '{descriptor.name}' registered twice")
            entries[descriptor.name] = ServiceDescriptor(
                name=descriptor.name,
                display_name=descriptor.display_name,
                base_url=descriptor.base_url.rstrip("/"),
            )
        self._entries: Mapping[str, ServiceDescriptor] = MappingProxyType(entries)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceRegistry":
        return cls(
            ServiceDescriptor(
                name=name,
                display_name=display_name,
                base_url=getattr(settings, attribute),
            )
            for name, display_name, attribute in SERVICE_DEFINITIONS
        )

    def resolve(self, name: str) -> ServiceDescriptor:
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownService(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def names(self) -> list[str]:
        return list(self._entries)

    def descriptors(self) -> list[ServiceDescriptor]:
        return list(self._entries.values())
