"""Routing value types: service descriptors and route rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class HttpMethod(str, Enum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ServiceDescriptor:
    """One backend service, loaded from configuration at startup."""

    name: str
    display_name: str
    base_url: str

    def url_for(self, path: str, query: str = "") -> str:
        url = f"{self.base_url}{path}"
        if query:
            url = f"{url}?{query}"
        return url


@dataclass(frozen=True)
class RouteRule:
    method: HttpMethod
    path_pattern: str
    service_name: str

    @property
    def segments(self) -> tuple[str, ...]:
        return split_path(self.path_pattern)


def split_path(path: str) -> tuple[str, ...]:
    """Split a path into segments, ignoring the leading and one trailing slash."""
    trimmed = path[1:] if path.startswith("/") else path
    if trimmed.endswith("/"):
        trimmed = trimmed[:-1]
    if not trimmed:
        return ()
    return tuple(trimmed.split("/"))
