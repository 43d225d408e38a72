"""Per-request forwarding values and the downstream result union."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

HeaderList = list[tuple[str, str]]


@dataclass(frozen=True)
class ForwardRequest:
    """Snapshot of an inbound request, consumed once by the downstream client."""

    method: str
    path: str
    query: str
    headers: HeaderList
    body: bytes
    client_ip: str | None = None
    scheme: str = "http"
    host: str | None = None


@dataclass(frozen=True)
class Success:
    status: int
    headers: HeaderList = field(default_factory=list)
    body: bytes = b""


@dataclass(frozen=True)
class UpstreamError:
    """The backend answered with a 4xx/5xx; relayed to the caller as-is."""

    status: int
    headers: HeaderList = field(default_factory=list)
    body: bytes = b""


class UnavailableReason(str, Enum):
    TIMEOUT = "timeout"
    CONNECT_ERROR = "connect_error"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class Unavailable:
    """No HTTP response was obtained from the backend."""

    reason: UnavailableReason
    detail: str = ""


ForwardResult = Success | UpstreamError | Unavailable
