"""Downstream service client for the API Gateway.

Issues exactly one HTTP request per call against a backend and reports the
outcome as a ``ForwardResult``. Transport failures are returned as
``Unavailable`` values, never raised to the caller.
"""

from __future__ import annotations

import time
from http.cookiejar import DefaultCookiePolicy

import httpx

from taskflow_service_libs.logging_utils import create_service_logger
from services.api_gateway_service.models import (
    ForwardRequest,
    ForwardResult,
    HeaderList,
    ServiceDescriptor,
    Success,
    Unavailable,
    UnavailableReason,
    UpstreamError,
)
from services.api_gateway_service.protocols import MetricsProtocol

logger = create_service_logger("api_gateway.http_client")

# Regenerated per hop by the transport; never copied from the inbound request.
STRIPPED_REQUEST_HEADERS: frozenset[str] = frozenset(
    {
        "host",
        "content-length",
        "connection",
        "keep-alive",
        "transfer-encoding",
        "te",
        "trailer",
        "upgrade",
    }
)

STRIPPED_RESPONSE_HEADERS: frozenset[str] = frozenset(
    {
        "content-length",
        "connection",
        "keep-alive",
        "transfer-encoding",
        "te",
        "trailer",
        "upgrade",
        "proxy-connection",
    }
)

FORWARDED_HEADERS = ("x-forwarded-for", "x-forwarded-proto", "x-forwarded-host")


def build_outbound_headers(forward_request: ForwardRequest) -> HeaderList:
    """Copy inbound headers minus the strip-list and add the ``X-Forwarded-*`` set."""
    headers: HeaderList = []
    existing_chain: list[str] = []
    for name, value in forward_request.headers:
        lowered = name.lower()
        if lowered in STRIPPED_REQUEST_HEADERS:
            continue
        if lowered == "x-forwarded-for":
            existing_chain.append(value)
            continue
        if lowered in FORWARDED_HEADERS:
            continue
        headers.append((name, value))

    if forward_request.client_ip:
        existing_chain.append(forward_request.client_ip)
    if existing_chain:
        headers.append(("X-Forwarded-For", ", ".join(existing_chain)))
    headers.append(("X-Forwarded-Proto", forward_request.scheme))
    if forward_request.host:
        headers.append(("X-Forwarded-Host", forward_request.host))
    return headers


def without_cookie_persistence(client: httpx.AsyncClient) -> httpx.AsyncClient:
    """Refuse every cookie on the shared client.

    One client serves all callers; backend ``Set-Cookie`` values belong to the
    caller they were relayed to and must never reach the jar.
    """
    client.cookies.jar.set_policy(DefaultCookiePolicy(allowed_domains=[]))
    return client


def relayable_response_headers(response: httpx.Response) -> HeaderList:
    return [
        (name, value)
        for name, value in response.headers.multi_items()
        if name.lower() not in STRIPPED_RESPONSE_HEADERS
    ]


class DownstreamServiceClient:
    """Single-shot HTTP client shared by every forwarded request.

    The outbound request is built directly with ``httpx.Request`` so the
    shared client's default headers are never merged in, and redirects are
    relayed to the caller rather than followed.
    """

    def __init__(self, client: httpx.AsyncClient, metrics: MetricsProtocol) -> None:
        self._client = client
        self._metrics = metrics

    async def send(
        self,
        descriptor: ServiceDescriptor,
        forward_request: ForwardRequest,
        timeout: float,
    ) -> ForwardResult:
        url = descriptor.url_for(forward_request.path, forward_request.query)
        request = httpx.Request(
            forward_request.method,
            url,
            headers=build_outbound_headers(forward_request),
            content=forward_request.body,
            extensions={"timeout": httpx.Timeout(timeout).as_dict()},
        )

        start = time.perf_counter()
        try:
            response = await self._client.send(request, stream=True, follow_redirects=False)
            try:
                body = b"".join([chunk async for chunk in response.aiter_raw()])
            finally:
                await response.aclose()
        except httpx.TimeoutException as exc:
            return self._unavailable(
                descriptor, forward_request, UnavailableReason.TIMEOUT, exc, start
            )
        except httpx.ConnectError as exc:
            return self._unavailable(
                descriptor, forward_request, UnavailableReason.CONNECT_ERROR, exc, start
            )
        except httpx.TransportError as exc:
            return self._unavailable(
                descriptor, forward_request, UnavailableReason.TRANSPORT_ERROR, exc, start
            )

        self._record(descriptor, forward_request, start, outcome=None, status=response.status_code)
        headers = relayable_response_headers(response)
        if response.status_code >= 400:
            logger.info(
                "Downstream service returned an error status",
                service=descriptor.name,
                status_code=response.status_code,
                url=url,
            )
            return UpstreamError(status=response.status_code, headers=headers, body=body)
        return Success(status=response.status_code, headers=headers, body=body)

    def _unavailable(
        self,
        descriptor: ServiceDescriptor,
        forward_request: ForwardRequest,
        reason: UnavailableReason,
        exc: httpx.HTTPError,
        start: float,
    ) -> Unavailable:
        self._record(descriptor, forward_request, start, outcome=reason.value, status=None)
        logger.warning(
            "Downstream service unavailable",
            service=descriptor.name,
            method=forward_request.method,
            path=forward_request.path,
            reason=reason.value,
            error=str(exc) or type(exc).__name__,
        )
        return Unavailable(reason=reason, detail=str(exc) or type(exc).__name__)

    def _record(
        self,
        descriptor: ServiceDescriptor,
        forward_request: ForwardRequest,
        start: float,
        outcome: str | None,
        status: int | None,
    ) -> None:
        if outcome is None:
            outcome = "upstream_error" if status is not None and status >= 400 else "success"
        self._metrics.downstream_service_call_duration_seconds.labels(
            service=descriptor.name, method=forward_request.method
        ).observe(time.perf_counter() - start)
        self._metrics.downstream_service_calls_total.labels(
            service=descriptor.name,
            method=forward_request.method,
            outcome=outcome,
            status_code=str(status) if status is not None else "none",
        ).inc()
