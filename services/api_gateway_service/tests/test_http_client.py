"""
Tests for DownstreamServiceClient.

Uses respx to intercept httpx so the outbound request (URL, headers, body,
timeout) can be inspected and transport failures injected.
"""

from __future__ import annotations

import gzip

import httpx
import pytest
from prometheus_client import CollectorRegistry

from services.api_gateway_service.app.metrics import GatewayMetrics
from services.api_gateway_service.implementations.http_client import (
    DownstreamServiceClient,
    build_outbound_headers,
    without_cookie_persistence,
)
from services.api_gateway_service.models import (
    ForwardRequest,
    ServiceDescriptor,
    Success,
    Unavailable,
    UnavailableReason,
    UpstreamError,
)


def make_forward_request(**overrides) -> ForwardRequest:
    values = {
        "method": "GET",
        "path": "/api/tasks/abc123",
        "query": "verbose=true",
        "headers": [("authorization", "Bearer token-1"), ("accept", "application/json")],
        "body": b"",
        "client_ip": "203.0.113.7",
        "scheme": "https",
        "host": "gateway.example.com",
    }
    values.update(overrides)
    return ForwardRequest(**values)


class TestBuildOutboundHeaders:
    def test_adds_forwarding_headers(self) -> None:
        headers = build_outbound_headers(make_forward_request())

        assert headers == [
            ("authorization", "Bearer token-1"),
            ("accept", "application/json"),
            ("X-Forwarded-For", "203.0.113.7"),
            ("X-Forwarded-Proto", "https"),
            ("X-Forwarded-Host", "gateway.example.com"),
        ]

    def test_strips_per_hop_headers_and_keeps_duplicates(self) -> None:
        headers = build_outbound_headers(
            make_forward_request(
                headers=[
                    ("host", "gateway.example.com"),
                    ("content-length", "999"),
                    ("connection", "keep-alive"),
                    ("transfer-encoding", "chunked"),
                    ("x-tag", "a"),
                    ("x-tag", "b"),
                ]
            )
        )

        names = [name.lower() for name, _ in headers]
        assert "host" not in names
        assert "content-length" not in names
        assert "connection" not in names
        assert "transfer-encoding" not in names
        assert [value for name, value in headers if name == "x-tag"] == ["a", "b"]

    def test_appends_client_to_existing_forwarded_chain(self) -> None:
        headers = dict(
            build_outbound_headers(
                make_forward_request(
                    headers=[("x-forwarded-for", "10.0.0.1"), ("x-forwarded-proto", "http")]
                )
            )
        )

        assert headers["X-Forwarded-For"] == "10.0.0.1, 203.0.113.7"
        assert headers["X-Forwarded-Proto"] == "https"
        assert "x-forwarded-proto" not in headers


class TestDownstreamServiceClient:
    @pytest.mark.asyncio
    async def test_preserves_path_and_query(
        self, respx_mock, task_descriptor: ServiceDescriptor, gateway_metrics: GatewayMetrics
    ) -> None:
        route = respx_mock.get(host="task-service.test", path="/api/tasks/abc123").mock(
            return_value=httpx.Response(200, content=b'{"id":"abc123"}')
        )

        async with httpx.AsyncClient() as http_client:
            client = DownstreamServiceClient(http_client, gateway_metrics)
            result = await client.send(task_descriptor, make_forward_request(), timeout=2.0)

        assert isinstance(result, Success)
        assert result.status == 200
        assert result.body == b'{"id":"abc123"}'
        request = route.calls.last.request
        assert str(request.url) == "http://task-service.test/api/tasks/abc123?verbose=true"
        assert request.headers["authorization"] == "Bearer token-1"
        assert request.headers["x-forwarded-for"] == "203.0.113.7"
        assert request.headers["host"] == "task-service.test"
        assert request.extensions["timeout"] == httpx.Timeout(2.0).as_dict()

    @pytest.mark.asyncio
    async def test_percent_encoding_and_raw_query_survive(
        self, respx_mock, task_descriptor: ServiceDescriptor, gateway_metrics: GatewayMetrics
    ) -> None:
        route = respx_mock.get(host="task-service.test").mock(return_value=httpx.Response(200))

        async with httpx.AsyncClient() as http_client:
            client = DownstreamServiceClient(http_client, gateway_metrics)
            await client.send(
                task_descriptor,
                make_forward_request(path="/api/tasks/a%20b", query="tag=x&tag=y&q=%2F"),
                timeout=2.0,
            )

        url = route.calls.last.request.url
        assert url.raw_path == b"/api/tasks/a%20b?tag=x&tag=y&q=%2F"

    @pytest.mark.asyncio
    async def test_body_is_sent_and_length_recomputed(
        self, respx_mock, task_descriptor: ServiceDescriptor, gateway_metrics: GatewayMetrics
    ) -> None:
        route = respx_mock.post(host="task-service.test", path="/api/tasks").mock(
            return_value=httpx.Response(201, json={"created": True})
        )
        body = b'{"title":"Write tests"}'

        async with httpx.AsyncClient() as http_client:
            client = DownstreamServiceClient(http_client, gateway_metrics)
            result = await client.send(
                task_descriptor,
                make_forward_request(
                    method="POST",
                    path="/api/tasks",
                    query="",
                    headers=[("content-type", "application/json"), ("content-length", "999")],
                    body=body,
                ),
                timeout=2.0,
            )

        assert isinstance(result, Success)
        assert result.status == 201
        request = route.calls.last.request
        assert request.content == body
        assert request.headers["content-length"] == str(len(body))
        assert str(request.url) == "http://task-service.test/api/tasks"

    @pytest.mark.asyncio
    async def test_client_default_headers_are_not_injected(
        self, respx_mock, task_descriptor: ServiceDescriptor, gateway_metrics: GatewayMetrics
    ) -> None:
        route = respx_mock.get(host="task-service.test").mock(return_value=httpx.Response(200))

        async with httpx.AsyncClient(headers={"X-Client-Default": "1"}) as http_client:
            client = DownstreamServiceClient(http_client, gateway_metrics)
            await client.send(task_descriptor, make_forward_request(), timeout=2.0)

        assert "x-client-default" not in route.calls.last.request.headers
        assert "user-agent" not in route.calls.last.request.headers

    @pytest.mark.asyncio
    async def test_error_status_is_relayed_verbatim(
        self, respx_mock, task_descriptor: ServiceDescriptor, gateway_metrics: GatewayMetrics
    ) -> None:
        respx_mock.get(host="task-service.test").mock(
            return_value=httpx.Response(
                404,
                content=b'{"message":"Task not found"}',
                headers=[("content-type", "application/json"), ("x-request-id", "r-1")],
            )
        )

        async with httpx.AsyncClient() as http_client:
            client = DownstreamServiceClient(http_client, gateway_metrics)
            result = await client.send(task_descriptor, make_forward_request(), timeout=2.0)

        assert isinstance(result, UpstreamError)
        assert result.status == 404
        assert result.body == b'{"message":"Task not found"}'
        assert ("x-request-id", "r-1") in result.headers

    @pytest.mark.asyncio
    async def test_redirects_are_not_followed(
        self, respx_mock, task_descriptor: ServiceDescriptor, gateway_metrics: GatewayMetrics
    ) -> None:
        respx_mock.get(host="task-service.test").mock(
            return_value=httpx.Response(302, headers={"location": "/api/tasks/other"})
        )

        async with httpx.AsyncClient(follow_redirects=True) as http_client:
            client = DownstreamServiceClient(http_client, gateway_metrics)
            result = await client.send(task_descriptor, make_forward_request(), timeout=2.0)

        assert isinstance(result, Success)
        assert result.status == 302
        assert ("location", "/api/tasks/other") in result.headers

    @pytest.mark.asyncio
    async def test_encoded_body_and_duplicate_headers_are_kept(
        self, respx_mock, task_descriptor: ServiceDescriptor, gateway_metrics: GatewayMetrics
    ) -> None:
        compressed = gzip.compress(b'{"tasks": []}')
        respx_mock.get(host="task-service.test").mock(
            return_value=httpx.Response(
                200,
                content=compressed,
                headers=[
                    ("content-encoding", "gzip"),
                    ("set-cookie", "a=1"),
                    ("set-cookie", "b=2"),
                    ("connection", "close"),
                ],
            )
        )

        async with httpx.AsyncClient() as http_client:
            client = DownstreamServiceClient(http_client, gateway_metrics)
            result = await client.send(task_descriptor, make_forward_request(), timeout=2.0)

        assert isinstance(result, Success)
        assert result.body == compressed
        assert [value for name, value in result.headers if name == "set-cookie"] == ["a=1", "b=2"]
        assert ("content-encoding", "gzip") in result.headers
        assert all(name not in ("connection", "content-length") for name, _ in result.headers)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, reason",
        [
            (httpx.ConnectTimeout, UnavailableReason.TIMEOUT),
            (httpx.ReadTimeout, UnavailableReason.TIMEOUT),
            (httpx.ConnectError, UnavailableReason.CONNECT_ERROR),
            (httpx.RemoteProtocolError, UnavailableReason.TRANSPORT_ERROR),
        ],
    )
    async def test_transport_failures_become_unavailable(
        self,
        respx_mock,
        task_descriptor: ServiceDescriptor,
        gateway_metrics: GatewayMetrics,
        metrics_registry: CollectorRegistry,
        error: type[httpx.TransportError],
        reason: UnavailableReason,
    ) -> None:
        respx_mock.get(host="task-service.test").mock(side_effect=error)

        async with httpx.AsyncClient() as http_client:
            client = DownstreamServiceClient(http_client, gateway_metrics)
            result = await client.send(task_descriptor, make_forward_request(), timeout=2.0)

        assert isinstance(result, Unavailable)
        assert result.reason is reason
        assert (
            metrics_registry.get_sample_value(
                "gateway_downstream_service_calls_total",
                {
                    "service": "task",
                    "method": "GET",
                    "outcome": reason.value,
                    "status_code": "none",
                },
            )
            == 1.0
        )

    @pytest.mark.asyncio
    async def test_records_call_metrics(
        self,
        respx_mock,
        task_descriptor: ServiceDescriptor,
        gateway_metrics: GatewayMetrics,
        metrics_registry: CollectorRegistry,
    ) -> None:
        respx_mock.get(host="task-service.test").mock(return_value=httpx.Response(503))

        async with httpx.AsyncClient() as http_client:
            client = DownstreamServiceClient(http_client, gateway_metrics)
            await client.send(task_descriptor, make_forward_request(), timeout=2.0)

        assert (
            metrics_registry.get_sample_value(
                "gateway_downstream_service_calls_total",
                {
                    "service": "task",
                    "method": "GET",
                    "outcome": "upstream_error",
                    "status_code": "503",
                },
            )
            == 1.0
        )
        assert (
            metrics_registry.get_sample_value(
                "gateway_downstream_service_call_duration_seconds_count",
                {"service": "task", "method": "GET"},
            )
            == 1.0
        )


class TestSharedClientCookies:
    @pytest.mark.asyncio
    async def test_backend_cookies_are_not_kept_or_replayed(
        self, task_descriptor: ServiceDescriptor, gateway_metrics: GatewayMetrics
    ) -> None:
        seen_cookies: list[str | None] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen_cookies.append(request.headers.get("cookie"))
            return httpx.Response(
                200,
                json={"status": "OK"},
                headers={"set-cookie": "session=alice-secret; Path=/"},
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            shared = without_cookie_persistence(http_client)
            client = DownstreamServiceClient(shared, gateway_metrics)
            result = await client.send(task_descriptor, make_forward_request(), timeout=2.0)
            await shared.get("http://task-service.test/health")

            assert len(shared.cookies.jar) == 0

        assert ("set-cookie", "session=alice-secret; Path=/") in result.headers
        assert seen_cookies == [None, None]
