"""Tests for per-client rate limiting."""

from __future__ import annotations

from uuid import uuid4

import httpx
from fastapi.testclient import TestClient

from services.api_gateway_service.app.rate_limiter import build_limiter
from services.api_gateway_service.tests.test_provider import build_test_app, make_test_settings


class TestBuildLimiter:
    def test_in_memory_outside_production(self) -> None:
        limiter = build_limiter(
            make_test_settings(ENVIRONMENT="development", REDIS_URL="redis://redis:6379/0")
        )

        assert limiter._storage_uri is None
        assert limiter.enabled is True

    def test_redis_backed_in_production(self) -> None:
        limiter = build_limiter(
            make_test_settings(ENVIRONMENT="production", REDIS_URL="redis://redis:6379/0")
        )

        assert limiter._storage_uri == "redis://redis:6379/0"

    def test_can_be_disabled(self) -> None:
        limiter = build_limiter(make_test_settings(RATE_LIMIT_ENABLED=False))

        assert limiter.enabled is False


class TestRateLimitedRequests:
    def test_requests_over_the_limit_get_429(self) -> None:
        settings = make_test_settings(RATE_LIMIT_REQUESTS=2, RATE_LIMIT_WINDOW_MINUTES=1)
        correlation_id = str(uuid4())

        with TestClient(build_test_app(settings)) as client:
            assert client.get("/health").status_code == 200
            assert client.get("/health").status_code == 200
            response = client.get("/health", headers={"X-Correlation-ID": correlation_id})

        assert response.status_code == 429
        body = response.json()
        assert body["error"] == "Too Many Requests"
        assert body["message"] == "Too many requests from this IP, please try again later."
        assert body["error_code"] == "RATE_LIMIT"
        assert body["correlation_id"] == correlation_id
        assert response.headers["X-Correlation-ID"] == correlation_id
        assert response.headers["X-RateLimit-Limit"] == "2"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert int(response.headers["Retry-After"]) >= 0

    def test_forwarded_routes_are_limited(self, respx_mock) -> None:
        settings = make_test_settings(RATE_LIMIT_REQUESTS=1, RATE_LIMIT_WINDOW_MINUTES=1)
        route = respx_mock.get(host="task-service.test", path="/api/tasks").mock(
            return_value=httpx.Response(200, json=[])
        )

        with TestClient(build_test_app(settings)) as client:
            first = client.get("/api/tasks")
            second = client.get("/api/tasks")

        assert first.status_code == 200
        assert second.status_code == 429
        assert route.call_count == 1

    def test_disabled_limiter_lets_everything_through(self) -> None:
        settings = make_test_settings(RATE_LIMIT_ENABLED=False, RATE_LIMIT_REQUESTS=1)

        with TestClient(build_test_app(settings)) as client:
            statuses = [client.get("/health").status_code for _ in range(3)]

        assert statuses == [200, 200, 200]
