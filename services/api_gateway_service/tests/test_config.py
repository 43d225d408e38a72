"""Tests for API Gateway Service settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from common_core.config_enums import Environment
from services.api_gateway_service.config import Settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("AUTH", "TASK", "NOTIFICATION", "REPORTING", "ADMIN"):
        monkeypatch.delenv(f"{name}_SERVICE_URL", raising=False)
        monkeypatch.delenv(f"API_GATEWAY_{name}_SERVICE_URL", raising=False)
    for name in ("PORT", "API_GATEWAY_HTTP_PORT", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = Settings()

    assert settings.HTTP_PORT == 3000
    assert settings.TASK_SERVICE_URL == "http://localhost:3002"
    assert settings.FORWARD_TIMEOUT_SECONDS == 30.0
    assert settings.HEALTH_CHECK_TIMEOUT_SECONDS == 5.0
    assert settings.MAX_REQUEST_BODY_BYTES == 10 * 1024 * 1024
    assert settings.ENVIRONMENT is Environment.DEVELOPMENT


def test_plain_service_url_variable_is_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASK_SERVICE_URL", "http://task-service:3002")

    assert Settings().TASK_SERVICE_URL == "http://task-service:3002"


def test_prefixed_service_url_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASK_SERVICE_URL", "http://plain:3002")
    monkeypatch.setenv("API_GATEWAY_TASK_SERVICE_URL", "http://prefixed:3002")

    assert Settings().TASK_SERVICE_URL == "http://prefixed:3002"


def test_port_alias(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "8080")

    assert Settings().HTTP_PORT == 8080


def test_trailing_slash_is_stripped() -> None:
    settings = Settings(AUTH_SERVICE_URL="http://auth:3001/")

    assert settings.AUTH_SERVICE_URL == "http://auth:3001"


@pytest.mark.parametrize("field", ["FORWARD_TIMEOUT_SECONDS", "HEALTH_CHECK_TIMEOUT_SECONDS"])
def test_timeouts_must_be_positive(field: str) -> None:
    with pytest.raises(ValidationError):
        Settings(**{field: 0})


def test_rate_limit_expression() -> None:
    settings = Settings(RATE_LIMIT_REQUESTS=100, RATE_LIMIT_WINDOW_MINUTES=15)

    assert settings.rate_limit_expression() == "100 per 15 minutes"


def test_environment_helpers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "production")

    settings = Settings()

    assert settings.is_production()
    assert not settings.is_development()
