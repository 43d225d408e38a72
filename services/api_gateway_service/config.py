"""
Configuration for API Gateway Service.

Uses Pydantic settings for environment-based configuration. Backend base URLs
accept both the prefixed ``API_GATEWAY_*`` names and the plain
``*_SERVICE_URL`` names used by the deployment scripts.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import SettingsConfigDict

from taskflow_service_libs.config import TaskflowServiceSettings


class Settings(TaskflowServiceSettings):
    """Configuration settings for API Gateway Service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="API_GATEWAY_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",  # Allow extra environment variables to be ignored
    )

    # Service identity
    SERVICE_NAME: str = "api-gateway-service"
    VERSION: str = "1.0.0"

    # HTTP server configuration
    HTTP_HOST: str = Field(default="0.0.0.0", description="HTTP server host")
    HTTP_PORT: int = Field(
        default=3000,
        description="HTTP server port",
        validation_alias=AliasChoices("API_GATEWAY_HTTP_PORT", "PORT"),
    )

    # Backend service URLs
    AUTH_SERVICE_URL: str = Field(
        default="http://localhost:3001",
        description="Authentication Service base URL",
        validation_alias=AliasChoices("API_GATEWAY_AUTH_SERVICE_URL", "AUTH_SERVICE_URL"),
    )
    TASK_SERVICE_URL: str = Field(
        default="http://localhost:3002",
        description="Task Service base URL",
        validation_alias=AliasChoices("API_GATEWAY_TASK_SERVICE_URL", "TASK_SERVICE_URL"),
    )
    NOTIFICATION_SERVICE_URL: str = Field(
        default="http://localhost:3003",
        description="Notification Service base URL",
        validation_alias=AliasChoices(
            "API_GATEWAY_NOTIFICATION_SERVICE_URL", "NOTIFICATION_SERVICE_URL"
        ),
    )
    REPORTING_SERVICE_URL: str = Field(
        default="http://localhost:3004",
        description="Reporting Service base URL",
        validation_alias=AliasChoices(
            "API_GATEWAY_REPORTING_SERVICE_URL", "REPORTING_SERVICE_URL"
        ),
    )
    ADMIN_SERVICE_URL: str = Field(
        default="http://localhost:3005",
        description="Admin Service base URL",
        validation_alias=AliasChoices("API_GATEWAY_ADMIN_SERVICE_URL", "ADMIN_SERVICE_URL"),
    )

    # Route table override (JSON list of {"method", "path", "service"})
    ROUTE_TABLE_PATH: str | None = Field(
        default=None, description="Optional JSON file replacing the built-in route table"
    )

    # Timeouts: forwarding and health probing are independent knobs
    FORWARD_TIMEOUT_SECONDS: float = Field(
        default=30.0, description="Per-request timeout for forwarded calls"
    )
    HEALTH_CHECK_TIMEOUT_SECONDS: float = Field(
        default=5.0, description="Per-service timeout for aggregate health checks"
    )
    HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS: float = 10.0

    # Request limits
    MAX_REQUEST_BODY_BYTES: int = Field(
        default=10 * 1024 * 1024, description="Largest request body accepted for forwarding"
    )

    # CORS configuration
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")
    CORS_ALLOW_CREDENTIALS: bool = Field(
        default=False, description="Allow credentials in CORS requests"
    )
    CORS_ALLOW_METHODS: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods for CORS",
    )
    CORS_ALLOW_HEADERS: list[str] = Field(
        default=["*"], description="Allowed headers for CORS requests"
    )

    # Compression
    GZIP_MINIMUM_SIZE: int = Field(
        default=1024, description="Smallest response body, in bytes, that gets compressed"
    )

    # Redis configuration (distributed rate limiting in production)
    REDIS_URL: str | None = Field(default=None, description="Redis URL for rate limiting")

    # Rate limiting configuration
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable rate limiting")
    RATE_LIMIT_REQUESTS: int = Field(
        default=100, description="Rate limit: requests per window per client"
    )
    RATE_LIMIT_WINDOW_MINUTES: int = Field(
        default=15, description="Rate limit window in minutes"
    )

    @field_validator(
        "AUTH_SERVICE_URL",
        "TASK_SERVICE_URL",
        "NOTIFICATION_SERVICE_URL",
        "REPORTING_SERVICE_URL",
        "ADMIN_SERVICE_URL",
    )
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("FORWARD_TIMEOUT_SECONDS", "HEALTH_CHECK_TIMEOUT_SECONDS")
    @classmethod
    def positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts must be positive")
        return value

    def rate_limit_expression(self) -> str:
        return f"{self.RATE_LIMIT_REQUESTS} per {self.RATE_LIMIT_WINDOW_MINUTES} minutes"


# Global settings instance
settings = Settings()
