"""
Built-in route table for the task-management backends.

Each backend owns a mount prefix under ``/api``; the sub-paths mirror the
routes each backend exposes. A JSON file named by ``ROUTE_TABLE_PATH`` can
replace the whole table without a code change.
"""

from __future__ import annotations

import json
from pathlib import Path

from taskflow_service_libs.error_handling import raise_configuration_error
from services.api_gateway_service.models import HttpMethod, RouteRule

SERVICE_ROUTES: dict[str, tuple[str, list[tuple[str, str]]]] = {
    "auth": (
        "/api/auth",
        [
            ("POST", "/register"),
            ("POST", "/login"),
            ("POST", "/logout"),
            ("POST", "/refresh-token"),
            ("GET", "/profile"),
            ("PUT", "/profile"),
            ("POST", "/forgot-password"),
            ("POST", "/reset-password"),
            ("POST", "/verify-email"),
        ],
    ),
    "task": (
        "/api/tasks",
        [
            ("GET", "/"),
            ("POST", "/"),
            ("GET", "/:id"),
            ("PUT", "/:id"),
            ("DELETE", "/:id"),
            ("PATCH", "/:id/status"),
            ("PATCH", "/:id/assign"),
            ("GET", "/user/:userId"),
            ("GET", "/project/:projectId"),
            ("POST", "/:id/comments"),
            ("GET", "/:id/comments"),
        ],
    ),
    "notification": (
        "/api/notifications",
        [
            ("POST", "/send-email"),
            ("POST", "/send-sms"),
            ("POST", "/send-push"),
            ("GET", "/templates"),
            ("POST", "/templates"),
            ("PUT", "/templates/:id"),
            ("DELETE", "/templates/:id"),
            ("GET", "/history"),
            ("GET", "/history/:id"),
        ],
    ),
    "reporting": (
        "/api/reports",
        [
            ("GET", "/dashboard"),
            ("GET", "/tasks/summary"),
            ("GET", "/users/performance"),
            ("GET", "/projects/status"),
            ("POST", "/generate-report"),
            ("GET", "/reports"),
            ("GET", "/reports/:id"),
            ("GET", "/analytics/task-completion"),
            ("GET", "/analytics/user-productivity"),
            ("GET", "/analytics/project-timeline"),
        ],
    ),
    "admin": (
        "/api/admin",
        [
            ("GET", "/users"),
            ("GET", "/users/:id"),
            ("PUT", "/users/:id"),
            ("DELETE", "/users/:id"),
            ("POST", "/users/:id/activate"),
            ("POST", "/users/:id/deactivate"),
            ("GET", "/system/health"),
            ("GET", "/system/logs"),
            ("GET", "/system/metrics"),
            ("POST", "/system/backup"),
            ("GET", "/audit-logs"),
            ("GET", "/audit-logs/:id"),
        ],
    ),
}


def default_route_rules() -> list[RouteRule]:
    rules: list[RouteRule] = []
    for service_name, (prefix, routes) in SERVICE_ROUTES.items():
        for method, sub_path in routes:
            pattern = prefix if sub_path == "/" else f"{prefix}{sub_path}"
            rules.append(RouteRule(HttpMethod(method), pattern, service_name))
    return rules


def load_route_rules(path: str | None = None) -> list[RouteRule]:
    """Return the built-in rules, or the rules declared in the JSON file at ``path``.

    The file holds a list of ``{"method": ..., "path": ..., "service": ...}``
    objects in declaration order.
    """
    if not path:
        return default_route_rules()

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise_configuration_error(
            service="api_gateway_service",
            operation="load_route_rules",
            config_key="ROUTE_TABLE_PATH",
            message=f"Cannot read route table {path}: {exc}",
        )

    if not isinstance(raw, list):
        raise_configuration_error(
            service="api_gateway_service",
            operation="load_route_rules",
            config_key="ROUTE_TABLE_PATH",
            message="Route table must be a JSON list",
        )

    rules: list[RouteRule] = []
    for index, entry in enumerate(raw):
        try:
            rules.append(
                RouteRule(
                    method=HttpMethod(str(entry["method"]).upper()),
                    path_pattern=str(entry["path"]),
                    service_name=str(entry["service"]),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise_configuration_error(
                service="api_gateway_service",
                operation="load_route_rules",
                config_key="ROUTE_TABLE_PATH",
                message=f"Invalid route entry at index {index}: {exc}",
                entry=entry,
            )
    return rules
