"""
Declarative route table mapping (method, path) to a logical service name.

Rules are compiled once at startup into per-(method, segment count) buckets.
Inside a bucket, rules are ordered most-specific first: at the first segment
position where two patterns differ in kind, the literal segment sorts before
the ``:param`` segment. Ties keep declaration order. ``match`` is then a
linear scan where the first hit wins.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from taskflow_service_libs.logging_utils import create_service_logger
from services.api_gateway_service.exceptions import AmbiguousRouteTable, NoRouteMatched
from services.api_gateway_service.implementations.service_registry import ServiceRegistry
from services.api_gateway_service.models import HttpMethod, RouteRule, split_path

logger = create_service_logger("api_gateway.route_table")


def is_param_segment(segment: str) -> bool:
    return segment.startswith(":") and len(segment) > 1


@dataclass(frozen=True)
class CompiledRoute:
    rule: RouteRule
    segments: tuple[str, ...]

    @property
    def specificity(self) -> tuple[int, ...]:
        return tuple(1 if is_param_segment(segment) else 0 for segment in self.segments)

    @property
    def shape(self) -> tuple[str | None, ...]:
        """Literal segments kept, parameters collapsed; equal shapes are indistinguishable."""
        return tuple(None if is_param_segment(segment) else segment for segment in self.segments)

    def matches(self, path_segments: tuple[str, ...]) -> bool:
        for pattern, actual in zip(self.segments, path_segments):
            if is_param_segment(pattern):
                if not actual:
                    return False
            elif pattern != actual:
                return False
        return True


class RouteTable:
    """Immutable, compiled route table."""

    def __init__(self, buckets: dict[tuple[HttpMethod, int], list[CompiledRoute]]) -> None:
        self._buckets = buckets

    @classmethod
    def compile(cls, rules: Iterable[RouteRule], registry: ServiceRegistry) -> "RouteTable":
        """Validate and compile rules.

        Raises:
            UnknownService: a rule targets a service the registry does not know
            AmbiguousRouteTable: two rules for one method share the same shape
            ValueError: a pattern is not absolute
        """
        buckets: dict[tuple[HttpMethod, int], list[CompiledRoute]] = defaultdict(list)
        seen_shapes: dict[tuple[HttpMethod, tuple[str | None, ...]], RouteRule] = {}

        for rule in rules:
            if not rule.path_pattern.startswith("/"):
                raise ValueError(f"Route pattern must start with '/': {rule.path_pattern!r}")
            registry.resolve(rule.service_name)

            compiled = CompiledRoute(rule=rule, segments=rule.segments)
            shape_key = (rule.method, compiled.shape)
            previous = seen_shapes.get(shape_key)
            if previous is not None:
                raise AmbiguousRouteTable(
                    rule.method.value, previous.path_pattern, rule.path_pattern
                )
            seen_shapes[shape_key] = rule
            buckets[(rule.method, len(compiled.segments))].append(compiled)

        for bucket in buckets.values():
            bucket.sort(key=lambda compiled: compiled.specificity)

        table = cls(dict(buckets))
        logger.info(
            "Route table compiled",
            rules=len(seen_shapes),
            services=sorted({rule.service_name for rule in seen_shapes.values()}),
        )
        return table

    def match(self, method: str, path: str) -> str:
        """Return the service name for ``(method, path)`` or raise ``NoRouteMatched``."""
        segments = split_path(path)
        try:
            http_method = HttpMethod(method.upper())
        except ValueError:
            raise NoRouteMatched(method, path) from None

        service_name = self._scan(http_method, segments)
        if service_name is None and http_method is HttpMethod.HEAD:
            service_name = self._scan(HttpMethod.GET, segments)
        if service_name is None:
            raise NoRouteMatched(http_method.value, path)
        return service_name

    def _scan(self, method: HttpMethod, segments: tuple[str, ...]) -> str | None:
        for compiled in self._buckets.get((method, len(segments)), ()):
            if compiled.matches(segments):
                return compiled.rule.service_name
        return None

    def rules(self) -> list[RouteRule]:
        return [compiled.rule for bucket in self._buckets.values() for compiled in bucket]

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())
