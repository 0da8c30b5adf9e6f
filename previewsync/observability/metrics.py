"""Request and mapping metrics collection utilities."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from threading import Lock
from time import perf_counter
from typing import Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


@dataclass
class RouteStats:
    """Mutable timing statistics for a single route."""

    count: int = 0
    total_duration_ms: float = 0.0
    max_duration_ms: float = 0.0


@dataclass
class OutcomeStats:
    count: int = 0
    total_confidence: float = 0.0


class MetricsRegistry:
    """In-memory collector for request timings and mapping outcomes."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._in_flight = 0
        self._requests_total = 0
        self._status_families: Counter[str] = Counter()
        self._routes: Dict[str, RouteStats] = {}
        self._mappings: Dict[str, Dict[str, OutcomeStats]] = {}

    def reset(self) -> None:
        """Reset all counters (useful for tests)."""

        with self._lock:
            self._in_flight = 0
            self._requests_total = 0
            self._status_families = Counter()
            self._routes = {}
            self._mappings = {}

    def request_started(self) -> None:
        with self._lock:
            self._in_flight += 1

    def request_finished(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_seconds: float,
    ) -> None:
        """Record request completion statistics."""

        duration_ms = max(duration_seconds * 1000.0, 0.0)
        route_key = f"{method.upper()} {path}"

        with self._lock:
            self._in_flight = max(0, self._in_flight - 1)
            self._requests_total += 1
            self._status_families[f"{status_code // 100}xx"] += 1

            stats = self._routes.setdefault(route_key, RouteStats())
            stats.count += 1
            stats.total_duration_ms += duration_ms
            stats.max_duration_ms = max(stats.max_duration_ms, duration_ms)

    def record_mapping(self, operation: str, strategy: str, confidence: float) -> None:
        """Count one answered mapping query under ``operation`` and ``strategy``."""

        with self._lock:
            by_strategy = self._mappings.setdefault(operation, {})
            stats = by_strategy.setdefault(strategy, OutcomeStats())
            stats.count += 1
            stats.total_confidence += confidence

    def snapshot(self) -> Dict[str, object]:
        """Return an immutable view of the current metrics."""

        with self._lock:
            routes = {
                key: {
                    "count": stats.count,
                    "avg_duration_ms": stats.total_duration_ms / (stats.count or 1),
                    "max_duration_ms": stats.max_duration_ms,
                }
                for key, stats in self._routes.items()
            }
            mappings = {
                operation: {
                    strategy: {
                        "count": stats.count,
                        "avg_confidence": round(stats.total_confidence / (stats.count or 1), 4),
                    }
                    for strategy, stats in by_strategy.items()
                }
                for operation, by_strategy in self._mappings.items()
            }

            return {
                "requests_total": self._requests_total,
                "in_flight": self._in_flight,
                "status_codes": dict(self._status_families),
                "routes": routes,
                "mappings": mappings,
            }


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """ASGI middleware that records request metrics."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        registry: MetricsRegistry | None = None,
    ) -> None:
        super().__init__(app)
        self._registry = registry or metrics_registry

    async def dispatch(self, request: Request, call_next):
        start = perf_counter()
        self._registry.request_started()
        try:
            response = await call_next(request)
        except Exception:  # pragma: no cover - re-raise after recording metrics
            self._registry.request_finished(
                request.method, request.url.path, 500, perf_counter() - start
            )
            raise
        self._registry.request_finished(
            request.method,
            request.url.path,
            getattr(response, "status_code", 200),
            perf_counter() - start,
        )
        return response


metrics_registry = MetricsRegistry()

__all__ = [
    "MetricsRegistry",
    "RequestMetricsMiddleware",
    "metrics_registry",
]
