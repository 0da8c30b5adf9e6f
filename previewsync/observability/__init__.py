"""Observability helpers for the preview sync service."""

from .metrics import MetricsRegistry, RequestMetricsMiddleware, metrics_registry

__all__ = [
    "MetricsRegistry",
    "RequestMetricsMiddleware",
    "metrics_registry",
]
