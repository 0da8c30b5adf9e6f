"""API routers for the preview sync service."""

from . import health, mapping, observability

__all__ = ["health", "mapping", "observability"]
