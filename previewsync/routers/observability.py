"""Routes that expose operational observability data."""

from __future__ import annotations

from fastapi import APIRouter

from ..observability import metrics_registry

router = APIRouter(prefix="/api", tags=["observability"])


@router.get("/metrics")
def read_metrics() -> dict[str, object]:
    """Return the current request and mapping metrics snapshot."""

    return metrics_registry.snapshot()


__all__ = ["router"]
