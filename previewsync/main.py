"""Preview sync service entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .observability import RequestMetricsMiddleware
from .routers import health, mapping, observability
from .services.mapper_registry import mapper_registry
from .utils.logging import configure_logging

logger = configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Size the mapper cache from the active settings."""

    settings = get_settings()
    mapper_registry.max_entries = settings.mapper_cache_size
    logger.info(
        "[previewsync] Serving with %s aligner, %s offsets",
        settings.aligner,
        settings.position_encoding,
    )
    yield
    mapper_registry.reset()


app = FastAPI(title="previewsync", version=__version__, lifespan=lifespan)
app.add_middleware(RequestMetricsMiddleware)


ROUTERS: Iterable = (
    health.router,
    mapping.router,
    observability.router,
)

for router in ROUTERS:
    app.include_router(router)


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Ensure unexpected exceptions return a JSON payload."""

    logger.exception(
        "Unhandled exception while processing %s %s", request.method, request.url.path
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


__all__ = ["app"]
