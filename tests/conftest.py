"""Test configuration for previewsync."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Generator

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from previewsync.config import reset_settings_cache  # noqa: E402
from previewsync.observability import metrics_registry  # noqa: E402
from previewsync.services.mapper_registry import mapper_registry  # noqa: E402

TABLE_SOURCE = "\n".join(
    [
        "## Table",
        "",
        "| A | B |",
        "| - | - |",
        "| x | y |",
        "",
        "## Horizontal Rule",
        "",
        "---",
        "",
        "## End",
        "",
    ]
)

TABLE_TARGET = "\n".join(
    [
        "Table",
        "-----",
        "",
        "    ┌───┬───┐",
        "    │ A │ B │",
        "    ├───┼───┤",
        "    │ x │ y │",
        "    └───┴───┘",
        "",
        "Horizontal Rule",
        "---------------",
        "",
        "***",
        "",
        "End",
        "---",
        "",
    ]
)


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Provide isolated configuration for each test."""

    for name in list(os.environ):
        if name.startswith("PREVIEWSYNC_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PREVIEWSYNC_TRACE_DIR", str(tmp_path / "trace"))
    reset_settings_cache()
    metrics_registry.reset()
    mapper_registry.reset()
    yield
    reset_settings_cache()
    metrics_registry.reset()
    mapper_registry.reset()


@pytest.fixture()
def table_documents() -> tuple[str, str]:
    """Markdown with a table and its rendering as a box-drawing grid."""

    return TABLE_SOURCE, TABLE_TARGET


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Return a test client for the FastAPI application."""

    from previewsync.main import app

    with TestClient(app) as test_client:
        yield test_client
