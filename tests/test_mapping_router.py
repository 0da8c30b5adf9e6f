"""Tests for the position mapping endpoints."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from previewsync.config import reset_settings_cache
from previewsync.services.mapper_registry import mapper_registry


def test_map_offset_returns_camel_case_payload(client: TestClient) -> None:
    response = client.post(
        "/api/map/offset", json={"source": "abc\ndef", "target": "abc\ndef", "offset": 5}
    )
    assert response.status_code == 200
    assert response.json() == {
        "sourceOffset": 5,
        "sourceLine": 2,
        "sourceColumn": 2,
        "targetOffset": 5,
        "targetLine": 2,
        "targetColumn": 2,
        "strategy": "diff",
        "confidence": 0.25,
    }


def test_map_cursor_reports_preview_line(client: TestClient, table_documents) -> None:
    source, target = table_documents
    response = client.post(
        "/api/map/cursor",
        json={"source": source, "target": target, "cursor": {"line": 7, "column": 1}},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["cursorMapping"]["targetLine"] == 10
    assert payload["cursorMapping"]["targetColumn"] == 1
    assert payload["previewLine"] >= payload["cursorMapping"]["targetLine"]


def test_map_line_and_lines(client: TestClient, table_documents) -> None:
    source, target = table_documents
    line_response = client.post(
        "/api/map/line", json={"source": source, "target": target, "line": 11}
    )
    assert line_response.status_code == 200
    assert line_response.json()["sourceLine"] == 11
    assert line_response.json()["targetLine"] == 15

    lines_response = client.post("/api/map/lines", json={"source": source, "target": target})
    assert lines_response.status_code == 200
    payload = lines_response.json()
    assert len(payload["lines"]) == source.count("\n") + 1
    assert payload["lines"] == sorted(payload["lines"])
    assert payload["sourcemap"]["version"] == 2
    assert payload["sourcemap"]["segments"][0]["nodeType"] == "line"


def test_repeated_requests_reuse_the_cached_mapper(client: TestClient) -> None:
    body = {"source": "one\ntwo", "target": "one\ntwo"}
    client.post("/api/map/line", json={**body, "line": 1})
    client.post("/api/map/line", json={**body, "line": 2})
    assert len(mapper_registry) == 1

    client.post("/api/map/line", json={"source": "one", "target": "uno", "line": 1})
    assert len(mapper_registry) == 2


def test_preview_line_lookup_round_trips_exported_map(
    client: TestClient, table_documents
) -> None:
    source, target = table_documents
    exported = client.post("/api/map/lines", json={"source": source, "target": target}).json()

    response = client.post(
        "/api/sourcemap/preview-line", json={"sourcemap": exported["sourcemap"], "line": 7}
    )
    assert response.status_code == 200
    assert response.json() == {"previewLine": exported["lines"][6]}


def test_invalid_sourcemap_is_unprocessable(client: TestClient) -> None:
    response = client.post(
        "/api/sourcemap/preview-line",
        json={"sourcemap": {"version": 1, "segments": []}, "line": 3},
    )
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "invalid_sourcemap"


def test_request_validation_rejects_missing_fields(client: TestClient) -> None:
    response = client.post("/api/map/offset", json={"source": "abc"})
    assert response.status_code == 422


def test_structural_aligner_requires_nodes(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("PREVIEWSYNC_ALIGNER", "structural")
    reset_settings_cache()

    response = client.post(
        "/api/map/offset", json={"source": "# Intro", "target": "Intro", "offset": 3}
    )
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "structural_nodes_missing"
    assert detail["aligner"] == "structural"


def test_structural_aligner_projects_through_nodes(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("PREVIEWSYNC_ALIGNER", "structural")
    reset_settings_cache()

    response = client.post(
        "/api/map/offset",
        json={
            "source": "# Intro\n\nHello world",
            "target": "Intro\n\nHello world",
            "offset": 11,
            "sourceNodes": [
                {"type": "heading", "text": "Intro", "start": 0, "end": 7},
                {"type": "paragraph", "text": "Hello world", "start": 9, "end": 20},
            ],
            "targetNodes": [
                {"type": "heading", "text": "Intro", "start": 0, "end": 5},
                {"type": "paragraph", "text": "Hello world", "start": 7, "end": 18},
            ],
        },
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["targetOffset"] == 9
    assert payload["confidence"] == 0.5


def test_trace_files_are_written_when_enabled(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    trace_dir = tmp_path / "request-traces"
    monkeypatch.setenv("PREVIEWSYNC_TRACE", "1")
    monkeypatch.setenv("PREVIEWSYNC_TRACE_DIR", str(trace_dir))
    reset_settings_cache()

    response = client.post(
        "/api/map/line", json={"source": "a\nb", "target": "a\nb", "line": 2}
    )
    assert response.status_code == 200
    assert len(list(trace_dir.glob("*.jsonl"))) == 1
    assert len(list(trace_dir.glob("*.summary.json"))) == 1
