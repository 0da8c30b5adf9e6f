"""Tests for structured mapping traces."""

from __future__ import annotations

import json
from pathlib import Path

from previewsync.services.mapper import create_mapping
from previewsync.utils.trace import MappingTracer


def test_tracer_records_line_decisions(tmp_path: Path, table_documents) -> None:
    source, target = table_documents
    tracer = MappingTracer(run_id="table", out_dir=str(tmp_path))
    mapper = create_mapping(source, target, tracer=tracer)
    mapper.map_lines()

    types = [event["type"] for event in tracer.as_list()]
    assert types[0] == "mapper_created"
    assert "line_blank" in types
    assert "line_refined" in types

    path = Path(tracer.flush_jsonl())
    assert path == tmp_path / "table.jsonl"
    rows = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert len(rows) == len(tracer.events)

    summary = json.loads(Path(tracer.summary_path).read_text(encoding="utf-8"))
    assert summary["run_id"] == "table"
    assert summary["metadata"]["aligner"] == "text"
    assert summary["metadata"]["source_lines"] == mapper.source.line_count
    assert sum(summary["strategies"].values()) == mapper.source.line_count
    assert len(summary["decisions"]) == mapper.source.line_count
