"""Tests for the edit-distance offset aligner."""

from __future__ import annotations

import logging

from previewsync.services.aligner import (
    TextDiffAligner,
    build_edit_distance_table,
    trace_projection,
)
from previewsync.services.normalizer import to_units


def test_edit_distance_table_matches_levenshtein() -> None:
    table = build_edit_distance_table("kitten", "sitting")
    assert table.shape == (7, 8)
    assert int(table[-1, -1]) == 3
    assert list(table[0]) == list(range(8))
    assert [int(row[0]) for row in table] == list(range(7))


def test_projection_prefers_diagonal_then_deletion() -> None:
    table = build_edit_distance_table("abc", "ac")
    assert trace_projection("abc", "ac", table) == [0, 1, 1]


def test_align_offset_clamps_out_of_range_positions() -> None:
    aligner = TextDiffAligner("abc", "abc")
    assert aligner.align_offset("abc", "abc", -4) == 0
    assert aligner.align_offset("abc", "abc", 1) == 1
    assert aligner.align_offset("abc", "abcd", 3) == 4


def test_projection_is_cached_per_pair() -> None:
    aligner = TextDiffAligner("hello world", "hello, world")
    first = aligner._ensure_slot(aligner.source.text, aligner.target.text)
    second = aligner._ensure_slot(aligner.source.text, aligner.target.text)
    assert first is second
    assert aligner.edit_distance == 1


def test_project_skips_styling() -> None:
    aligner = TextDiffAligner(to_units("\U0001D5D4B"), "AB")
    assert [aligner.project_offset(offset) for offset in range(4)] == [0, 0, 1, 2]
    assert aligner.project(1) == (0, 0.25)


def test_large_table_logs_warning(caplog) -> None:
    aligner = TextDiffAligner("abcdef", "abcxyz", cell_warning=10)
    with caplog.at_level(logging.WARNING, logger="previewsync.services.aligner"):
        aligner.project(2)
    assert any("Edit-distance table" in record.getMessage() for record in caplog.records)
