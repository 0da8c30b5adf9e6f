"""Tests for node-signature alignment."""

from __future__ import annotations

import pytest

from previewsync.config import Settings
from previewsync.models.sourcemap import NodeRecord
from previewsync.services.mapper import build_aligner, create_mapping
from previewsync.services.structural import (
    StructuralLCSAligner,
    lcs_match,
    node_records_from_payload,
    signature_of,
)
from previewsync.utils.errors import AlignerConfigurationError


def _node(node_type: str, text: str, start: int, end: int) -> NodeRecord:
    return NodeRecord(node_type, signature_of(node_type, text), start, end)


SOURCE_NODES = [
    _node("heading", "Intro", 0, 8),
    _node("paragraph", "Hello   world", 10, 23),
    _node("paragraph", "Only in source", 25, 39),
    _node("heading", "End", 41, 47),
]
TARGET_NODES = [
    _node("heading", "intro", 0, 5),
    _node("paragraph", "hello world", 12, 23),
    _node("heading", "end", 30, 33),
]


def test_signatures_normalise_whitespace_and_case() -> None:
    assert signature_of("heading", "  Hello\n  World ") == "heading:hello world"


def test_lcs_pairs_common_signatures_in_order() -> None:
    pairs = lcs_match(SOURCE_NODES, TARGET_NODES)
    assert [(pair.source.start, pair.target.start) for pair in pairs] == [
        (0, 0),
        (10, 12),
        (41, 30),
    ]


def test_offsets_inside_a_paired_node_keep_their_delta() -> None:
    aligner = StructuralLCSAligner(SOURCE_NODES, TARGET_NODES, target_length=40)
    assert aligner.project(12) == (14, 0.5)
    assert aligner.project(6) == (5, 0.5)


def test_offsets_outside_pairs_fall_back_to_preceding_node() -> None:
    aligner = StructuralLCSAligner(SOURCE_NODES, TARGET_NODES, target_length=40)
    assert aligner.project(30) == (23, 0.25)
    assert aligner.project(9) == (5, 0.25)


def test_fuzzy_threshold_pairs_near_signatures() -> None:
    source = [_node("paragraph", "The quick brown fox", 0, 19)]
    target = [_node("paragraph", "The quick brown fox.", 0, 20)]

    exact = lcs_match(source, target)
    assert exact == []

    aligner = StructuralLCSAligner(source, target, target_length=20, signature_threshold=90)
    assert len(aligner.pairs) == 1
    assert aligner.project(4) == (4, 0.5)


def test_missing_nodes_raise_configuration_error() -> None:
    with pytest.raises(AlignerConfigurationError) as excinfo:
        StructuralLCSAligner([], TARGET_NODES, target_length=10)
    assert excinfo.value.code == "structural_nodes_missing"
    assert excinfo.value.aligner == "structural"


def test_payload_nodes_skip_untracked_types() -> None:
    records = node_records_from_payload(
        [
            {"type": "heading", "text": "Intro", "start": 0, "end": 8},
            {"type": "emphasis", "text": "ignored", "start": 3, "end": 5},
            {"type": "paragraph", "signature": "custom", "start": 10, "end": 4},
        ]
    )
    assert records == [
        NodeRecord("heading", "heading:intro", 0, 8),
        NodeRecord("paragraph", "custom", 10, 10),
    ]


def test_structural_deployment_builds_structural_aligner() -> None:
    settings = Settings(aligner="structural")
    source = "# Intro\n\nHello world"
    target = "Intro\n\nHello world"
    aligner = build_aligner(
        source,
        target,
        settings,
        source_nodes=[_node("heading", "Intro", 0, 7), _node("paragraph", "Hello world", 9, 20)],
        target_nodes=[_node("heading", "Intro", 0, 5), _node("paragraph", "Hello world", 7, 18)],
    )
    assert isinstance(aligner, StructuralLCSAligner)

    mapper = create_mapping(source, target, settings=settings, aligner=aligner)
    mapping = mapper.map_offset(11)
    assert mapping.target_offset == 9
    assert mapping.confidence == pytest.approx(0.5)


def test_text_deployment_uses_default_aligner() -> None:
    assert build_aligner("a", "a", Settings(aligner="text")) is None
