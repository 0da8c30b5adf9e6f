"""Block-level alignment from parser-provided node records.

Instead of diffing characters, both sides are described as sequences of
block nodes (heading, paragraph, table row, ...) whose text signatures are
paired with a longest common subsequence. Offsets inside a paired source
node project into the paired target node.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence, Tuple

from rapidfuzz import fuzz

from ..models.sourcemap import NodeRecord
from ..utils.errors import AlignerConfigurationError

LOGGER = logging.getLogger(__name__)

TRACKED_TYPES = frozenset(
    {
        "root",
        "heading",
        "paragraph",
        "blockquote",
        "list",
        "listItem",
        "code",
        "html",
        "thematicBreak",
        "table",
        "tableRow",
        "definition",
        "math",
    }
)


def _norm(value: str | None) -> str:
    if not value:
        return ""
    return re.sub(r"\s+", " ", value).strip().casefold()


def signature_of(node_type: str, text: str) -> str:
    return f"{node_type}:{_norm(text)}"


def node_records_from_payload(
    nodes: Iterable[Mapping[str, object]] | None,
) -> List[NodeRecord]:
    """Build records from ``{type, text|signature, start, end}`` mappings, keeping tracked types."""

    records: List[NodeRecord] = []
    for node in nodes or ():
        node_type = str(node.get("type") or node.get("node_type") or "")
        if node_type not in TRACKED_TYPES:
            continue
        signature = node.get("signature")
        if not isinstance(signature, str) or not signature:
            signature = signature_of(node_type, str(node.get("text") or ""))
        try:
            start = int(node.get("start", 0) or 0)
            end = int(node.get("end", start) or start)
        except (TypeError, ValueError):
            continue
        records.append(NodeRecord(node_type, signature, start, max(start, end)))
    return records


@dataclass(frozen=True, slots=True)
class NodePair:
    source: NodeRecord
    target: NodeRecord


class StructuralLCSAligner:
    """Projects offsets through LCS-paired node records.

    ``signature_threshold`` below 100 lets signatures pair when their
    rapidfuzz ratio reaches the threshold; at 100 only equal signatures pair.
    """

    name = "structural"

    def __init__(
        self,
        source_nodes: Sequence[NodeRecord],
        target_nodes: Sequence[NodeRecord],
        *,
        target_length: int,
        confidence: float = 0.5,
        fallback_confidence: float = 0.25,
        signature_threshold: float = 100.0,
    ) -> None:
        if not source_nodes or not target_nodes:
            raise AlignerConfigurationError(
                "structural_nodes_missing",
                "Structural alignment needs node records for both texts",
                aligner=self.name,
                extra={"source_nodes": len(source_nodes), "target_nodes": len(target_nodes)},
            )
        self.target_length = target_length
        self.confidence = confidence
        self.fallback_confidence = fallback_confidence
        self.signature_threshold = signature_threshold
        self.pairs = lcs_match(source_nodes, target_nodes, self._same)
        LOGGER.debug(
            "[structural] Paired %d of %d source nodes", len(self.pairs), len(source_nodes)
        )

    def _same(self, left: str, right: str) -> bool:
        if left == right:
            return True
        if self.signature_threshold >= 100:
            return False
        return fuzz.ratio(left, right) >= self.signature_threshold

    def project(self, source_offset: int) -> Tuple[int, float]:
        containing = [
            pair
            for pair in self.pairs
            if pair.source.start <= source_offset < pair.source.end
        ]
        if containing:
            pair = min(containing, key=lambda item: item.source.end - item.source.start)
            delta = source_offset - pair.source.start
            target = min(pair.target.start + delta, pair.target.end)
            return min(target, self.target_length), self.confidence

        preceding = [pair for pair in self.pairs if pair.source.end <= source_offset]
        if preceding:
            pair = max(preceding, key=lambda item: (item.source.end, item.target.end))
            return min(pair.target.end, self.target_length), self.fallback_confidence
        return 0, self.fallback_confidence


def lcs_match(
    source_nodes: Sequence[NodeRecord],
    target_nodes: Sequence[NodeRecord],
    same=lambda left, right: left == right,
) -> List[NodePair]:
    """Pair nodes along a longest common subsequence of their signatures."""

    rows, cols = len(target_nodes), len(source_nodes)
    table = [[0] * (cols + 1) for _ in range(rows + 1)]
    for i in range(1, rows + 1):
        for j in range(1, cols + 1):
            if same(target_nodes[i - 1].signature, source_nodes[j - 1].signature):
                table[i][j] = table[i - 1][j - 1] + 1
            else:
                table[i][j] = max(table[i - 1][j], table[i][j - 1])

    pairs: List[NodePair] = []
    i, j = rows, cols
    while i > 0 and j > 0:
        generated = target_nodes[i - 1]
        current = source_nodes[j - 1]
        if same(generated.signature, current.signature):
            pairs.append(NodePair(source=current, target=generated))
            i -= 1
            j -= 1
            continue
        if table[i - 1][j] >= table[i][j - 1]:
            i -= 1
        else:
            j -= 1

    pairs.reverse()
    return pairs


__all__ = [
    "NodePair",
    "StructuralLCSAligner",
    "TRACKED_TYPES",
    "lcs_match",
    "node_records_from_payload",
    "signature_of",
]
