"""Record types shared by every mapping operation."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List


class Strategy(str, Enum):
    """Tag describing which algorithm produced a mapping."""

    DIFF = "diff"
    LINE_ANCHOR = "line-anchor"
    LINE_SIMILARITY = "line-similarity"


@dataclass(frozen=True, slots=True)
class Cursor:
    """1-based editor cursor position."""

    line: int
    column: int


@dataclass(slots=True)
class NormalizedString:
    """Styling-free text plus index maps back to the string it came from.

    ``map_to_original[k]`` is the original index that produced normalized
    position ``k``; ``map_to_normalized[k]`` is the normalized position that
    original index ``k`` collapsed into.
    """

    text: str
    map_to_original: List[int]
    map_to_normalized: List[int]


@dataclass(frozen=True, slots=True)
class OffsetMapping:
    source_offset: int
    source_line: int
    source_column: int
    target_offset: int
    target_line: int
    target_column: int
    strategy: Strategy
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["strategy"] = self.strategy.value
        return payload


@dataclass(frozen=True, slots=True)
class LineMapping:
    source_line: int
    target_line: int
    strategy: Strategy
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["strategy"] = self.strategy.value
        return payload


@dataclass(frozen=True, slots=True)
class LineChoice:
    """Outcome of refining a base target line by token similarity."""

    target_line: int
    strategy: Strategy
    confidence: float


@dataclass(frozen=True, slots=True)
class LineMatchTuning:
    """Thresholds for the windowed line similarity search."""

    search_before: int = 80
    search_after: int = 120
    distance_penalty: float = 220.0
    min_similarity: float = 0.17
    substring_bonus: float = 0.25
    substring_min_length: int = 4
    blank_line_confidence: float = 0.5
    no_match_confidence: float = 0.35


__all__ = [
    "Cursor",
    "LineChoice",
    "LineMapping",
    "LineMatchTuning",
    "NormalizedString",
    "OffsetMapping",
    "Strategy",
]
