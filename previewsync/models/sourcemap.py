"""Version 2 sourcemap records exchanged with external tooling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SOURCEMAP_VERSION = 2


@dataclass(frozen=True, slots=True)
class SourcemapPoint:
    line: int
    column: int
    offset: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"line": self.line, "column": self.column}
        if self.offset is not None:
            payload["offset"] = self.offset
        return payload


@dataclass(frozen=True, slots=True)
class SourcemapRange:
    start: SourcemapPoint
    end: SourcemapPoint

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


@dataclass(frozen=True, slots=True)
class SourcemapSegment:
    """Correspondence between an input (source) range and an output (preview) range."""

    node_type: str
    output: SourcemapRange
    input: SourcemapRange

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodeType": self.node_type,
            "output": self.output.to_dict(),
            "input": self.input.to_dict(),
        }


@dataclass(slots=True)
class SourcemapData:
    version: int = SOURCEMAP_VERSION
    segments: List[SourcemapSegment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "segments": [segment.to_dict() for segment in self.segments],
        }


@dataclass(frozen=True, slots=True)
class NodeRecord:
    """Parser-provided block node: its kind, text signature and offset span."""

    node_type: str
    signature: str
    start: int
    end: int


__all__ = [
    "NodeRecord",
    "SOURCEMAP_VERSION",
    "SourcemapData",
    "SourcemapPoint",
    "SourcemapRange",
    "SourcemapSegment",
]
