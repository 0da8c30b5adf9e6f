"""Export monotonic line maps as version 2 sourcemaps and read them back."""

from __future__ import annotations

from typing import Any, List, Mapping

from ..models.sourcemap import (
    SOURCEMAP_VERSION,
    SourcemapData,
    SourcemapPoint,
    SourcemapRange,
    SourcemapSegment,
)
from ..utils.errors import SourcemapFormatError
from .line_locator import LineIndex
from .mapper import Mapper


def _line_point(index: LineIndex, line: int, *, end: bool = False) -> SourcemapPoint:
    start, stop = index.line_range(line)
    offset = stop if end else start
    return SourcemapPoint(line=line, column=offset - start + 1, offset=offset)


def build_sourcemap(mapper: Mapper) -> SourcemapData:
    """Group consecutive source lines that land on one target line into segments."""

    lines = mapper.map_lines()
    segments: List[SourcemapSegment] = []
    run_start = 1
    for position, target_line in enumerate(lines, start=1):
        next_target = lines[position] if position < len(lines) else None
        if next_target == target_line:
            continue
        segments.append(
            SourcemapSegment(
                node_type="line",
                input=SourcemapRange(
                    start=_line_point(mapper.source, run_start),
                    end=_line_point(mapper.source, position, end=True),
                ),
                output=SourcemapRange(
                    start=_line_point(mapper.target, target_line),
                    end=_line_point(mapper.target, target_line, end=True),
                ),
            )
        )
        run_start = position + 1
    return SourcemapData(version=SOURCEMAP_VERSION, segments=segments)


def _parse_point(raw: Any, where: str) -> SourcemapPoint:
    if not isinstance(raw, Mapping):
        raise SourcemapFormatError("invalid_sourcemap", f"{where} must be an object")
    line = raw.get("line")
    column = raw.get("column", 1)
    offset = raw.get("offset")
    if isinstance(line, bool) or not isinstance(line, int) or line < 1:
        raise SourcemapFormatError(
            "invalid_sourcemap", f"{where}.line must be a positive integer", {"value": line}
        )
    if isinstance(column, bool) or not isinstance(column, int) or column < 1:
        raise SourcemapFormatError(
            "invalid_sourcemap", f"{where}.column must be a positive integer", {"value": column}
        )
    if offset is not None and (isinstance(offset, bool) or not isinstance(offset, int)):
        offset = None
    return SourcemapPoint(line=line, column=column, offset=offset)


def _parse_range(raw: Any, where: str) -> SourcemapRange:
    if not isinstance(raw, Mapping):
        raise SourcemapFormatError("invalid_sourcemap", f"{where} must be an object")
    return SourcemapRange(
        start=_parse_point(raw.get("start"), f"{where}.start"),
        end=_parse_point(raw.get("end"), f"{where}.end"),
    )


def parse_sourcemap(payload: Any) -> SourcemapData:
    """Validate a version 2 sourcemap payload and return its records."""

    if not isinstance(payload, Mapping):
        raise SourcemapFormatError("invalid_sourcemap", "Sourcemap must be an object")
    if payload.get("version") != SOURCEMAP_VERSION:
        raise SourcemapFormatError(
            "invalid_sourcemap",
            "Unsupported sourcemap version",
            {"version": payload.get("version")},
        )
    raw_segments = payload.get("segments")
    if not isinstance(raw_segments, list):
        raise SourcemapFormatError("invalid_sourcemap", "Sourcemap segments must be a list")

    segments: List[SourcemapSegment] = []
    for index, raw in enumerate(raw_segments):
        where = f"segments[{index}]"
        if not isinstance(raw, Mapping):
            raise SourcemapFormatError("invalid_sourcemap", f"{where} must be an object")
        segments.append(
            SourcemapSegment(
                node_type=str(raw.get("nodeType") or raw.get("node_type") or ""),
                output=_parse_range(raw.get("output"), f"{where}.output"),
                input=_parse_range(raw.get("input"), f"{where}.input"),
            )
        )
    return SourcemapData(version=SOURCEMAP_VERSION, segments=segments)


def resolve_preview_line(sourcemap: SourcemapData, source_line: int) -> int:
    """Return the preview line of the first segment covering *source_line*.

    Lines outside every segment map to themselves.
    """

    for segment in sourcemap.segments:
        if segment.input.start.line <= source_line <= segment.input.end.line:
            return segment.output.start.line
    return source_line


__all__ = ["build_sourcemap", "parse_sourcemap", "resolve_preview_line"]
