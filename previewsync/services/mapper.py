"""Cursor resolver: answers offset, cursor and line queries for one document pair."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from ..config import Settings, get_settings
from ..models.mapping import Cursor, LineMapping, OffsetMapping, Strategy
from ..models.sourcemap import NodeRecord
from ..utils.trace import MappingTracer
from .aligner import Aligner, TextDiffAligner
from .line_locator import LineIndex
from .line_similarity import choose_best_target_line
from .normalizer import to_units
from .structural import StructuralLCSAligner

LOGGER = logging.getLogger(__name__)


class Mapper:
    """Best-effort position oracle between a source text and its rendering.

    Built once per ``(source_text, target_text)`` pair and read-only apart
    from the aligner's table slot and the per-line cache. Queries against one
    instance must not run concurrently.
    """

    def __init__(
        self,
        source_text: str,
        target_text: str,
        *,
        settings: Settings | None = None,
        aligner: Aligner | None = None,
        tracer: MappingTracer | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        encoding = self.settings.position_encoding
        self.source = LineIndex(to_units(source_text, encoding))
        self.target = LineIndex(to_units(target_text, encoding))
        self.tuning = self.settings.line_match_tuning()
        self.tracer = tracer
        self.aligner: Aligner = aligner or TextDiffAligner(
            self.source.text,
            self.target.text,
            confidence=self.settings.diff_confidence,
            cell_warning=self.settings.alignment_cell_warning,
        )
        self._line_cache: Dict[int, LineMapping] = {}
        if tracer:
            tracer.ev(
                "mapper_created",
                aligner=self.aligner.name,
                encoding=encoding,
                source_lines=self.source.line_count,
                target_lines=self.target.line_count,
            )

    def map_offset(self, offset: int) -> OffsetMapping:
        source_offset = self.source.clamp_offset(offset)
        target_offset, confidence = self.aligner.project(source_offset)
        target_offset = self.target.clamp_offset(target_offset)
        LOGGER.trace("[map] offset %d -> %d (%s)", source_offset, target_offset, self.aligner.name)  # type: ignore[attr-defined]
        return OffsetMapping(
            source_offset=source_offset,
            source_line=self.source.offset_to_line(source_offset),
            source_column=self.source.offset_to_column(source_offset),
            target_offset=target_offset,
            target_line=self.target.offset_to_line(target_offset),
            target_column=self.target.offset_to_column(target_offset),
            strategy=Strategy.DIFF,
            confidence=confidence,
        )

    def map_line(self, line: int) -> LineMapping:
        source_line = self.source.clamp_line(line)
        cached = self._line_cache.get(source_line)
        if cached is not None:
            return cached

        anchor = self.map_offset(self.source.line_anchor_offset(source_line))
        choice = choose_best_target_line(
            self.source.decoded_line(source_line),
            anchor.target_line,
            self.target,
            self.tuning,
            tracer=self.tracer,
        )
        mapping = LineMapping(
            source_line=source_line,
            target_line=choice.target_line,
            strategy=choice.strategy,
            confidence=choice.confidence,
        )
        self._line_cache[source_line] = mapping
        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug(
                "[map] line %d -> %d (anchor %d, %s, %.3f)",
                source_line,
                mapping.target_line,
                anchor.target_line,
                mapping.strategy.value,
                mapping.confidence,
            )
        return mapping

    def map_cursor(self, cursor: Cursor) -> OffsetMapping:
        """Map a 1-based cursor.

        Mid-line cursors keep character precision through :meth:`map_offset`;
        a cursor in column 1 asks which block it sits in and is answered by
        :meth:`map_line`, landing on the start of the matched target line.
        """

        source_offset = self.source.cursor_to_offset(cursor.line, cursor.column)
        offset_mapping = self.map_offset(source_offset)
        if cursor.column > 1:
            return offset_mapping

        line_mapping = self.map_line(cursor.line)
        start, _ = self.target.line_range(line_mapping.target_line)
        return OffsetMapping(
            source_offset=offset_mapping.source_offset,
            source_line=offset_mapping.source_line,
            source_column=offset_mapping.source_column,
            target_offset=start,
            target_line=line_mapping.target_line,
            target_column=self.target.offset_to_column(start),
            strategy=line_mapping.strategy,
            confidence=line_mapping.confidence,
        )

    def map_lines(self) -> List[int]:
        """Return a non-decreasing 1-based target line for every source line."""

        result: List[int] = []
        previous = 1
        for line in range(1, self.source.line_count + 1):
            previous = max(previous, self.map_line(line).target_line)
            result.append(previous)
        return result


def build_aligner(
    source_text: str,
    target_text: str,
    settings: Settings,
    *,
    source_nodes: Sequence[NodeRecord] | None = None,
    target_nodes: Sequence[NodeRecord] | None = None,
) -> Aligner | None:
    """Return the aligner configured for this deployment.

    ``None`` selects the mapper's default text aligner.
    """

    if settings.aligner != "structural":
        return None
    return StructuralLCSAligner(
        source_nodes or (),
        target_nodes or (),
        target_length=len(to_units(target_text, settings.position_encoding)),
        confidence=settings.structural_confidence,
        fallback_confidence=settings.diff_confidence,
        signature_threshold=settings.structural_signature_threshold,
    )


def create_mapping(
    source_text: str,
    target_text: str,
    *,
    settings: Settings | None = None,
    aligner: Aligner | None = None,
    tracer: MappingTracer | None = None,
) -> Mapper:
    return Mapper(source_text, target_text, settings=settings, aligner=aligner, tracer=tracer)


__all__ = ["Mapper", "build_aligner", "create_mapping"]
