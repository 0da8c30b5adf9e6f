"""Position mapping endpoints used by the editor preview."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..config import Settings, get_settings
from ..models.mapping import Cursor, LineMapping, OffsetMapping
from ..observability import metrics_registry
from ..services.mapper import Mapper
from ..services.mapper_registry import mapper_registry
from ..services.sourcemap import build_sourcemap, parse_sourcemap, resolve_preview_line
from ..services.structural import node_records_from_payload
from ..utils.errors import AlignerConfigurationError, SourcemapFormatError
from ..utils.trace import MappingTracer

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["mapping"])

StrategyName = Literal["diff", "line-anchor", "line-similarity"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NodePayload(CamelModel):
    """Block node reported by the source or preview parser."""

    type: str
    start: int = Field(ge=0)
    end: int = Field(ge=0)
    text: str | None = None
    signature: str | None = None


class DocumentPairPayload(CamelModel):
    source: str
    target: str
    source_nodes: list[NodePayload] | None = None
    target_nodes: list[NodePayload] | None = None


class OffsetRequest(DocumentPairPayload):
    offset: int


class CursorPayload(CamelModel):
    line: int
    column: int


class CursorRequest(DocumentPairPayload):
    cursor: CursorPayload


class LineRequest(DocumentPairPayload):
    line: int


class OffsetMappingPayload(CamelModel):
    """Mapped position with the strategy that produced it."""

    source_offset: int
    source_line: int
    source_column: int
    target_offset: int
    target_line: int
    target_column: int
    strategy: StrategyName
    confidence: float = Field(ge=0.0, le=1.0)

    @classmethod
    def from_mapping(cls, mapping: OffsetMapping) -> "OffsetMappingPayload":
        return cls(**mapping.to_dict())


class LineMappingPayload(CamelModel):
    source_line: int
    target_line: int
    strategy: StrategyName
    confidence: float = Field(ge=0.0, le=1.0)

    @classmethod
    def from_mapping(cls, mapping: LineMapping) -> "LineMappingPayload":
        return cls(**mapping.to_dict())


class CursorResponse(CamelModel):
    cursor_mapping: OffsetMappingPayload
    preview_line: int


class LinesResponse(CamelModel):
    lines: list[int]
    sourcemap: dict[str, Any]


class PreviewLineRequest(CamelModel):
    sourcemap: dict[str, Any]
    line: int = Field(ge=1)


class PreviewLineResponse(CamelModel):
    preview_line: int


def _unprocessable(code: str, message: str, extra: dict[str, Any]) -> HTTPException:
    return HTTPException(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"code": code, "message": message, **extra},
    )


@contextmanager
def _mapper_for(payload: DocumentPairPayload, settings: Settings) -> Iterator[Mapper]:
    """Yield the cached mapper for the payload's document pair.

    Node payloads are only consulted by the structural aligner. When tracing
    is enabled the decision events of this request are flushed afterwards.
    """

    source_nodes = target_nodes = None
    if settings.aligner == "structural":
        source_nodes = node_records_from_payload(
            node.model_dump() for node in payload.source_nodes or ()
        )
        target_nodes = node_records_from_payload(
            node.model_dump() for node in payload.target_nodes or ()
        )

    tracer = MappingTracer(out_dir=str(settings.trace_dir)) if settings.trace else None
    try:
        with mapper_registry.acquire(
            payload.source,
            payload.target,
            settings,
            source_nodes=source_nodes,
            target_nodes=target_nodes,
            tracer=tracer,
        ) as mapper:
            yield mapper
    except AlignerConfigurationError as exc:
        LOGGER.warning("[mapping] %s: %s", exc.code, exc)
        raise _unprocessable(exc.code, str(exc), {"aligner": exc.aligner, **exc.extra}) from exc
    finally:
        if tracer is not None and tracer.events:
            tracer.flush_jsonl()


@router.post("/map/offset", response_model=OffsetMappingPayload)
def map_offset(
    payload: OffsetRequest,
    settings: Settings = Depends(get_settings),
) -> OffsetMappingPayload:
    """Project a source offset into the rendered preview."""

    with _mapper_for(payload, settings) as mapper:
        mapping = mapper.map_offset(payload.offset)
    metrics_registry.record_mapping("offset", mapping.strategy.value, mapping.confidence)
    return OffsetMappingPayload.from_mapping(mapping)


@router.post("/map/cursor", response_model=CursorResponse)
def map_cursor(
    payload: CursorRequest,
    settings: Settings = Depends(get_settings),
) -> CursorResponse:
    """Map an editor cursor and report the line the preview should scroll to."""

    cursor = Cursor(line=payload.cursor.line, column=payload.cursor.column)
    with _mapper_for(payload, settings) as mapper:
        mapping = mapper.map_cursor(cursor)
        preview_line = mapper.map_lines()[mapping.source_line - 1]
    metrics_registry.record_mapping("cursor", mapping.strategy.value, mapping.confidence)
    return CursorResponse(
        cursor_mapping=OffsetMappingPayload.from_mapping(mapping),
        preview_line=preview_line,
    )


@router.post("/map/line", response_model=LineMappingPayload)
def map_line(
    payload: LineRequest,
    settings: Settings = Depends(get_settings),
) -> LineMappingPayload:
    with _mapper_for(payload, settings) as mapper:
        mapping = mapper.map_line(payload.line)
    metrics_registry.record_mapping("line", mapping.strategy.value, mapping.confidence)
    return LineMappingPayload.from_mapping(mapping)


@router.post("/map/lines", response_model=LinesResponse)
def map_lines(
    payload: DocumentPairPayload,
    settings: Settings = Depends(get_settings),
) -> LinesResponse:
    """Return the monotonic line map and its version 2 sourcemap."""

    with _mapper_for(payload, settings) as mapper:
        lines = mapper.map_lines()
        sourcemap = build_sourcemap(mapper)
    return LinesResponse(lines=lines, sourcemap=sourcemap.to_dict())


@router.post("/sourcemap/preview-line", response_model=PreviewLineResponse)
def read_preview_line(payload: PreviewLineRequest) -> PreviewLineResponse:
    """Look up the preview line for a source line in a previously exported sourcemap."""

    try:
        sourcemap = parse_sourcemap(payload.sourcemap)
    except SourcemapFormatError as exc:
        raise _unprocessable(exc.code, str(exc), exc.extra) from exc
    return PreviewLineResponse(preview_line=resolve_preview_line(sourcemap, payload.line))


__all__ = [
    "CursorResponse",
    "LineMappingPayload",
    "LinesResponse",
    "OffsetMappingPayload",
    "PreviewLineResponse",
    "router",
]
