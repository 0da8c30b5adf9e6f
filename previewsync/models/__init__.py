"""Record types for the previewsync engine and service."""

from .mapping import (
    Cursor,
    LineChoice,
    LineMapping,
    LineMatchTuning,
    NormalizedString,
    OffsetMapping,
    Strategy,
)
from .sourcemap import (
    SOURCEMAP_VERSION,
    NodeRecord,
    SourcemapData,
    SourcemapPoint,
    SourcemapRange,
    SourcemapSegment,
)

__all__ = [
    "Cursor",
    "LineChoice",
    "LineMapping",
    "LineMatchTuning",
    "NodeRecord",
    "NormalizedString",
    "OffsetMapping",
    "SOURCEMAP_VERSION",
    "SourcemapData",
    "SourcemapPoint",
    "SourcemapRange",
    "SourcemapSegment",
    "Strategy",
]
