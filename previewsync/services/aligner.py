"""Character-level alignment between a source text and its rendered form."""

from __future__ import annotations

import logging
from typing import List, Protocol, Tuple

import numpy as np

from .normalizer import normalize

LOGGER = logging.getLogger(__name__)


class Aligner(Protocol):
    """Projects source offsets onto target offsets for one document pair."""

    name: str

    def project(self, source_offset: int) -> Tuple[int, float]:
        """Return ``(target_offset, confidence)`` for a clamped source offset."""
        ...


def _codes(text: str) -> np.ndarray:
    return np.fromiter((ord(char) for char in text), dtype=np.int64, count=len(text))


def build_edit_distance_table(a: str, b: str) -> np.ndarray:
    """Return the ``(len(a)+1) x (len(b)+1)`` Levenshtein cost matrix."""

    m, n = len(a), len(b)
    table = np.empty((m + 1, n + 1), dtype=np.int32)
    columns = np.arange(n + 1, dtype=np.int32)
    table[0] = columns
    a_codes = _codes(a)
    b_codes = _codes(b)

    for i in range(1, m + 1):
        previous = table[i - 1]
        cost = (b_codes != a_codes[i - 1]).astype(np.int32)
        row = np.empty(n + 1, dtype=np.int32)
        row[0] = i
        row[1:] = np.minimum(previous[1:] + 1, previous[:-1] + cost)
        # insertions: row[j] = min(row[j], row[j - 1] + 1)
        table[i] = np.minimum.accumulate(row - columns) + columns

    return table


def trace_projection(a: str, b: str, table: np.ndarray) -> List[int]:
    """Walk the cost matrix from ``(m, n)`` back to the origin.

    Entry ``k`` of the result is the ``b`` index reached when the ``a`` index
    first equals ``k``. Diagonal moves win ties, then deletions, then
    insertions.
    """

    i, j = len(a), len(b)
    projection = [0] * len(a)
    while i > 0 or j > 0:
        here = int(table[i, j])
        if i > 0 and j > 0:
            cost = 0 if a[i - 1] == b[j - 1] else 1
            if here == int(table[i - 1, j - 1]) + cost:
                projection[i - 1] = j - 1
                i -= 1
                j -= 1
                continue
        if i > 0 and here == int(table[i - 1, j]) + 1:
            projection[i - 1] = j
            i -= 1
            continue
        if j > 0 and here == int(table[i, j - 1]) + 1:
            j -= 1
            continue
        break
    return projection


class TextDiffAligner:
    """Edit-distance alignment over style-normalized texts.

    The cost matrix and its back-trace are computed on first use and kept in
    a single slot keyed by the last ``(a, b)`` pair; the instance belongs to
    one mapper and is discarded with it.
    """

    name = "text"

    def __init__(
        self,
        source_units: str,
        target_units: str,
        *,
        confidence: float = 0.25,
        cell_warning: int | None = None,
    ) -> None:
        self.source = normalize(source_units)
        self.target = normalize(target_units)
        self.source_length = len(source_units)
        self.target_length = len(target_units)
        self.confidence = confidence
        self.cell_warning = cell_warning
        self._slot_key: Tuple[str, str] | None = None
        self._slot_projection: List[int] = []
        self._slot_distance = 0

    @property
    def edit_distance(self) -> int:
        self._ensure_slot(self.source.text, self.target.text)
        return self._slot_distance

    def _ensure_slot(self, a: str, b: str) -> List[int]:
        key = (a, b)
        if self._slot_key == key:
            return self._slot_projection

        cells = (len(a) + 1) * (len(b) + 1)
        if self.cell_warning and cells > self.cell_warning:
            LOGGER.warning(
                "[align] Edit-distance table has %d cells (%d x %d); mapping will be slow",
                cells,
                len(a) + 1,
                len(b) + 1,
            )
        table = build_edit_distance_table(a, b)
        self._slot_projection = trace_projection(a, b, table)
        self._slot_distance = int(table[len(a), len(b)])
        self._slot_key = key
        LOGGER.debug("[align] Built %dx%d table, distance=%d", len(a), len(b), self._slot_distance)
        return self._slot_projection

    def align_offset(self, a: str, b: str, a_pos: int) -> int:
        if a_pos < 0:
            return 0
        if a_pos >= len(a):
            return len(b)
        return self._ensure_slot(a, b)[a_pos]

    def project(self, source_offset: int) -> Tuple[int, float]:
        return self.project_offset(source_offset), self.confidence

    def project_offset(self, offset: int) -> int:
        source, target = self.source, self.target
        if 0 <= offset < self.source_length:
            normalized_offset = source.map_to_normalized[offset]
        elif offset >= self.source_length:
            normalized_offset = len(source.text)
        else:
            normalized_offset = 0

        aligned = self.align_offset(source.text, target.text, normalized_offset)
        if aligned >= len(target.text):
            return self.target_length
        if aligned < 0:
            return 0
        return target.map_to_original[aligned]


__all__ = [
    "Aligner",
    "TextDiffAligner",
    "build_edit_distance_table",
    "trace_projection",
]
