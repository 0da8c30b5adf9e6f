"""Offset <-> (line, column) conversions over a line-start table."""

from __future__ import annotations

import bisect
import unicodedata
from typing import List, Tuple

from .normalizer import from_units, iter_code_points


def build_line_starts(text: str) -> List[int]:
    starts = [0]
    index = text.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = text.find("\n", index + 1)
    return starts


def _is_letter_or_digit(code: int) -> bool:
    return unicodedata.category(chr(code))[0] in {"L", "N"}


class LineIndex:
    """Line-start table for one text, addressed in 1-based lines and columns.

    Every lookup clamps its input into the text, so callers never see an
    out-of-range error.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.line_starts = build_line_starts(text)

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

    def clamp_line(self, line: int) -> int:
        return min(max(line, 1), self.line_count)

    def clamp_offset(self, offset: int) -> int:
        return min(max(offset, 0), len(self.text))

    def offset_to_line(self, offset: int) -> int:
        return max(1, bisect.bisect_right(self.line_starts, offset))

    def line_range(self, line: int) -> Tuple[int, int]:
        """Return the ``[start, end)`` span of *line*, excluding its newline."""

        index = self.clamp_line(line) - 1
        start = self.line_starts[index]
        if index + 1 < len(self.line_starts):
            end = self.line_starts[index + 1] - 1
        else:
            end = len(self.text)
        return start, end

    def line_text(self, line: int) -> str:
        start, end = self.line_range(line)
        return self.text[start:end]

    def offset_to_column(self, offset: int) -> int:
        start, end = self.line_range(self.offset_to_line(offset))
        return min(max(offset - start + 1, 1), max(1, end - start + 1))

    def cursor_to_offset(self, line: int, column: int) -> int:
        if not self.text:
            return 0
        start, end = self.line_range(line)
        return min(start + max(0, column - 1), end)

    def line_anchor_offset(self, line: int) -> int:
        """First letter/digit of *line*, else its first non-space, else its start."""

        start, end = self.line_range(line)
        for offset, _, code in iter_code_points(self.text, start, end):
            if _is_letter_or_digit(code):
                return offset
        for offset, _, code in iter_code_points(self.text, start, end):
            if not chr(code).isspace():
                return offset
        return start

    def decoded_line(self, line: int) -> str:
        """Line text with surrogate pairs recombined into code points."""

        return from_units(self.line_text(line))


__all__ = ["LineIndex", "build_line_starts"]
