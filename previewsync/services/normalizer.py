"""Reverse presentation-only Unicode styling so texts compare by content."""

from __future__ import annotations

from typing import Iterator, List, Tuple

from ..models.mapping import NormalizedString

COMBINING_STRIKE = 0x0336
COMBINING_UNDERLINE = 0x0332
DROPPED_MARKS = frozenset({COMBINING_STRIKE, COMBINING_UNDERLINE})

# (first code point, last code point, plain equivalent of the first)
STYLED_RANGES: Tuple[Tuple[int, int, int], ...] = (
    (0x1D5D4, 0x1D5ED, ord("A")),  # sans-serif bold
    (0x1D5EE, 0x1D607, ord("a")),
    (0x1D7EC, 0x1D7F5, ord("0")),
    (0x1D608, 0x1D621, ord("A")),  # sans-serif italic
    (0x1D622, 0x1D63B, ord("a")),
    (0x1D63C, 0x1D655, ord("A")),  # sans-serif bold italic
    (0x1D656, 0x1D66F, ord("a")),
    (0x1D670, 0x1D689, ord("A")),  # monospace
    (0x1D68A, 0x1D6A3, ord("a")),
    (0x1D7F6, 0x1D7FF, ord("0")),
)

POSITION_ENCODINGS = ("utf-16", "codepoint")

_HIGH_SURROGATES = ("\ud800", "\udbff")
_LOW_SURROGATES = ("\udc00", "\udfff")


def to_units(text: str, encoding: str = "utf-16") -> str:
    """Return *text* indexed in the requested position encoding.

    For ``utf-16`` every astral code point is expanded into its surrogate pair
    so that string indices equal UTF-16 code-unit offsets.
    """

    if encoding == "codepoint" or text.isascii():
        return text
    pieces: List[str] = []
    for char in text:
        code = ord(char)
        if code <= 0xFFFF:
            pieces.append(char)
            continue
        code -= 0x10000
        pieces.append(chr(0xD800 + (code >> 10)))
        pieces.append(chr(0xDC00 + (code & 0x3FF)))
    return "".join(pieces)


def from_units(units: str) -> str:
    """Recombine surrogate pairs produced by :func:`to_units`."""

    if units.isascii():
        return units
    return units.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def iter_code_points(units: str, start: int = 0, end: int | None = None) -> Iterator[Tuple[int, int, int]]:
    """Yield ``(offset, width, code_point)`` for each character in ``units[start:end]``."""

    stop = len(units) if end is None else min(end, len(units))
    index = max(0, start)
    while index < stop:
        char = units[index]
        if (
            _HIGH_SURROGATES[0] <= char <= _HIGH_SURROGATES[1]
            and index + 1 < stop
            and _LOW_SURROGATES[0] <= units[index + 1] <= _LOW_SURROGATES[1]
        ):
            code = 0x10000 + ((ord(char) - 0xD800) << 10) + (ord(units[index + 1]) - 0xDC00)
            yield index, 2, code
            index += 2
            continue
        yield index, 1, ord(char)
        index += 1


def plain_equivalent(code: int) -> str | None:
    """Return the unstyled form of *code*, or ``None`` for decoration to drop."""

    if code in DROPPED_MARKS:
        return None
    if code >= STYLED_RANGES[0][0]:
        for first, last, base in STYLED_RANGES:
            if first <= code <= last:
                return chr(base + code - first)
    return chr(code)


def normalize(units: str) -> NormalizedString:
    """Strip mathematical-alphanumeric styling and strike/underline marks.

    Offsets in the maps are indices into *units*; a surrogate pair collapses
    into one normalized position. Unknown code points pass through verbatim.
    """

    text: List[str] = []
    map_to_original: List[int] = []
    map_to_normalized: List[int] = [0] * len(units)

    for offset, width, code in iter_code_points(units):
        plain = plain_equivalent(code)
        if plain is None:
            target_index = max(0, len(text) - 1)
        else:
            target_index = len(text)
            text.append(plain)
            map_to_original.append(offset)
        for k in range(width):
            map_to_normalized[offset + k] = target_index

    return NormalizedString(
        text="".join(text),
        map_to_original=map_to_original,
        map_to_normalized=map_to_normalized,
    )


__all__ = [
    "COMBINING_STRIKE",
    "COMBINING_UNDERLINE",
    "POSITION_ENCODINGS",
    "STYLED_RANGES",
    "from_units",
    "iter_code_points",
    "normalize",
    "plain_equivalent",
    "to_units",
]
