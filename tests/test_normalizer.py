"""Tests for the style normalizer and position-encoding helpers."""

from __future__ import annotations

from previewsync.services.normalizer import (
    from_units,
    iter_code_points,
    normalize,
    plain_equivalent,
    to_units,
)


def test_styled_letter_collapses_to_one_position() -> None:
    units = to_units("\U0001D5D4B")
    assert len(units) == 3

    result = normalize(units)
    assert result.text == "AB"
    assert result.map_to_original == [0, 2]
    assert result.map_to_normalized == [0, 0, 1]


def test_each_styled_alphabet_maps_to_ascii() -> None:
    samples = {
        "\U0001D5EE": "a",  # sans-serif bold
        "\U0001D7ED": "1",  # bold digit
        "\U0001D609": "B",  # sans-serif italic
        "\U0001D657": "b",  # sans-serif bold italic
        "\U0001D670": "A",  # monospace
        "\U0001D68B": "b",
        "\U0001D7FF": "9",
    }
    for styled, plain in samples.items():
        assert plain_equivalent(ord(styled)) == plain
        assert normalize(to_units(styled)).text == plain


def test_strike_and_underline_marks_are_dropped() -> None:
    result = normalize("a\u0336b\u0332")
    assert result.text == "ab"
    assert result.map_to_normalized == [0, 0, 1, 1]
    assert result.map_to_original == [0, 2]


def test_leading_mark_attaches_to_position_zero() -> None:
    result = normalize("\u0336a")
    assert result.text == "a"
    assert result.map_to_normalized == [0, 0]


def test_unrelated_characters_pass_through() -> None:
    text = "x ≤ y → ∑"
    result = normalize(text)
    assert result.text == text
    assert result.map_to_original == list(range(len(text)))


def test_codepoint_encoding_keeps_python_indices() -> None:
    text = "\U0001D5D4B"
    assert to_units(text, "codepoint") == text
    assert from_units(to_units(text)) == text


def test_iter_code_points_reports_surrogate_width() -> None:
    units = to_units("a\U0001D5D4b")
    assert [(offset, width) for offset, width, _ in iter_code_points(units)] == [
        (0, 1),
        (1, 2),
        (3, 1),
    ]
