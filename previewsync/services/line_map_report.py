"""Utilities for generating per-line mapping reports."""

from __future__ import annotations

from .mapper import Mapper


def generate_line_map_report(mapper: Mapper) -> list[dict]:
    """Return one row per source line with the matcher's and the monotonic target."""

    monotonic = mapper.map_lines()
    report: list[dict] = []
    for line, scrolled_line in enumerate(monotonic, start=1):
        mapping = mapper.map_line(line)
        report.append(
            {
                "source_line": line,
                "source_text": mapper.source.decoded_line(line),
                "target_line": mapping.target_line,
                "target_text": mapper.target.decoded_line(mapping.target_line),
                "monotonic_line": scrolled_line,
                "strategy": mapping.strategy.value,
                "confidence": round(mapping.confidence, 3),
                "adjusted": scrolled_line != mapping.target_line,
            }
        )
    return report


__all__ = ["generate_line_map_report"]
