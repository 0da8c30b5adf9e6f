"""Windowed token-similarity search for the target line matching a source line."""

from __future__ import annotations

import re
import unicodedata
from typing import List, TYPE_CHECKING

from ..models.mapping import LineChoice, LineMatchTuning, Strategy
from .line_locator import LineIndex

if TYPE_CHECKING:
    from ..utils.trace import MappingTracer

_SEPARATOR_RE = re.compile(r"[\W_]+")

DEFAULT_TUNING = LineMatchTuning()


def tokenize_line(line: str) -> List[str]:
    folded = unicodedata.normalize("NFKC", line).casefold()
    return [token for token in _SEPARATOR_RE.split(folded) if token]


def line_similarity(
    source_line: str, target_line: str, tuning: LineMatchTuning = DEFAULT_TUNING
) -> float:
    """Jaccard similarity of token sets, plus a bonus for substring containment."""

    source_trimmed = source_line.strip()
    target_trimmed = target_line.strip()

    if not source_trimmed and not target_trimmed:
        return 1.0
    if not source_trimmed or not target_trimmed:
        return 0.0
    if source_trimmed == target_trimmed:
        return 1.0

    source_tokens = tokenize_line(source_trimmed)
    target_tokens = tokenize_line(target_trimmed)
    if not source_tokens or not target_tokens:
        return 0.0

    source_set = set(source_tokens)
    target_set = set(target_tokens)
    union = len(source_set | target_set)
    score = len(source_set & target_set) / union

    source_joined = " ".join(source_tokens)
    target_joined = " ".join(target_tokens)
    shorter = min(len(source_joined), len(target_joined))
    if shorter >= tuning.substring_min_length and (
        source_joined in target_joined or target_joined in source_joined
    ):
        score += tuning.substring_bonus

    return max(0.0, min(1.0, score))


def choose_best_target_line(
    source_line_text: str,
    base_line: int,
    target: LineIndex,
    tuning: LineMatchTuning = DEFAULT_TUNING,
    tracer: "MappingTracer | None" = None,
) -> LineChoice:
    """Refine *base_line* to the nearby target line that best resembles the source line.

    Candidates lie in ``[base - search_before, base + search_after]``; each is
    scored as similarity minus ``|line - base| / distance_penalty`` so that a
    near line wins when similarities tie. A best similarity under
    ``min_similarity`` means no match and the base line is kept.
    """

    base = target.clamp_line(base_line)

    if not source_line_text.strip():
        if tracer:
            tracer.ev("line_blank", base=base, strategy=Strategy.LINE_ANCHOR.value)
        return LineChoice(base, Strategy.LINE_ANCHOR, tuning.blank_line_confidence)

    window_start = target.clamp_line(base - tuning.search_before)
    window_end = target.clamp_line(base + tuning.search_after)

    best_line = base
    best_score = float("-inf")
    best_similarity = 0.0

    for line in range(window_start, window_end + 1):
        similarity = line_similarity(source_line_text, target.decoded_line(line), tuning)
        if similarity == 0:
            continue
        score = similarity - abs(line - base) / tuning.distance_penalty
        if score > best_score:
            best_score = score
            best_similarity = similarity
            best_line = line

    if best_similarity < tuning.min_similarity:
        if tracer:
            tracer.ev(
                "line_fallback",
                base=base,
                similarity=best_similarity,
                strategy=Strategy.LINE_ANCHOR.value,
            )
        return LineChoice(base, Strategy.LINE_ANCHOR, tuning.no_match_confidence)

    strategy = Strategy.LINE_ANCHOR if best_line == base else Strategy.LINE_SIMILARITY
    if tracer:
        tracer.ev(
            "line_refined",
            base=base,
            line=best_line,
            similarity=best_similarity,
            score=best_score,
            window=[window_start, window_end],
            strategy=strategy.value,
        )
    return LineChoice(best_line, strategy, best_similarity)


__all__ = ["choose_best_target_line", "line_similarity", "tokenize_line"]
