"""Position mapping engine and its service helpers."""

from .aligner import Aligner, TextDiffAligner
from .line_locator import LineIndex
from .line_similarity import choose_best_target_line, line_similarity, tokenize_line
from .mapper import Mapper, build_aligner, create_mapping
from .normalizer import normalize
from .structural import StructuralLCSAligner

__all__ = [
    "Aligner",
    "LineIndex",
    "Mapper",
    "StructuralLCSAligner",
    "TextDiffAligner",
    "build_aligner",
    "choose_best_target_line",
    "create_mapping",
    "line_similarity",
    "normalize",
    "tokenize_line",
]
