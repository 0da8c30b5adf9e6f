from __future__ import annotations

from typing import Any, Dict


class SourcemapFormatError(Exception):
    """Raised when a sourcemap payload does not follow the version 2 layout."""

    def __init__(self, code: str, message: str, extra: Dict[str, Any] | None = None):
        super().__init__(message)
        self.code = code
        self.extra = extra or {}


class AlignerConfigurationError(Exception):
    """Raised when the configured aligner cannot be built from the supplied inputs."""

    def __init__(
        self,
        code: str,
        message: str,
        aligner: str | None = None,
        extra: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.aligner = aligner
        self.extra = extra or {}


__all__ = ["AlignerConfigurationError", "SourcemapFormatError"]
