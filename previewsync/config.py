"""Configuration utilities for the previewsync service."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models.mapping import LineMatchTuning


def _env_flag(name: str, default: bool) -> bool:
    """Return a boolean flag derived from environment variables."""

    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    """Return a float from the environment, ignoring unparsable values."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    """Return an integer from the environment, ignoring unparsable values."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent


def _load_environment() -> None:
    """Load environment variables from a ``.env`` file if present."""

    explicit_path = os.getenv("PREVIEWSYNC_ENV_FILE")
    candidates = []

    if explicit_path:
        candidates.append(Path(explicit_path))

    candidates.append(PROJECT_ROOT / ".env")

    for candidate in candidates:
        try_path = candidate.expanduser()
        if try_path.exists():
            load_dotenv(try_path, override=False)


_load_environment()


class Settings(BaseModel):
    """Service and engine configuration loaded from environment variables."""

    model_config = ConfigDict(validate_default=True)

    host: str = Field(default_factory=lambda: os.getenv("PREVIEWSYNC_HOST", "127.0.0.1"))
    port: int = Field(default_factory=lambda: _env_int("PREVIEWSYNC_PORT", 7610))
    log_level: str = Field(
        default_factory=lambda: os.getenv("PREVIEWSYNC_LOG_LEVEL", "info")
    )
    aligner: Literal["text", "structural"] = Field(
        default_factory=lambda: os.getenv("PREVIEWSYNC_ALIGNER", "text").strip().lower()
    )
    position_encoding: Literal["utf-16", "codepoint"] = Field(
        default_factory=lambda: os.getenv("PREVIEWSYNC_POSITION_ENCODING", "utf-16")
        .strip()
        .lower()
    )
    search_before: int = Field(
        default_factory=lambda: _env_int("PREVIEWSYNC_SEARCH_BEFORE", 80)
    )
    search_after: int = Field(
        default_factory=lambda: _env_int("PREVIEWSYNC_SEARCH_AFTER", 120)
    )
    distance_penalty: float = Field(
        default_factory=lambda: _env_float("PREVIEWSYNC_DISTANCE_PENALTY", 220.0)
    )
    min_similarity: float = Field(
        default_factory=lambda: _env_float("PREVIEWSYNC_MIN_SIMILARITY", 0.17)
    )
    substring_bonus: float = Field(
        default_factory=lambda: _env_float("PREVIEWSYNC_SUBSTRING_BONUS", 0.25)
    )
    substring_min_length: int = Field(
        default_factory=lambda: _env_int("PREVIEWSYNC_SUBSTRING_MIN_LENGTH", 4)
    )
    diff_confidence: float = Field(
        default_factory=lambda: _env_float("PREVIEWSYNC_DIFF_CONFIDENCE", 0.25)
    )
    blank_line_confidence: float = Field(
        default_factory=lambda: _env_float("PREVIEWSYNC_BLANK_LINE_CONFIDENCE", 0.5)
    )
    no_match_confidence: float = Field(
        default_factory=lambda: _env_float("PREVIEWSYNC_NO_MATCH_CONFIDENCE", 0.35)
    )
    structural_confidence: float = Field(
        default_factory=lambda: _env_float("PREVIEWSYNC_STRUCTURAL_CONFIDENCE", 0.5)
    )
    structural_signature_threshold: float = Field(
        default_factory=lambda: _env_float(
            "PREVIEWSYNC_STRUCTURAL_SIGNATURE_THRESHOLD", 100.0
        )
    )
    alignment_cell_warning: int = Field(
        default_factory=lambda: _env_int(
            "PREVIEWSYNC_ALIGNMENT_CELL_WARNING", 25_000_000
        )
    )
    mapper_cache_size: int = Field(
        default_factory=lambda: _env_int("PREVIEWSYNC_MAPPER_CACHE_SIZE", 16)
    )
    trace: bool = Field(default_factory=lambda: _env_flag("PREVIEWSYNC_TRACE", False))
    trace_dir: Path = Field(
        default_factory=lambda: Path(
            os.getenv("PREVIEWSYNC_TRACE_DIR", "previewsync/logs/trace")
        )
    )

    @field_validator(
        "min_similarity",
        "diff_confidence",
        "blank_line_confidence",
        "no_match_confidence",
        "structural_confidence",
        mode="after",
    )
    @classmethod
    def _clamp_unit_interval(cls, value: float) -> float:
        return max(0.0, min(1.0, value))

    @field_validator("log_level", mode="after")
    @classmethod
    def _lower_log_level(cls, value: str) -> str:
        return value.strip().lower() or "info"

    @field_validator("search_before", "search_after", "substring_min_length", mode="after")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        return max(0, value)

    @field_validator("distance_penalty", mode="after")
    @classmethod
    def _positive_penalty(cls, value: float) -> float:
        if value <= 0:
            return 220.0
        return value

    @field_validator("structural_signature_threshold", mode="after")
    @classmethod
    def _clamp_ratio(cls, value: float) -> float:
        return max(0.0, min(100.0, value))

    @field_validator("mapper_cache_size", mode="after")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        return max(1, value)

    def line_match_tuning(self) -> LineMatchTuning:
        """Return the line matcher thresholds described by these settings."""

        return LineMatchTuning(
            search_before=self.search_before,
            search_after=self.search_after,
            distance_penalty=self.distance_penalty,
            min_similarity=self.min_similarity,
            substring_bonus=self.substring_bonus,
            substring_min_length=self.substring_min_length,
            blank_line_confidence=self.blank_line_confidence,
            no_match_confidence=self.no_match_confidence,
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached settings so that subsequent calls reload from the environment."""

    get_settings.cache_clear()
