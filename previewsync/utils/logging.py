from __future__ import annotations

import logging
import os
import sys

TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")


def trace(self: logging.Logger, msg: str, *args, **kwargs) -> None:  # type: ignore[override]
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, msg, args, **kwargs)


logging.Logger.trace = trace  # type: ignore[attr-defined]


def configure_logging(default_level: str = "INFO") -> logging.Logger:
    level_name = os.getenv("PREVIEWSYNC_LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = TRACE_LEVEL if level_name == "TRACE" else logging.INFO
    logging.basicConfig(
        level=level,
        stream=sys.stdout,
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )
    return logging.getLogger("previewsync")


__all__ = ["TRACE_LEVEL", "configure_logging"]
