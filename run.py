#!/usr/bin/env python3
"""Development launcher for the preview sync service."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import uvicorn

SERVICE_APP = "previewsync.main:app"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7610
PROJECT_ROOT = Path(__file__).resolve().parent


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the launcher script."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--host",
        default=os.getenv("PREVIEWSYNC_HOST", DEFAULT_HOST),
        help="Host interface for the mapping service.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PREVIEWSYNC_PORT", DEFAULT_PORT)),
        help="Port for the mapping service.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("PREVIEWSYNC_LOG_LEVEL", "info").lower(),
        help="Log level passed to Uvicorn.",
    )
    parser.add_argument(
        "--reload",
        dest="reload",
        action="store_true",
        default=os.getenv("RELOAD", "false").lower() in {"1", "true", "yes"},
        help="Enable autoreload.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    sys.path.insert(0, str(PROJECT_ROOT))

    uvicorn.run(
        SERVICE_APP,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=args.reload,
        reload_dirs=[str(PROJECT_ROOT / "previewsync")] if args.reload else None,
    )


if __name__ == "__main__":
    main()
