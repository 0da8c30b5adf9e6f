#!/usr/bin/env python3
"""Generate a per-line mapping report for a source document and its rendering."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from previewsync.services.line_map_report import generate_line_map_report  # noqa: E402
from previewsync.services.mapper import create_mapping  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("source", type=Path, help="Source document (e.g. Markdown).")
    parser.add_argument("rendered", type=Path, help="Rendered preview text.")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Report path (default: reports/<source-stem>_line_map.json).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    for path in (args.source, args.rendered):
        if not path.exists():
            raise SystemExit(f"Document not found: {path}")

    mapper = create_mapping(
        args.source.read_text(encoding="utf-8"),
        args.rendered.read_text(encoding="utf-8"),
    )
    report = generate_line_map_report(mapper)

    output_path = args.output or REPO_ROOT / "reports" / f"{args.source.stem}_line_map.json"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")

    adjusted = sum(1 for row in report if row["adjusted"])
    print(f"Report written to {output_path} ({len(report)} lines, {adjusted} held back)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
