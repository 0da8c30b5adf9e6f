from __future__ import annotations

import json
import os
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .logging import configure_logging


LOGGER = configure_logging().getChild("mapping.trace")


@dataclass(slots=True)
class TraceEvent:
    t: float
    type: str
    data: Dict[str, Any]


class MappingTracer:
    """Collect structured decision events emitted while mapping positions."""

    def __init__(
        self, run_id: Optional[str] = None, out_dir: str = "previewsync/logs/trace"
    ) -> None:
        self.run_id = run_id or str(uuid.uuid4())
        self.out_dir = out_dir
        self.events: List[TraceEvent] = []
        self._path = os.path.join(self.out_dir, f"{self.run_id}.jsonl")
        self._summary_path = os.path.join(self.out_dir, f"{self.run_id}.summary.json")

    def ev(self, event_type: str, **data: Any) -> None:
        self.events.append(TraceEvent(t=time.time(), type=event_type, data=data))

    def flush_jsonl(self) -> str:
        os.makedirs(self.out_dir, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as handle:
            for event in self.events:
                payload = {"t": event.t, "type": event.type, **event.data}
                handle.write(json.dumps(payload, ensure_ascii=False) + "\n")
        with open(self._summary_path, "w", encoding="utf-8") as handle:
            json.dump(self._build_summary(), handle, ensure_ascii=False, indent=2)
        LOGGER.info("[mapping] Trace saved: %s", self._path)
        return self._path

    @property
    def path(self) -> str:
        return self._path

    @property
    def summary_path(self) -> str:
        return self._summary_path

    def as_list(self) -> List[Dict[str, Any]]:
        return [{"t": event.t, "type": event.type, **event.data} for event in self.events]

    def _build_summary(self) -> Dict[str, Any]:
        events = self.as_list()
        metadata: Dict[str, Any] = {}
        strategies: Dict[str, int] = {}
        decisions: List[Dict[str, Any]] = []

        decision_types = {"line_refined", "line_fallback", "line_blank"}

        for event in events:
            event_type = event.get("type")
            if event_type == "mapper_created":
                metadata = {
                    key: value for key, value in event.items() if key not in {"t", "type"}
                }
            if event_type in decision_types:
                decisions.append(event)
                strategy = str(event.get("strategy", ""))
                strategies[strategy] = strategies.get(strategy, 0) + 1

        return {
            "run_id": self.run_id,
            "metadata": metadata,
            "strategies": strategies,
            "decisions": decisions,
            "events": len(events),
        }


__all__ = ["MappingTracer", "TraceEvent"]
