"""Per-document-version mapper cache for the HTTP service."""

from __future__ import annotations

import hashlib
import json
import logging
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Iterator, Mapping, Sequence

from ..config import Settings
from ..models.sourcemap import NodeRecord
from ..utils.trace import MappingTracer
from .mapper import Mapper, build_aligner

LOGGER = logging.getLogger(__name__)


def _fingerprint(inputs: Mapping[str, Any]) -> str:
    """Return a deterministic digest of the mapper inputs."""

    packed = json.dumps(inputs, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(packed.encode("utf-8", "surrogatepass")).hexdigest()


@dataclass
class _Entry:
    mapper: Mapper
    lock: Lock = field(default_factory=Lock)


class MapperRegistry:
    """Bounded LRU of mappers keyed by document pair.

    Every edit produces a new pair and therefore a new mapper; stale entries
    age out. Each mapper is handed out under its own lock so queries against
    one instance are serialised.
    """

    def __init__(self, max_entries: int = 16) -> None:
        self._lock = Lock()
        self._entries: "OrderedDict[str, _Entry]" = OrderedDict()
        self.max_entries = max(1, max_entries)

    def reset(self) -> None:
        """Drop every cached mapper (useful for tests)."""

        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _key(
        self,
        source_text: str,
        target_text: str,
        settings: Settings,
        source_nodes: Sequence[NodeRecord] | None,
        target_nodes: Sequence[NodeRecord] | None,
    ) -> str:
        inputs: dict[str, Any] = {
            "source": source_text,
            "target": target_text,
            "settings": settings.model_dump(mode="json"),
        }
        if settings.aligner == "structural":
            inputs["source_nodes"] = [list(_node_tuple(node)) for node in source_nodes or ()]
            inputs["target_nodes"] = [list(_node_tuple(node)) for node in target_nodes or ()]
        return _fingerprint(inputs)

    @contextmanager
    def acquire(
        self,
        source_text: str,
        target_text: str,
        settings: Settings,
        *,
        source_nodes: Sequence[NodeRecord] | None = None,
        target_nodes: Sequence[NodeRecord] | None = None,
        tracer: MappingTracer | None = None,
    ) -> Iterator[Mapper]:
        """Yield the mapper for this document pair, holding its lock."""

        key = self._key(source_text, target_text, settings, source_nodes, target_nodes)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)

        if entry is None:
            aligner = build_aligner(
                source_text,
                target_text,
                settings,
                source_nodes=source_nodes,
                target_nodes=target_nodes,
            )
            entry = _Entry(
                Mapper(
                    source_text, target_text, settings=settings, aligner=aligner, tracer=tracer
                )
            )
            with self._lock:
                existing = self._entries.get(key)
                if existing is not None:
                    entry = existing
                else:
                    self._entries[key] = entry
                    while len(self._entries) > self.max_entries:
                        evicted, _ = self._entries.popitem(last=False)
                        LOGGER.debug("[registry] Evicted mapper %s", evicted[:12])

        with entry.lock:
            entry.mapper.tracer = tracer
            try:
                yield entry.mapper
            finally:
                entry.mapper.tracer = None


def _node_tuple(node: NodeRecord) -> tuple[str, str, int, int]:
    return node.node_type, node.signature, node.start, node.end


mapper_registry = MapperRegistry()

__all__ = ["MapperRegistry", "mapper_registry"]
