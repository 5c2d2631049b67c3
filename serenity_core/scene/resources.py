"""GPU-side resource bookkeeping for composed scenes."""
from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

_LOGGER = logging.getLogger(__name__)

RESOURCE_KINDS = ("buffer", "geometry", "material", "texture")


@dataclass(frozen=True)
class GpuResource:
    resource_id: int
    kind: str
    label: str

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.resource_id, "kind": self.kind, "label": self.label}


class ResourceTracker:
    """Hands out resource handles and tracks which are still live.

    A tracker may be shared by several scenes; each scene releases only
    the handles it allocated.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self._live: Dict[int, GpuResource] = {}
        self._lock = threading.Lock()
        self.allocated_total = 0
        self.released_total = 0

    def allocate(self, kind: str, label: str) -> GpuResource:
        if kind not in RESOURCE_KINDS:
            raise ValueError(f"Unknown resource kind: {kind}")
        with self._lock:
            res = GpuResource(resource_id=next(self._ids), kind=kind, label=label)
            self._live[res.resource_id] = res
            self.allocated_total += 1
        return res

    def release(self, res: GpuResource) -> bool:
        with self._lock:
            if self._live.pop(res.resource_id, None) is None:
                return False
            self.released_total += 1
        return True

    def is_live(self, res: GpuResource) -> bool:
        with self._lock:
            return res.resource_id in self._live

    def live(self, kind: Optional[str] = None) -> List[GpuResource]:
        with self._lock:
            return [r for r in self._live.values() if kind is None or r.kind == kind]

    @property
    def live_count(self) -> int:
        with self._lock:
            return len(self._live)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "live": len(self._live),
                "allocated_total": self.allocated_total,
                "released_total": self.released_total,
            }
