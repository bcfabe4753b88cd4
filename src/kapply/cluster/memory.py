"""In-memory cluster API: thread-safe store that records every call."""

import copy
import threading
from typing import Any, Dict, List, Optional, Tuple
from ..ingest.models import ObservedState, ResourceKind
from ..utils.errors import ClusterAPIError
from ..utils.logging import get_logger
from .base import ClusterAPI

logger = get_logger("cluster.memory")

Key = Tuple[str, str]


class InMemoryCluster(ClusterAPI):
    """Cluster API backed by a dict; used for tests and as the state-file core."""

    def __init__(self, objects: Optional[Dict[Key, Dict[str, Any]]] = None):
        self._objects: Dict[Key, Dict[str, Any]] = copy.deepcopy(objects) if objects else {}
        self._lock = threading.Lock()
        self.calls: List[Tuple[str, str, str]] = []

    def get(self, kind: ResourceKind, name: str) -> Optional[ObservedState]:
        with self._lock:
            self.calls.append(("get", kind.value, name))
            body = self._objects.get((kind.value, name))
            if body is None:
                return None
            return _to_observed(kind, name, body)

    def create(self, kind: ResourceKind, name: str, spec: Dict[str, Any]) -> None:
        with self._lock:
            self.calls.append(("create", kind.value, name))
            if (kind.value, name) in self._objects:
                raise ClusterAPIError(f"{kind.value}/{name} already exists")
            self._objects[(kind.value, name)] = _stored_body(spec, generation=1)
            self._changed()

    def update(self, kind: ResourceKind, name: str, spec: Dict[str, Any]) -> None:
        with self._lock:
            self.calls.append(("update", kind.value, name))
            current = self._objects.get((kind.value, name))
            if current is None:
                raise ClusterAPIError(f"{kind.value}/{name} not found")
            generation = current.get("metadata", {}).get("resource_version", 0) + 1
            self._objects[(kind.value, name)] = _stored_body(spec, generation=generation)
            self._changed()

    def delete(self, kind: ResourceKind, name: str) -> None:
        with self._lock:
            self.calls.append(("delete", kind.value, name))
            if self._objects.pop((kind.value, name), None) is None:
                raise ClusterAPIError(f"{kind.value}/{name} not found")
            self._changed()

    def set_live_field(self, kind: ResourceKind, name: str, field: str, value: Any) -> None:
        """Change live data out of band (simulates drift)."""
        with self._lock:
            self._objects[(kind.value, name)]["data"][field] = value

    def snapshot(self) -> Dict[Key, Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._objects)

    def mutating_calls(self) -> List[Tuple[str, str, str]]:
        return [call for call in self.calls if call[0] in ("create", "update", "delete")]

    def _changed(self) -> None:
        """Hook for subclasses that persist state."""
        pass


def _stored_body(spec: Dict[str, Any], generation: int) -> Dict[str, Any]:
    return {
        "data": copy.deepcopy(spec.get("data", {})),
        "references": copy.deepcopy(spec.get("references", [])),
        "metadata": {"resource_version": generation},
    }


def _to_observed(kind: ResourceKind, name: str, body: Dict[str, Any]) -> ObservedState:
    return ObservedState(
        kind=kind,
        name=name,
        data=copy.deepcopy(body.get("data", {})),
        references=copy.deepcopy(body.get("references", [])),
        metadata=copy.deepcopy(body.get("metadata", {})),
    )
