"""Cluster API backed by a local JSON state file (offline and local runs)."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict
from ..utils.errors import ClusterAPIError
from ..utils.logging import get_logger
from .memory import InMemoryCluster

logger = get_logger("cluster.state_file")

STATE_VERSION = 1


class StateFileCluster(InMemoryCluster):
    """In-memory cluster persisted to a JSON file after every mutation."""

    def __init__(self, path: str):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[Any, Dict[str, Any]]:
        if not self.path.exists():
            logger.debug(f"State file {self.path} does not exist yet, starting empty")
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ClusterAPIError(f"Cannot read state file {self.path}: {e}")

        if not isinstance(raw, dict) or not isinstance(raw.get("objects", {}), dict):
            raise ClusterAPIError(f"State file {self.path} must contain a JSON object with an 'objects' mapping")

        objects = {}
        for key, body in raw.get("objects", {}).items():
            kind, _, name = key.partition("/")
            objects[(kind, name)] = body
        logger.info(f"Loaded {len(objects)} live objects from {self.path}")
        return objects

    def _changed(self) -> None:
        payload = {
            "version": STATE_VERSION,
            "objects": {f"{kind}/{name}": body for (kind, name), body in sorted(self._objects.items())},
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".state-", suffix=".json")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, sort_keys=True, default=str)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise ClusterAPIError(f"Failed to write state file {self.path}: {e}")
