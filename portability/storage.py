"""
Key-value stores holding encoded jobs, keyed by token.

Every store returns copies from ``get`` so callers never alias stored state,
and lets IO errors propagate untouched.
"""

import copy
import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional


class KeyValueStore(ABC):
    """Persistent mapping of key -> job data."""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the mapping stored under ``key``, or None."""

    @abstractmethod
    def put(self, key: str, data: Mapping[str, Any]) -> None:
        """Replace whatever is stored under ``key`` with ``data``."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Return every stored key."""


class InMemoryKeyValueStore(KeyValueStore):
    """Thread-safe in-process store, used for tests and the ``memory`` backend."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(key)
            return copy.deepcopy(entry) if entry is not None else None

    def put(self, key: str, data: Mapping[str, Any]) -> None:
        with self._lock:
            self._entries[key] = copy.deepcopy(dict(data))

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())


class JsonFileKeyValueStore(KeyValueStore):
    """
    Whole-file JSON store: ``{"jobs": {key: data}}``.

    Values must be JSON-serializable. The document is serialized before the
    file is opened, so a failed put leaves the previous contents intact.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self._load()["jobs"].get(key)

    def put(self, key: str, data: Mapping[str, Any]) -> None:
        store = self._load()
        store["jobs"][key] = dict(data)
        content = json.dumps(store, indent=2, ensure_ascii=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            f.write(content)

    def keys(self) -> List[str]:
        return list(self._load()["jobs"].keys())

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"jobs": {}}
        with self.path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
        if not content:
            return {"jobs": {}}
        store = json.loads(content)
        store.setdefault("jobs", {})
        return store
