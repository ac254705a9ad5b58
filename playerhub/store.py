from __future__ import annotations

import json
import threading
from typing import Any, Dict, Mapping, Optional


def coerce_value(value: Any) -> str:
    """Coerce a client-supplied value to the stored string form.

    ``None`` becomes ``""``, booleans are lowercased, integral floats drop the
    fraction (``1.0`` -> ``"1"``) and objects or arrays are stored as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


class SharedStateStore:
    """In-memory mapping of room key -> string value.

    The store is passive: it never schedules persistence or broadcasts on its
    own. Writes are last-writer-wins; the lock only keeps the mapping
    consistent if callers ever run on more than one thread.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: Any = None) -> str:
        stored = coerce_value(value)
        with self._lock:
            self._values[key] = stored
        return stored

    def snapshot(self) -> Dict[str, str]:
        """Return a copy of every entry, suitable for serialisation."""
        with self._lock:
            return dict(self._values)

    def load(self, entries: Mapping[str, Any]) -> int:
        """Merge persisted *entries* into the store, coercing values. Returns the count loaded."""
        with self._lock:
            for key, value in entries.items():
                self._values[str(key)] = coerce_value(value)
            return len(entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values


__all__ = ["SharedStateStore", "coerce_value"]
