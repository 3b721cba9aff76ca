"""Key/value store interface and an in-memory implementation."""

from __future__ import annotations

import copy
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Durable key/value storage supplied by the host.

    Values are JSON-serializable. get() returns None for missing keys.
    """

    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def keys(self) -> list[str]:
        ...


class MemoryStore:
    """Process-local KeyValueStore, mainly for tests and cache-less hosts."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        # Copies keep callers from mutating stored values in place
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
