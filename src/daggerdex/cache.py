"""Content-hash keyed cache over a host key/value store.

Entries never expire by time. Staleness is detected by comparing SHA-256
digests of a canonical (key-sorted) JSON serialization, so reordered fields
never count as a change.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any

from daggerdex.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "daggerdex.cache"


class CacheWriteFailure(Exception):
    """Raised when a cache entry could not be written."""


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def content_hash(value: Any) -> str:
    """SHA-256 hex digest of the canonical serialization of value."""
    return hashlib.sha256(canonical_json(value).encode("utf-8")).hexdigest()


class CacheStore:
    """Stores {"data", "contentHash"} entries under a namespace in a KeyValueStore.

    clear() only removes keys of this namespace, leaving the rest of a shared
    host store alone.
    """

    def __init__(self, backend: KeyValueStore, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._backend = backend
        self._prefix = f"{namespace}:"

    def _key(self, key: str) -> str:
        return self._prefix + key

    def _entry(self, key: str) -> dict | None:
        entry = self._backend.get(self._key(key))
        if entry is not None and not isinstance(entry, dict):
            logger.warning("Ignoring malformed cache entry for %s", key)
            return None
        return entry

    def get(self, key: str) -> Any | None:
        entry = self._entry(key)
        return entry.get("data") if entry else None

    def set(self, key: str, value: Any) -> None:
        """Store value with its content hash in a single backend write."""
        entry = {"data": value, "contentHash": content_hash(value)}
        self._backend.set(self._key(key), entry)
        logger.debug("Cached %s (hash %s)", key, entry["contentHash"][:12])

    def remove(self, key: str) -> None:
        self._backend.delete(self._key(key))

    def clear(self) -> None:
        keys = [k for k in self._backend.keys() if k.startswith(self._prefix)]
        for k in keys:
            self._backend.delete(k)
        logger.info("Cleared %d cache entr%s", len(keys), "y" if len(keys) == 1 else "ies")

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def get_content_hash(self, key: str) -> str | None:
        entry = self._entry(key)
        return entry.get("contentHash") if entry else None

    def has_data_changed(self, key: str, new_value: Any) -> bool:
        """Compare new_value against the stored hash; a missing entry counts as changed."""
        cached_hash = self.get_content_hash(key)
        if not cached_hash:
            return True
        return cached_hash != content_hash(new_value)
