"""Stale-while-revalidate function listing backed by the cache store."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import Protocol

from daggerdex import config
from daggerdex.cache import CacheStore, CacheWriteFailure
from daggerdex.discovery.executor import ExecutionEnvironment, QueryExecutor
from daggerdex.discovery.models import FunctionInfo
from daggerdex.discovery.resolver import ModuleResolver, Resolution
from daggerdex.storage.kv import KeyValueStore
from daggerdex.storage.sqlite_store import SqliteStore

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "dagger-functions"


class Resolver(Protocol):
    async def resolve(self, workspace_path: Path | str) -> Resolution:
        ...


def cache_key(workspace_path: Path | str) -> str:
    """Stable storage-safe key for a workspace (a digest, never the raw path)."""
    raw = f"{CACHE_KEY_PREFIX}:{workspace_path}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def _serialize(functions: list[FunctionInfo]) -> list[dict]:
    return [f.to_dict() for f in functions]


def _deserialize(data: list[dict]) -> list[FunctionInfo]:
    return [FunctionInfo.from_dict(d) for d in data]


class FunctionCatalog:
    """Lists a workspace's functions, serving cached results when available.

    On a cache hit the cached list is returned at once and a background
    refresh re-resolves the workspace, rewriting the entry only if its
    content changed. Concurrent misses for the same workspace are not
    coalesced, and a background refresh may race a foreground write (last
    writer wins).
    """

    def __init__(
        self,
        resolver: Resolver,
        cache: CacheStore | None = None,
        enable_cache: bool = True,
    ) -> None:
        self._resolver = resolver
        self._cache = cache
        self._enable_cache = enable_cache and cache is not None
        self._refreshes: set[asyncio.Task] = set()

    @property
    def cache_enabled(self) -> bool:
        return self._enable_cache

    async def list_functions(self, workspace_path: Path | str) -> list[FunctionInfo]:
        """Return the workspace's functions; failures degrade to an empty list.

        Raises:
            CacheWriteFailure: A fresh result could not be written to the cache.
        """
        if not self._enable_cache:
            return (await self._resolver.resolve(workspace_path)).functions

        key = cache_key(workspace_path)
        cached = self._read_cached(workspace_path, key)
        if cached:
            logger.debug("Cache hit for %s (%d functions)", workspace_path, len(cached))
            self._schedule_refresh(workspace_path, key)
            return cached

        resolution = await self._resolver.resolve(workspace_path)
        if not resolution.ok:
            logger.warning(
                "Returning no functions for %s: %s", workspace_path, resolution.error
            )
            return []
        if resolution.functions:
            try:
                self._cache.set(key, _serialize(resolution.functions))
            except Exception as e:
                raise CacheWriteFailure(f"Failed to cache functions for {workspace_path}") from e
            logger.info("Cached %d function(s) for %s", len(resolution.functions), workspace_path)
        return resolution.functions

    def _read_cached(self, workspace_path: Path | str, key: str) -> list[FunctionInfo]:
        """Load the cached functions, dropping an entry that no longer parses."""
        try:
            cached = self._cache.get(key)
            return _deserialize(cached) if cached else []
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(
                "Discarding unreadable cache entry for %s: %s: %s",
                workspace_path, type(e).__name__, e,
            )
            self._cache.remove(key)
            return []

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    async def wait_for_refreshes(self) -> None:
        """Block until every in-flight background refresh has finished."""
        while self._refreshes:
            await asyncio.gather(*list(self._refreshes))

    def _schedule_refresh(self, workspace_path: Path | str, key: str) -> None:
        task = asyncio.create_task(self._refresh(workspace_path, key))
        # The loop only keeps weak references to tasks
        self._refreshes.add(task)
        task.add_done_callback(self._refreshes.discard)

    async def _refresh(self, workspace_path: Path | str, key: str) -> None:
        try:
            resolution = await self._resolver.resolve(workspace_path)
            if not resolution.ok:
                logger.warning(
                    "Background refresh failed for %s, keeping cached functions: %s",
                    workspace_path, resolution.error,
                )
                return
            data = _serialize(resolution.functions)
            if self._cache.has_data_changed(key, data):
                self._cache.set(key, data)
                logger.info(
                    "Background refresh updated %d function(s) for %s",
                    len(resolution.functions), workspace_path,
                )
            else:
                logger.debug("Background refresh: no changes for %s", workspace_path)
        except Exception:
            logger.exception("Background refresh failed for %s", workspace_path)


def create_catalog(
    backend: KeyValueStore | None = None,
    enable_cache: bool | None = None,
) -> FunctionCatalog:
    """Build a FunctionCatalog wired from config.

    backend defaults to the SQLite store at config.CACHE_PATH.
    """
    enable_cache = config.ENABLE_CACHE if enable_cache is None else enable_cache
    executor = QueryExecutor(config.DAGGER_COMMAND, ExecutionEnvironment.from_config())
    cache = None
    if enable_cache:
        if backend is None:
            backend = SqliteStore(config.CACHE_PATH)
            backend.init_db()
        cache = CacheStore(backend)
    return FunctionCatalog(ModuleResolver(executor), cache, enable_cache=enable_cache)
