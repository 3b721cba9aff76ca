"""Resolve a workspace into the list of dagger functions it exposes."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from daggerdex.dagger_utils import DaggerError
from daggerdex.discovery.executor import QueryExecutor
from daggerdex.discovery.hierarchy import (
    RootKind,
    detect_root,
    display_module_name,
    find_parent_module,
    is_parent_module,
)
from daggerdex.discovery.models import ArgumentInfo, FunctionInfo
from daggerdex.discovery.naming import to_kebab_case
from daggerdex.discovery.queries import query_directory_id, query_module_objects
from daggerdex.discovery.types import is_required, normalize_type

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Outcome of one resolve() call.

    An empty `functions` list with no error means the workspace genuinely
    has nothing to offer; a set `error` means the tool call failed.
    """

    functions: list[FunctionInfo] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, reason: str) -> Resolution:
        return cls(functions=[], error=reason)


def _object_info(obj: dict) -> dict | None:
    info = obj.get("asObject") if isinstance(obj, dict) else None
    return info if isinstance(info, dict) else None


def _convert_argument(arg: dict) -> ArgumentInfo:
    return ArgumentInfo(
        name=to_kebab_case(arg["name"]),
        type=normalize_type(arg.get("typeDef")),
        required=is_required(arg),
    )


class ModuleResolver:
    """Queries dagger for module objects and flattens them into FunctionInfo records."""

    def __init__(self, executor: QueryExecutor | None = None) -> None:
        self._executor = executor or QueryExecutor()

    async def fetch_module_objects(self, workspace_path: Path | str) -> list[dict]:
        """Return the raw module objects for a workspace.

        Raises DaggerError if the workspace has no directory ID.
        """
        directory_id = await query_directory_id(self._executor, workspace_path)
        if not directory_id:
            raise DaggerError(f"No directory ID found for workspace path: {workspace_path}")
        return await query_module_objects(self._executor, directory_id, workspace_path)

    async def resolve(self, workspace_path: Path | str) -> Resolution:
        """Discover every function in the workspace's module.

        Never raises: failures are logged and reported on the Resolution.
        """
        t0 = time.perf_counter()
        try:
            directory_id = await query_directory_id(self._executor, workspace_path)
            if not directory_id:
                logger.info("No directory ID for %s", workspace_path)
                return Resolution()

            objects = await query_module_objects(self._executor, directory_id, workspace_path)
            if not objects:
                logger.info("No module objects for %s", workspace_path)
                return Resolution()

            functions = self.build_functions(objects)
        except Exception as e:
            logger.exception("Failed to resolve functions for %s", workspace_path)
            return Resolution.failed(str(e) or type(e).__name__)

        logger.info(
            "Resolved %d function(s) from %d object(s) in %s (%.2fs)",
            len(functions), len(objects), workspace_path, time.perf_counter() - t0,
        )
        return Resolution(functions=functions)

    def build_functions(self, objects: list[dict]) -> list[FunctionInfo]:
        """Apply the module-name hierarchy heuristic to raw module objects."""
        infos = [info for info in (_object_info(obj) for obj in objects) if info]
        names = [info["name"] for info in infos if info.get("name")]

        detection = detect_root(names)
        if detection.kind is RootKind.AMBIGUOUS:
            logger.debug("Ambiguous root candidates %s; no root designated", detection.candidates)
        root = detection.root

        functions: list[FunctionInfo] = []
        for obj in objects:
            info = _object_info(obj)
            if info is None or not info.get("name") or not isinstance(info.get("functions"), list):
                logger.warning("Skipping module object without name/functions: %r", obj)
                continue
            try:
                functions.extend(self._module_functions(info, names, root))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed module object %r: %s", info.get("name"), e)
        return functions

    def _module_functions(
        self, info: dict, names: list[str], root: str | None
    ) -> list[FunctionInfo]:
        name = info["name"]
        parent = is_parent_module(name, names)
        parent_name = None if parent else find_parent_module(name, names)
        module = display_module_name(name, parent, root, parent_name)
        parent_module = to_kebab_case(parent_name) if parent_name else None

        return [
            FunctionInfo(
                name=to_kebab_case(fn["name"]),
                function_id=fn["id"],
                module=module,
                is_parent_module=parent,
                return_type=normalize_type(fn.get("returnType")),
                args=[_convert_argument(arg) for arg in fn.get("args") or []],
                description=fn.get("description"),
                parent_module=parent_module,
            )
            for fn in info["functions"]
        ]
