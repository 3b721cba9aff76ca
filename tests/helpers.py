"""Shared test helpers: raw dagger response factories."""

from unittest.mock import AsyncMock, MagicMock

from daggerdex.discovery.queries import DIRECTORY_ID_QUERY, MODULE_FUNCTIONS_QUERY


def _make_arg(name: str, kind: str = "STRING_KIND", optional=None, description=None):
    """Create a raw argument dict as returned by the module query."""
    type_def = {"kind": kind}
    if optional is not None:
        type_def["optional"] = optional
    arg = {"name": name, "typeDef": type_def}
    if description is not None:
        arg["description"] = description
    return arg


def _make_function(fn_id: str, name: str, return_kind="STRING_KIND", args=None, description=None):
    """Create a raw function dict."""
    return_type = return_kind if isinstance(return_kind, dict) else {"kind": return_kind}
    return {
        "id": fn_id,
        "name": name,
        "description": description,
        "returnType": return_type,
        "args": args or [],
    }


def _make_object(name: str, functions: list[dict]):
    """Create a raw module object entry ({"asObject": {...}})."""
    return {"asObject": {"name": name, "functions": functions}}


def _module_response(objects: list):
    return {"loadDirectoryFromID": {"asModule": {"name": "mod", "objects": objects}}}


def _directory_response(directory_id: str | None):
    if directory_id is None:
        return {"host": {"directory": None}}
    return {"host": {"directory": {"id": directory_id}}}


def _make_executor(objects: list | None = None, directory_id: str | None = "dir-123"):
    """Create a mock QueryExecutor answering both discovery queries."""
    responses = {
        DIRECTORY_ID_QUERY: _directory_response(directory_id),
        MODULE_FUNCTIONS_QUERY: _module_response(objects or []),
    }

    async def execute(document, variables, working_directory):
        return responses[document]

    executor = MagicMock()
    executor.execute = AsyncMock(side_effect=execute)
    return executor
