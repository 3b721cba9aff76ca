"""The two fixed GraphQL documents used for function discovery."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from daggerdex.discovery.executor import MalformedResponse, QueryExecutor

DIRECTORY_ID_QUERY = """
query($path: String!) {
  host {
    directory(path: $path) {
      id
    }
  }
}
"""

MODULE_FUNCTIONS_QUERY = """
query($id: DirectoryID!) {
  loadDirectoryFromID(id: $id) {
    asModule {
      name
      objects {
        asObject {
          name
          functions {
            id
            name
            description
            returnType {
              kind
              optional
              asObject {
                name
              }
            }
            args {
              name
              description
              typeDef {
                kind
                optional
                asObject {
                  name
                }
              }
            }
          }
        }
      }
    }
  }
}
"""


def _dig(data: Any, *keys: str) -> Any:
    """Follow nested dict keys, returning None as soon as one is missing."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


async def query_directory_id(executor: QueryExecutor, workspace_path: Path | str) -> str | None:
    """Resolve a workspace path to its content-addressed directory ID.

    Returns None when the response carries no ID.
    """
    result = await executor.execute(
        DIRECTORY_ID_QUERY, {"path": str(workspace_path)}, workspace_path
    )
    directory_id = _dig(result, "host", "directory", "id")
    return directory_id or None


async def query_module_objects(
    executor: QueryExecutor, directory_id: str, workspace_path: Path | str
) -> list[dict]:
    """Load the module's raw objects for a directory ID, dropping null entries."""
    result = await executor.execute(
        MODULE_FUNCTIONS_QUERY, {"id": directory_id}, workspace_path
    )
    objects = _dig(result, "loadDirectoryFromID", "asModule", "objects")
    if objects is None:
        return []
    if not isinstance(objects, list):
        raise MalformedResponse(
            f"Expected a list of module objects, got {type(objects).__name__}"
        )
    return [obj for obj in objects if obj]
