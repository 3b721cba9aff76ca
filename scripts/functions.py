#!/usr/bin/env python3
"""CLI: List the dagger functions a workspace exposes."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Ensure the package is importable when running as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from daggerdex import config
from daggerdex.catalog import FunctionCatalog, create_catalog
from daggerdex.dagger_utils import is_dagger_project, is_installed
from daggerdex.discovery.models import FunctionInfo


def _format_args(fn: FunctionInfo) -> str:
    parts = []
    for arg in fn.args:
        flag = f"--{arg.name} {arg.type}"
        parts.append(flag if arg.required else f"[{flag}]")
    return " ".join(parts)


def _print_table(functions: list[FunctionInfo]) -> None:
    if not functions:
        print("No functions found.")
        return
    rows = [
        (fn.module or "-", fn.name, fn.return_type, _format_args(fn))
        for fn in sorted(functions, key=lambda f: (f.module, f.name))
    ]
    widths = [max(len(r[i]) for r in rows + [("MODULE", "FUNCTION", "RETURNS", "")]) for i in range(3)]
    print(f"{'MODULE':<{widths[0]}}  {'FUNCTION':<{widths[1]}}  {'RETURNS':<{widths[2]}}  ARGS")
    for module, name, returns, args in rows:
        print(f"{module:<{widths[0]}}  {name:<{widths[1]}}  {returns:<{widths[2]}}  {args}")


async def _list(catalog: FunctionCatalog, workspace: Path) -> list[FunctionInfo]:
    functions = await catalog.list_functions(workspace)
    # Let a cache-hit refresh land before the loop shuts down
    await catalog.wait_for_refreshes()
    return functions


def main() -> None:
    parser = argparse.ArgumentParser(description="List dagger functions in a workspace")
    parser.add_argument(
        "--workspace",
        type=Path,
        default=Path.cwd(),
        help="Dagger project directory (default: current directory)",
    )
    parser.add_argument("--no-cache", action="store_true", help="Bypass the function cache")
    parser.add_argument("--clear-cache", action="store_true", help="Clear the function cache and exit")
    parser.add_argument("--json", action="store_true", help="Print functions as JSON")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    if args.clear_cache:
        create_catalog(enable_cache=True).clear_cache()
        print("Function cache cleared.")
        return

    workspace = args.workspace.resolve()
    if not workspace.is_dir():
        print(f"Error: {workspace} is not a directory.", file=sys.stderr)
        sys.exit(1)
    if not is_dagger_project(workspace):
        print(f"Error: no {config.PROJECT_MARKER} found in {workspace}.", file=sys.stderr)
        sys.exit(1)
    if not is_installed():
        print(f"Error: '{config.DAGGER_COMMAND}' is not installed or not in PATH.", file=sys.stderr)
        sys.exit(1)

    catalog = create_catalog(enable_cache=False if args.no_cache else None)
    functions = asyncio.run(_list(catalog, workspace))

    if args.json:
        print(json.dumps([fn.to_dict() for fn in functions], indent=2))
    else:
        _print_table(functions)


if __name__ == "__main__":
    main()
