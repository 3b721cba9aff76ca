"""FastAPI server exposing function discovery and cache control."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from daggerdex import config
from daggerdex.cache import CacheWriteFailure
from daggerdex.catalog import FunctionCatalog, create_catalog
from daggerdex.dagger_utils import get_version, is_dagger_project

# Configure logging on import, before anything else logs
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Daggerdex", description="Dagger function discovery service")

# Lazy-initialized catalog (created on first request)
_catalog: FunctionCatalog | None = None


def _get_catalog() -> FunctionCatalog:
    global _catalog
    if _catalog is None:
        logger.info("Initializing function catalog (cache=%s)...", config.ENABLE_CACHE)
        _catalog = create_catalog()
    return _catalog


class ArgumentResponse(BaseModel):
    name: str
    type: str
    required: bool


class FunctionResponse(BaseModel):
    name: str
    function_id: str
    module: str
    is_parent_module: bool
    parent_module: str | None = None
    description: str | None = None
    return_type: str
    args: list[ArgumentResponse]


class VersionResponse(BaseModel):
    installed: bool
    version: str | None = None


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/version", response_model=VersionResponse)
def version():
    found = get_version()
    return VersionResponse(installed=found is not None and "dagger" in found, version=found)


@app.get("/functions", response_model=list[FunctionResponse])
async def list_functions(workspace: str = Query(..., description="Workspace directory")):
    workspace_path = Path(workspace).resolve()
    if not workspace_path.is_dir():
        raise HTTPException(status_code=400, detail=f"Not a directory: {workspace}")
    if not is_dagger_project(workspace_path):
        raise HTTPException(status_code=404, detail=f"No {config.PROJECT_MARKER} in {workspace}")

    logger.info("GET /functions workspace=%s", workspace)
    t0 = time.perf_counter()
    try:
        functions = await _get_catalog().list_functions(workspace_path)
    except CacheWriteFailure as e:
        logger.exception("Cache write failed after %.2fs", time.perf_counter() - t0)
        raise HTTPException(status_code=500, detail=str(e))
    logger.info("Listed %d function(s) in %.2fs", len(functions), time.perf_counter() - t0)
    return [f.to_dict() for f in functions]


@app.post("/cache/clear")
async def clear_cache():
    _get_catalog().clear_cache()
    return {"status": "cleared"}


def main() -> None:
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
