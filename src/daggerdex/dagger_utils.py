"""Dagger CLI utilities for one-shot commands and project checks."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from daggerdex import config

logger = logging.getLogger(__name__)


class DaggerError(Exception):
    """Raised when a dagger command fails."""


def run_dagger(
    args: list[str],
    cwd: Path | None = None,
    command: str | None = None,
    timeout: float | None = None,
) -> str:
    """Run a dagger command and return stdout. Raises DaggerError on failure.

    Unlike module queries, this path always enforces a timeout
    (config.COMMAND_TIMEOUT unless overridden).
    """
    command = command or config.DAGGER_COMMAND
    timeout = timeout if timeout is not None else config.COMMAND_TIMEOUT
    if cwd is not None and not Path(cwd).is_dir():
        raise DaggerError(f"Working directory does not exist: {cwd}")

    logger.debug("Running %s %s (cwd=%s)", command, " ".join(args), cwd)
    try:
        result = subprocess.run(
            [command] + args,
            capture_output=True,
            text=True,
            cwd=cwd,
            timeout=timeout,
            check=True,
        )
        return result.stdout.strip()
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip() or f"exit code {e.returncode}"
        raise DaggerError(f"{command} {' '.join(args)} failed: {detail}") from e
    except subprocess.TimeoutExpired as e:
        raise DaggerError(f"{command} {' '.join(args)} timed out after {timeout}s") from e
    except FileNotFoundError:
        raise DaggerError(f"{command} is not installed or not in PATH")


def get_version(command: str | None = None) -> str | None:
    """Return the first line of `dagger version`, or None if unavailable."""
    try:
        output = run_dagger(["version"], command=command)
    except DaggerError as e:
        logger.debug("Version probe failed: %s", e)
        return None
    return output.splitlines()[0] if output else None


def is_installed(command: str | None = None) -> bool:
    """Check whether the dagger binary runs and identifies itself."""
    version = get_version(command)
    return version is not None and "dagger" in version


def is_dagger_project(workspace_path: Path, marker: str | None = None) -> bool:
    """Return True if the workspace holds the project marker file (dagger.json)."""
    return (Path(workspace_path) / (marker or config.PROJECT_MARKER)).is_file()
