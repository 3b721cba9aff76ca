"""Run GraphQL documents through `dagger query` in a subprocess."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shlex
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from daggerdex import config
from daggerdex.dagger_utils import DaggerError

logger = logging.getLogger(__name__)


class SubprocessFailure(DaggerError):
    """The query subprocess exited non-zero or could not be started."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class MalformedResponse(DaggerError):
    """The query output was not JSON or lacked the expected shape."""


@dataclass(frozen=True)
class ExecutionEnvironment:
    """How the dagger binary is launched.

    With an empty shell_path the binary is executed directly. Otherwise the
    command line is handed to `<shell_path> [login_shell_flag] -c ...` so
    login profiles can put the binary on PATH. path_override, when set,
    replaces PATH in the child environment.
    """

    shell_path: str = ""
    login_shell_flag: str = ""
    path_override: str = ""

    @classmethod
    def from_config(cls) -> ExecutionEnvironment:
        return cls(
            shell_path=config.DAGGER_SHELL,
            login_shell_flag=config.DAGGER_LOGIN_SHELL_FLAG,
            path_override=config.DAGGER_PATH,
        )

    def wrap(self, argv: list[str]) -> list[str]:
        """Return the argv actually spawned for a dagger argv."""
        if not self.shell_path:
            return list(argv)
        wrapped = [self.shell_path]
        if self.login_shell_flag:
            wrapped.append(self.login_shell_flag)
        wrapped.extend(["-c", shlex.join(argv)])
        return wrapped

    def child_env(self) -> dict[str, str]:
        env = dict(os.environ)
        if self.path_override:
            env["PATH"] = self.path_override
        return env


class QueryExecutor:
    """Executes a query document with `dagger query --var-json <vars>`.

    The document is written to stdin rather than passed as an argument.
    No timeout is applied; callers needing bounded latency must wrap the
    call themselves (e.g. asyncio.wait_for).
    """

    def __init__(
        self,
        command: str | None = None,
        environment: ExecutionEnvironment | None = None,
    ) -> None:
        self._command = command or config.DAGGER_COMMAND
        self._environment = environment or ExecutionEnvironment()

    @property
    def command(self) -> str:
        return self._command

    @property
    def environment(self) -> ExecutionEnvironment:
        return self._environment

    def build_argv(self, variables: dict[str, Any]) -> list[str]:
        argv = [self._command, "query", "--var-json", json.dumps(variables)]
        return self._environment.wrap(argv)

    async def execute(
        self,
        document: str,
        variables: dict[str, Any],
        working_directory: Path | str,
    ) -> Any:
        """Run the document and return the parsed JSON output.

        Raises:
            SubprocessFailure: Non-zero exit (carries stderr), missing binary or
                missing working directory.
            MalformedResponse: stdout is not valid JSON.
        """
        if not Path(working_directory).is_dir():
            raise SubprocessFailure(f"Working directory does not exist: {working_directory}")

        argv = self.build_argv(variables)
        logger.debug("Query: %s (cwd=%s)", argv[:3], working_directory)
        t0 = time.perf_counter()
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(working_directory),
                env=self._environment.child_env(),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise SubprocessFailure(f"{argv[0]} is not installed or not in PATH") from e

        stdout, stderr = await proc.communicate(document.encode("utf-8"))
        err_text = stderr.decode("utf-8", errors="replace").strip()
        logger.debug(
            "Query exited %s in %.0fms", proc.returncode, (time.perf_counter() - t0) * 1000
        )

        if proc.returncode != 0:
            message = err_text or f"{self._command} exited with code {proc.returncode}"
            raise SubprocessFailure(message, returncode=proc.returncode, stderr=err_text)

        try:
            return json.loads(stdout.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedResponse(f"Query output is not valid JSON: {e}") from e
