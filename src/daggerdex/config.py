"""Configuration loaded from environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() not in ("0", "false", "no", "off", "")


# External tool
DAGGER_COMMAND: str = os.getenv("DAGGER_COMMAND", "dagger")
PROJECT_MARKER: str = os.getenv("PROJECT_MARKER", "dagger.json")
# Applies to the simple invocation path only; module queries are unbounded.
COMMAND_TIMEOUT: float = float(os.getenv("COMMAND_TIMEOUT", "30"))

# Subprocess environment
DAGGER_SHELL: str = os.getenv("DAGGER_SHELL", "")
DAGGER_LOGIN_SHELL_FLAG: str = os.getenv("DAGGER_LOGIN_SHELL_FLAG", "-l")
DAGGER_PATH: str = os.getenv("DAGGER_PATH", "")

# Paths
DATA_DIR: Path = Path(os.getenv("DATA_DIR", "./data"))

# Cache
ENABLE_CACHE: bool = _flag("ENABLE_CACHE", "true")

# Server
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Derived paths
CACHE_PATH: Path = DATA_DIR / "daggerdex.db"
