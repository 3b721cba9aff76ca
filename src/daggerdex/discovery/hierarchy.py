"""Infer a module hierarchy from module names.

dagger does not report which module objects belong under which, so the
hierarchy is guessed from name prefixes: "DaggerDev" is taken to be the
parent of "DaggerDevCli" and "DaggerDevDocs". Two unrelated modules that
happen to share a prefix will be misclassified; everything here is a pure
function of the name list so the heuristic can be tested on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from daggerdex.discovery.naming import to_kebab_case

_SEPARATORS = "-_"


class RootKind(str, Enum):
    NONE = "none"
    SINGLE = "single"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class RootDetection:
    kind: RootKind
    candidates: tuple[str, ...] = ()

    @property
    def root(self) -> str | None:
        """The root module name, only when exactly one candidate exists."""
        return self.candidates[0] if self.kind is RootKind.SINGLE else None


def _is_strict_prefix(prefix: str, name: str) -> bool:
    return bool(prefix) and len(name) > len(prefix) and name.startswith(prefix)


def is_parent_module(name: str, names: list[str]) -> bool:
    """True if some other module name strictly extends this one."""
    return any(_is_strict_prefix(name, other) for other in names if other != name)


def parent_candidates(names: list[str]) -> list[str]:
    """Module names that are a strict, non-empty prefix of another module name."""
    seen: list[str] = []
    for name in names:
        if name not in seen and is_parent_module(name, names):
            seen.append(name)
    return seen


def detect_root(names: list[str]) -> RootDetection:
    """Classify the name list as having no root, a single root, or several candidates."""
    candidates = tuple(parent_candidates(names))
    if not candidates:
        return RootDetection(RootKind.NONE)
    if len(candidates) == 1:
        return RootDetection(RootKind.SINGLE, candidates)
    return RootDetection(RootKind.AMBIGUOUS, candidates)


def find_parent_module(name: str, names: list[str]) -> str | None:
    """Return the longest other module name that strictly prefixes this one."""
    best: str | None = None
    for other in names:
        if other != name and _is_strict_prefix(other, name):
            if best is None or len(other) > len(best):
                best = other
    return best


def _strip_prefix(name: str, prefix: str) -> str:
    return name[len(prefix):].lstrip(_SEPARATORS)


def display_module_name(
    name: str,
    is_parent: bool,
    root: str | None,
    parent: str | None,
) -> str:
    """Compute the kebab-case module name shown to consumers.

    Parent modules get "" so their functions sit at the top level. Others
    lose the root prefix (or, failing that, their parent's prefix).
    """
    if is_parent:
        return ""
    if root and name != root and name.startswith(root):
        display = _strip_prefix(name, root)
    elif parent:
        display = _strip_prefix(name, parent)
    else:
        display = name
    return to_kebab_case(display) if display else ""
