"""Identifier case conversion for CLI-ready names."""

from __future__ import annotations

import re

# lower/digit followed by upper: buildImage -> build-Image
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
# end of an acronym run before a capitalized word: HTTPServer -> HTTP-Server
_ACRONYM_BOUNDARY = re.compile(r"([A-Z])([A-Z][a-z])")


def to_kebab_case(name: str) -> str:
    """Convert a camelCase/PascalCase identifier to kebab-case.

    Already-kebab input is returned unchanged.

    >>> to_kebab_case("buildImage")
    'build-image'
    >>> to_kebab_case("getHTTPServer")
    'get-http-server'
    """
    name = _CAMEL_BOUNDARY.sub(r"\1-\2", name)
    name = _ACRONYM_BOUNDARY.sub(r"\1-\2", name)
    return name.lower()
