"""Normalize the type descriptors dagger reports into friendly type names."""

from __future__ import annotations

from typing import Any

# Concrete dagger object types that arrive via asObject.name
CONTAINER_TYPE = "Container"
SERVICE_TYPE = "Service"
FILE_TYPE = "File"
DIRECTORY_TYPE = "Directory"

UNKNOWN_TYPE = "unknown"
REQUIRED_MARKER = "[required]"

_SCALAR_NAMES = {
    "string": "String",
    "int": "Int",
    "integer": "Int",
    "float": "Float",
    "double": "Float",
    "boolean": "Boolean",
    "object": "Object",
    "array": "Array",
    "list": "Array",
    "map": "Object",
    "void": "Void",
    "nil": "Void",
    "null": "Void",
}

# Bare GraphQL scalar literals, matched against the uppercased kind
_DIRECT_SCALARS = {
    "STRING": "String",
    "INT": "Int",
    "INTEGER": "Int",
    "FLOAT": "Float",
    "BOOLEAN": "Boolean",
    "ID": "String",
}


def _map_scalar(scalar: str) -> str:
    # Unrecognized names pass through (custom scalars)
    return _SCALAR_NAMES.get(scalar, scalar)


def decode_kind(kind: str | None) -> str:
    """Decode a kind string such as OBJECT_STRING, KIND_INT or BOOLEAN_KIND.

    Forms are tried in order: OBJECT_ prefix, KIND_ prefix, _KIND suffix
    (any case). Anything else is matched against the direct scalar literals
    and otherwise returned unchanged, which keeps named types like "Container".
    """
    if not kind:
        return UNKNOWN_TYPE
    if kind.startswith("OBJECT_"):
        return _map_scalar(kind[len("OBJECT_"):].lower())
    if kind.startswith("KIND_"):
        return _map_scalar(kind[len("KIND_"):].lower())
    if kind.lower().endswith("_kind"):
        return _map_scalar(kind[: -len("_KIND")].lower())
    return _DIRECT_SCALARS.get(kind.upper(), kind)


def normalize_type(descriptor: Any) -> str:
    """Return the display name for a type descriptor (dict or bare kind string).

    asObject.name wins over kind; missing or empty input yields "unknown".
    """
    if isinstance(descriptor, dict):
        as_object = descriptor.get("asObject")
        if isinstance(as_object, dict) and as_object.get("name"):
            return as_object["name"]
        if descriptor.get("kind"):
            return decode_kind(descriptor["kind"])
        return UNKNOWN_TYPE
    if isinstance(descriptor, str):
        return decode_kind(descriptor)
    return UNKNOWN_TYPE


def is_required(arg: dict) -> bool:
    """Derive whether a raw argument is required.

    typeDef.optional is authoritative when present; otherwise the argument
    description must carry the "[required]" marker.
    """
    type_def = arg.get("typeDef") or {}
    optional = type_def.get("optional") if isinstance(type_def, dict) else None
    if optional is not None:
        return not optional
    return REQUIRED_MARKER in (arg.get("description") or "")
