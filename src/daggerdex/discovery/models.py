"""Resolved function records handed to consumers and stored in the cache."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class ArgumentInfo:
    name: str
    type: str
    required: bool


@dataclass(frozen=True)
class FunctionInfo:
    """One callable dagger function.

    function_id is the stable identity; name is for display and may repeat
    across modules. module is "" for functions of a parent module so they
    render at the top level.
    """

    name: str
    function_id: str
    module: str
    is_parent_module: bool
    return_type: str
    args: list[ArgumentInfo] = field(default_factory=list)
    description: str | None = None
    parent_module: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> FunctionInfo:
        return cls(
            name=data["name"],
            function_id=data["function_id"],
            module=data.get("module", ""),
            is_parent_module=bool(data.get("is_parent_module", False)),
            return_type=data.get("return_type", "unknown"),
            args=[ArgumentInfo(**a) for a in data.get("args", [])],
            description=data.get("description"),
            parent_module=data.get("parent_module"),
        )
