"""Documentation model produced by the configuration walker."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Union


class EntryKind(str, Enum):
    """Discriminator for the two kinds of block entries."""

    BLOCK = "block"
    FIELD = "field"


@dataclass(frozen=True, slots=True)
class FieldExample:
    """Sample snippet attached to a field, keyed by the field name."""

    comment: str
    value: Any


@dataclass(eq=False, slots=True)
class ConfigBlock:
    """One documentable section: the top-level tree or a promoted root block."""

    name: str = ""
    description: str = ""
    entries: list["ConfigEntry"] = field(default_factory=list)
    flag_prefix: str = ""
    flag_prefixes: list[str] = field(default_factory=list)

    def add(self, entry: "ConfigEntry") -> None:
        self.entries.append(entry)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON compatible mapping of the block.

        Block entries pointing at a promoted root block only carry the root
        block name; the block itself is serialized once, on its own.
        """

        return {
            "name": self.name,
            "description": self.description,
            "flag_prefixes": list(self.flag_prefixes),
            "entries": [entry.to_dict() for entry in self.entries],
        }


@dataclass(eq=False, slots=True)
class BlockEntry:
    """A nested section."""

    name: str
    block: ConfigBlock
    required: bool = False
    is_root: bool = False

    @property
    def kind(self) -> EntryKind:
        return EntryKind.BLOCK

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "kind": self.kind.value,
            "name": self.name,
            "required": self.required,
            "root": self.is_root,
        }
        if self.is_root:
            payload["block"] = self.block.name
        else:
            payload["block"] = self.block.to_dict()
        return payload


@dataclass(eq=False, slots=True)
class FieldEntry:
    """A leaf setting."""

    name: str
    field_type: str
    required: bool = False
    flag_name: str | None = None
    flag_template: str | None = None
    description: str = ""
    default: str | None = None
    example: FieldExample | None = None
    category: str = "basic"

    @property
    def kind(self) -> EntryKind:
        return EntryKind.FIELD

    def full_description(self) -> str:
        """Return the description prefixed with a non-basic category."""

        if not self.category or self.category == "basic":
            return self.description
        return f"({self.category}) {self.description}"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "kind": self.kind.value,
            "name": self.name,
            "required": self.required,
            "type": self.field_type,
            "flag": self.flag_name,
            "flag_template": self.flag_template,
            "description": self.description,
            "default": self.default,
            "category": self.category,
        }
        if self.example is not None:
            payload["example"] = {
                "comment": self.example.comment,
                "value": self.example.value,
            }
        return payload


ConfigEntry = Union[BlockEntry, FieldEntry]


def iter_fields(block: ConfigBlock, prefix: str = "") -> Iterator[tuple[str, FieldEntry]]:
    """Yield ``(dotted_path, entry)`` for every field reachable from ``block``."""

    for entry in block.entries:
        path = f"{prefix}.{entry.name}" if prefix else entry.name
        if isinstance(entry, BlockEntry):
            yield from iter_fields(entry.block, path)
        else:
            yield path, entry


__all__ = [
    "BlockEntry",
    "ConfigBlock",
    "ConfigEntry",
    "EntryKind",
    "FieldEntry",
    "FieldExample",
    "iter_fields",
]
