"""Registry of section types documented as standalone root blocks."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple


@dataclass(frozen=True, slots=True)
class RootBlock:
    """A section type promoted to an independent top-level block."""

    name: str
    description: str
    section_type: type


class RootBlockRegistry:
    """Fixed, read-only set of root blocks looked up by type identity."""

    __slots__ = ("_blocks",)

    def __init__(self, blocks: Iterable[RootBlock] = ()) -> None:
        entries = tuple(blocks)
        names: set[str] = set()
        types: list[type] = []
        for block in entries:
            if block.name in names:
                raise ValueError(f"duplicate root block name: {block.name}")
            if any(block.section_type is seen for seen in types):
                raise ValueError(
                    f"section type {block.section_type.__qualname__} registered twice"
                )
            names.add(block.name)
            types.append(block.section_type)
        self._blocks: Tuple[RootBlock, ...] = entries

    def lookup(self, section_type: type) -> Optional[RootBlock]:
        for block in self._blocks:
            if block.section_type is section_type:
                return block
        return None

    def is_root(self, section_type: type) -> Optional[Tuple[str, str]]:
        """Return ``(name, description)`` when ``section_type`` is a root block."""

        block = self.lookup(section_type)
        if block is None:
            return None
        return block.name, block.description

    def names(self) -> list[str]:
        return [block.name for block in self._blocks]

    def __iter__(self) -> Iterator[RootBlock]:
        return iter(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def __contains__(self, section_type: object) -> bool:
        return any(block.section_type is section_type for block in self._blocks)


__all__ = ["RootBlock", "RootBlockRegistry"]
