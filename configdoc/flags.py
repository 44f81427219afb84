"""Command-line flag registration and correlation with configuration fields.

Flags are correlated with fields by storage location (the identity of the
owning section instance plus the attribute name), never by name: the flag
``server.http-listen-port`` and the documented field ``http_listen_port`` are
linked because the flag was registered against that attribute of that object.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from loguru import logger

from .errors import FlagError
from .values import format_flag_value

DEPRECATED = "deprecated"

_UNSET: Any = object()


@dataclass(frozen=True, slots=True)
class FieldAddress:
    """Storage location of a configuration field."""

    owner_id: int
    attribute: str

    @classmethod
    def of(cls, owner: object, attribute: str) -> "FieldAddress":
        return cls(id(owner), attribute)


@dataclass(frozen=True, slots=True)
class Flag:
    """A registered command-line flag."""

    name: str
    usage: str
    default_text: str
    address: Optional[FieldAddress] = None


FlagRegistry = Dict[FieldAddress, Flag]


class FlagSet:
    """Collects the flags a configuration registers."""

    def __init__(self) -> None:
        self._flags: Dict[str, Flag] = {}

    def var(
        self,
        owner: Any,
        attribute: str,
        name: str,
        usage: str,
        *,
        default: Any = _UNSET,
    ) -> Flag:
        """Register ``name`` for ``owner.attribute``.

        When ``default`` is given it is stored on the owner first; otherwise the
        attribute's current value is the flag default.
        """

        if name in self._flags:
            raise FlagError(f"flag redefined: {name}")
        fields = getattr(type(owner), "model_fields", None)
        if fields is None or attribute not in fields:
            raise FlagError(
                f"cannot register flag {name}: {type(owner).__qualname__} has no field {attribute!r}"
            )
        if default is not _UNSET:
            setattr(owner, attribute, default)
        value = getattr(owner, attribute)
        flag = Flag(
            name=name,
            usage=usage,
            default_text=format_flag_value(value),
            address=FieldAddress.of(owner, attribute),
        )
        self._flags[name] = flag
        return flag

    def deprecated(self, name: str, message: str) -> Flag:
        """Register a placeholder for a flag that is no longer settable."""

        if name in self._flags:
            raise FlagError(f"flag redefined: {name}")
        flag = Flag(name=name, usage=message, default_text=DEPRECATED)
        self._flags[name] = flag
        return flag

    def lookup(self, name: str) -> Optional[Flag]:
        return self._flags.get(name)

    def visit_all(self) -> Iterator[Flag]:
        """Yield every flag in lexicographical order."""

        for name in sorted(self._flags):
            yield self._flags[name]

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def __len__(self) -> int:
        return len(self._flags)


def collect_flags(cfg: Any) -> FlagRegistry:
    """Register the flags of ``cfg`` against a fresh flag set and index them.

    ``cfg`` should be a throwaway instance: registration stores flag defaults
    on it. Deprecated placeholders are left out of the registry.
    """

    fs = FlagSet()
    register = getattr(cfg, "register_flags", None)
    if register is not None:
        register(fs)
    registry: FlagRegistry = {}
    for flag in fs.visit_all():
        if flag.default_text == DEPRECATED or flag.address is None:
            logger.debug("Skipping deprecated flag {}", flag.name)
            continue
        registry[flag.address] = flag
    return registry


def resolve_flag(
    owner: Any,
    attribute: str,
    flags: FlagRegistry,
    *,
    nocli: bool = False,
) -> Optional[Flag]:
    """Return the flag registered for ``owner.attribute``.

    A field marked ``nocli`` never has a flag. A field whose address is not in
    the registry is documented without one.
    """

    if nocli:
        return None
    return flags.get(FieldAddress.of(owner, attribute))


__all__ = [
    "DEPRECATED",
    "FieldAddress",
    "Flag",
    "FlagRegistry",
    "FlagSet",
    "collect_flags",
    "resolve_flag",
]
