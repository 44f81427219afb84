"""Base class and declaration helpers for configuration sections."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:  # pragma: no cover
    from .flags import FlagSet


class Section(BaseModel):
    """A configuration section.

    Fields are declared with pydantic in the order they should be documented.
    Sections that expose command-line flags override :meth:`register_flags`
    (or ``register_flags_with_prefix`` when the same section is mounted under
    several parents) and register each leaf with :meth:`FlagSet.var`.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
        arbitrary_types_allowed=True,
    )

    def register_flags(self, fs: "FlagSet") -> None:
        """Register the command-line flags of this section; none by default."""


def doc(
    tag: str = "",
    *,
    category: str | None = None,
    inline: bool = False,
) -> Dict[str, Any]:
    """Build the ``json_schema_extra`` mapping carrying field documentation.

    ``tag`` is a pipe-separated list of ``key`` or ``key=value`` tokens, e.g.
    ``"required|default=<hostname>"``.
    """

    extra: Dict[str, Any] = {}
    if tag:
        extra["doc"] = tag
    if category:
        extra["category"] = category
    if inline:
        extra["inline"] = True
    return extra


def is_frozen(section: BaseModel) -> bool:
    return bool(type(section).model_config.get("frozen"))


__all__ = ["Section", "doc", "is_frozen"]
