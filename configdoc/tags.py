"""Per-field documentation annotations.

Fields carry their documentation in ``json_schema_extra`` (see
:func:`configdoc.schema.doc`): a pipe-separated ``doc`` tag, an optional
``category`` and an ``inline`` marker for structural embedding.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from loguru import logger
from pydantic.fields import FieldInfo

from .categories import Category
from .errors import MalformedAnnotationError

DOC_KEY = "doc"
CATEGORY_KEY = "category"
INLINE_KEY = "inline"

# Attribute prefix of placeholders kept for backward compatibility only.
UNUSED_FIELD_PREFIX = "unused_flag"


def parse_doc_tag(tag: Any) -> Dict[str, str]:
    """Parse a ``key|key=value`` doc tag.

    Bare keys map to an empty string. Raises :class:`MalformedAnnotationError`
    for non-text tags and tokens without a key.
    """

    if tag is None or tag == "":
        return {}
    if not isinstance(tag, str):
        raise MalformedAnnotationError(f"doc tag must be text, got {type(tag).__name__}")
    parsed: Dict[str, str] = {}
    for token in tag.split("|"):
        key, separator, value = token.partition("=")
        key = key.strip()
        if not key:
            raise MalformedAnnotationError(f"token {token!r} of doc tag {tag!r} has no key")
        parsed[key] = value if separator else ""
    return parsed


def field_extra(field: FieldInfo) -> Dict[str, Any]:
    extra = field.json_schema_extra
    if isinstance(extra, dict):
        return extra
    return {}


def doc_tag(field: FieldInfo, path: str) -> Dict[str, str]:
    """Return the parsed doc tag of ``field``, treating malformed tags as empty."""

    try:
        return parse_doc_tag(field_extra(field).get(DOC_KEY))
    except MalformedAnnotationError as exc:
        logger.warning("Ignoring malformed doc tag on {}: {}", path, exc)
        return {}


def field_name(attribute: str, field: FieldInfo) -> str:
    """Return the externally visible name of a field, or ``""`` when it has none."""

    if field.exclude:
        return ""
    alias = field.alias
    if alias == "-":
        return ""
    return alias or attribute


@dataclass(frozen=True, slots=True)
class FieldAnnotations:
    """Documentation metadata of one field, resolved once per traversal."""

    name: str
    hidden: bool = False
    nocli: bool = False
    required: bool = False
    inline: bool = False
    default: Optional[str] = None
    description: Optional[str] = None
    category: str = ""


def read_annotations(attribute: str, field: FieldInfo, path: str) -> FieldAnnotations:
    tag = doc_tag(field, path)
    extra = field_extra(field)
    category = extra.get(CATEGORY_KEY) or ""
    if isinstance(category, Category):
        category = category.value
    return FieldAnnotations(
        name=field_name(attribute, field),
        hidden="hidden" in tag,
        nocli="nocli" in tag,
        required="required" in tag,
        inline=bool(extra.get(INLINE_KEY)),
        default=tag.get("default") or None,
        description=tag.get("description") or field.description or None,
        category=str(category),
    )


__all__ = [
    "FieldAnnotations",
    "MalformedAnnotationError",
    "UNUSED_FIELD_PREFIX",
    "doc_tag",
    "field_extra",
    "field_name",
    "parse_doc_tag",
    "read_annotations",
]
