"""Semantic types of configuration fields.

``classify`` maps a field annotation to the renderer-agnostic type label used
in the documentation model, ``reify`` goes the other way for tooling that needs
a placeholder of a documented type.
"""
from __future__ import annotations

import collections.abc
import types
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Dict, Literal, Optional, Union, get_args, get_origin

from pydantic import AnyUrl, HttpUrl, SecretStr

from .errors import UnsupportedTypeError
from .values import (
    CIDRSliceCSV,
    CustomTrackersConfig,
    Duration,
    LogFormat,
    LogLevel,
    RelabelConfigs,
    StringSliceCSV,
    URLValue,
)


class SemanticKind(str, Enum):
    """Closed set of semantic type shapes."""

    BOOLEAN = "boolean"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    DURATION = "duration"
    URL = "url"
    TIME = "time"
    LIST = "list"
    MAP = "map"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class SemanticType:
    """Resolved semantic type; ``str()`` yields the documented label."""

    kind: SemanticKind
    element: Optional["SemanticType"] = None
    key: str = ""
    value: str = ""
    label: str = ""

    def __str__(self) -> str:
        if self.kind is SemanticKind.LIST:
            return f"list of {self.element}"
        if self.kind is SemanticKind.MAP:
            return f"map of {self.key} to {self.value}"
        if self.kind is SemanticKind.CUSTOM:
            return self.label
        return self.kind.value


BOOLEAN = SemanticType(SemanticKind.BOOLEAN)
INT = SemanticType(SemanticKind.INT)
FLOAT = SemanticType(SemanticKind.FLOAT)
STRING = SemanticType(SemanticKind.STRING)
DURATION = SemanticType(SemanticKind.DURATION)
URL = SemanticType(SemanticKind.URL)
TIME = SemanticType(SemanticKind.TIME)

RELABEL_CONFIGS_TYPE = "relabel_config..."
CUSTOM_TRACKERS_TYPE = "map of tracker name (string) to matcher (string)"

# Matched by identity before any structural inference.
TYPE_OVERRIDES: Dict[type, SemanticType] = {
    timedelta: DURATION,
    Duration: DURATION,
    URLValue: URL,
    AnyUrl: URL,
    HttpUrl: URL,
    datetime: TIME,
    SecretStr: STRING,
    Path: STRING,
    StringSliceCSV: STRING,
    CIDRSliceCSV: STRING,
    LogLevel: STRING,
    LogFormat: STRING,
    RelabelConfigs: SemanticType(SemanticKind.CUSTOM, label=RELABEL_CONFIGS_TYPE),
    CustomTrackersConfig: SemanticType(SemanticKind.CUSTOM, label=CUSTOM_TRACKERS_TYPE),
}

# Value wrappers documented through a dedicated entry rather than the generic
# leaf path; their flag default text is normalized per type.
CUSTOM_FIELD_TYPES: Dict[type, str] = {
    LogLevel: "string",
    LogFormat: "string",
    URLValue: "url",
    SecretStr: "string",
    Duration: "duration",
    datetime: "time",
}

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)

_REIFIED: Dict[str, Any] = {
    "string": str,
    "url": URLValue,
    "duration": timedelta,
    "time": datetime,
    "boolean": bool,
    "int": int,
    "float": float,
    "list of string": list[str],
    "list of int": list[int],
    "list of duration": list[timedelta],
    "map of str to str": dict[str, str],
    "map of str to int": dict[str, int],
    "map of str to float": dict[str, float],
    RELABEL_CONFIGS_TYPE: RelabelConfigs,
    CUSTOM_TRACKERS_TYPE: CustomTrackersConfig,
}


def unwrap(annotation: Any) -> Any:
    """Strip ``Annotated`` metadata and ``Optional`` from an annotation."""

    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation = get_args(annotation)[0]
            continue
        if origin is Union or origin is types.UnionType:
            members = [arg for arg in get_args(annotation) if arg is not type(None)]
            if len(members) != 1:
                return annotation
            annotation = members[0]
            continue
        return annotation


def plain_class(annotation: Any) -> type | None:
    """Return the annotation when it is a plain, non-generic class."""

    annotation = unwrap(annotation)
    if get_origin(annotation) is not None:
        return None
    if isinstance(annotation, type):
        return annotation
    return None


def is_function_type(annotation: Any) -> bool:
    annotation = unwrap(annotation)
    if get_origin(annotation) is collections.abc.Callable:
        return True
    return annotation is collections.abc.Callable or annotation is types.FunctionType


def custom_field_type(annotation: Any) -> str | None:
    """Return the forced semantic type of a custom value wrapper, if any."""

    cls = plain_class(annotation)
    if cls is None:
        return None
    return CUSTOM_FIELD_TYPES.get(cls)


def type_name(annotation: Any) -> str:
    if isinstance(annotation, type) and get_origin(annotation) is None:
        return annotation.__name__
    return repr(annotation)


def resolve(annotation: Any) -> SemanticType:
    """Resolve an annotation into a :class:`SemanticType`."""

    annotation = unwrap(annotation)
    origin = get_origin(annotation)
    if origin is None:
        if not isinstance(annotation, type):
            raise UnsupportedTypeError(f"unsupported data type {annotation!r}")
        return _resolve_class(annotation)

    args = get_args(annotation)
    if origin is Literal:
        return _resolve_literal(annotation, args)
    if origin in _SEQUENCE_ORIGINS:
        if origin is tuple:
            if len(args) != 2 or args[1] is not Ellipsis:
                raise UnsupportedTypeError(f"unsupported data type {annotation!r}")
            args = args[:1]
        if len(args) != 1:
            raise UnsupportedTypeError(f"unsupported data type {annotation!r}")
        return SemanticType(SemanticKind.LIST, element=resolve(args[0]))
    if origin in _MAPPING_ORIGINS:
        if len(args) != 2:
            raise UnsupportedTypeError(f"unsupported data type {annotation!r}")
        return SemanticType(
            SemanticKind.MAP, key=type_name(args[0]), value=type_name(args[1])
        )
    raise UnsupportedTypeError(f"unsupported data type {annotation!r}")


def _resolve_class(cls: type) -> SemanticType:
    override = TYPE_OVERRIDES.get(cls)
    if override is not None:
        return override
    if issubclass(cls, bool):
        return BOOLEAN
    if issubclass(cls, Enum):
        return _resolve_enum(cls)
    if issubclass(cls, int):
        return INT
    if issubclass(cls, float):
        return FLOAT
    if issubclass(cls, str):
        return STRING
    raise UnsupportedTypeError(f"unsupported data type {cls.__qualname__}")


def _resolve_enum(cls: type[Enum]) -> SemanticType:
    if issubclass(cls, str):
        return STRING
    if issubclass(cls, int):
        return INT
    values = [member.value for member in cls]
    if values and all(isinstance(value, str) for value in values):
        return STRING
    if values and all(isinstance(value, int) and not isinstance(value, bool) for value in values):
        return INT
    raise UnsupportedTypeError(f"unsupported enum {cls.__qualname__}")


def _resolve_literal(annotation: Any, values: tuple[Any, ...]) -> SemanticType:
    if values and all(isinstance(value, bool) for value in values):
        return BOOLEAN
    if values and all(isinstance(value, str) for value in values):
        return STRING
    if values and all(isinstance(value, int) and not isinstance(value, bool) for value in values):
        return INT
    raise UnsupportedTypeError(f"unsupported data type {annotation!r}")


def classify(annotation: Any) -> str:
    """Return the semantic type name of ``annotation``."""

    return str(resolve(annotation))


def reify(name: str) -> Any:
    """Return a type whose :func:`classify` yields ``name``."""

    try:
        return _REIFIED[name]
    except KeyError:
        raise ValueError(f"unknown field type {name}") from None


def known_type_names() -> list[str]:
    return list(_REIFIED)


__all__ = [
    "CUSTOM_FIELD_TYPES",
    "SemanticKind",
    "SemanticType",
    "TYPE_OVERRIDES",
    "classify",
    "custom_field_type",
    "is_function_type",
    "known_type_names",
    "plain_class",
    "reify",
    "resolve",
    "unwrap",
]
