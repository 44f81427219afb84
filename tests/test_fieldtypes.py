from __future__ import annotations

import enum
from datetime import datetime, timedelta
from pathlib import Path
from typing import Annotated, Any, Callable, Dict, List, Literal, Optional, Tuple, Union

import pytest
from pydantic import HttpUrl, SecretStr

from configdoc.errors import UnsupportedTypeError
from configdoc.fieldtypes import (
    CUSTOM_TRACKERS_TYPE,
    RELABEL_CONFIGS_TYPE,
    SemanticKind,
    classify,
    custom_field_type,
    is_function_type,
    known_type_names,
    reify,
    resolve,
)
from configdoc.values import (
    CIDRSliceCSV,
    CustomTrackersConfig,
    Duration,
    LogFormat,
    LogLevel,
    RelabelConfigs,
    StringSliceCSV,
    URLValue,
)


class Mode(enum.Enum):
    FAST = "fast"
    SAFE = "safe"


class Shards(enum.IntEnum):
    ONE = 1
    TWO = 2


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (bool, "boolean"),
        (int, "int"),
        (float, "float"),
        (str, "string"),
        (Optional[int], "int"),
        (Annotated[float, "ratio"], "float"),
        (List[str], "list of string"),
        (list[Duration], "list of duration"),
        (Tuple[int, ...], "list of int"),
        (List[List[bool]], "list of list of boolean"),
        (Dict[str, int], "map of str to int"),
        (Dict[str, List[str]], "map of str to typing.List[str]"),
        (Literal["a", "b"], "string"),
        (Literal[1, 2], "int"),
        (Mode, "string"),
        (Shards, "int"),
        (Path, "string"),
        (HttpUrl, "url"),
        (datetime, "time"),
        (timedelta, "duration"),
    ],
)
def test_structural_classification(annotation: Any, expected: str) -> None:
    assert classify(annotation) == expected


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (Duration, "duration"),
        (URLValue, "url"),
        (SecretStr, "string"),
        (StringSliceCSV, "string"),
        (CIDRSliceCSV, "string"),
        (LogLevel, "string"),
        (LogFormat, "string"),
        (RelabelConfigs, RELABEL_CONFIGS_TYPE),
        (CustomTrackersConfig, CUSTOM_TRACKERS_TYPE),
    ],
)
def test_override_table_wins_over_structure(annotation: Any, expected: str) -> None:
    # StringSliceCSV is a list and CustomTrackersConfig a dict underneath.
    assert classify(annotation) == expected


@pytest.mark.parametrize(
    "annotation",
    [complex, Tuple[int, str], Union[int, str], object, bytes],
)
def test_unsupported_types_raise(annotation: Any) -> None:
    with pytest.raises(UnsupportedTypeError):
        classify(annotation)


def test_resolve_exposes_variant_shape() -> None:
    resolved = resolve(List[Duration])
    assert resolved.kind is SemanticKind.LIST
    assert resolved.element is not None
    assert resolved.element.kind is SemanticKind.DURATION

    mapping = resolve(Dict[str, float])
    assert mapping.kind is SemanticKind.MAP
    assert (mapping.key, mapping.value) == ("str", "float")


@pytest.mark.parametrize("name", known_type_names())
def test_reify_round_trips_through_classify(name: str) -> None:
    assert classify(reify(name)) == name


def test_reify_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="unknown field type"):
        reify("list of sockets")


def test_custom_field_types_are_forced() -> None:
    assert custom_field_type(LogLevel) == "string"
    assert custom_field_type(URLValue) == "url"
    assert custom_field_type(Optional[datetime]) == "time"
    assert custom_field_type(Duration) == "duration"
    assert custom_field_type(timedelta) is None
    assert custom_field_type(List[str]) is None


def test_function_types_are_detected() -> None:
    assert is_function_type(Callable[[int], None])
    assert is_function_type(Optional[Callable[..., Any]])
    assert not is_function_type(int)
    assert not is_function_type(List[int])
