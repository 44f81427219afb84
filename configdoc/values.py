"""Configuration value types that need dedicated documentation handling.

These wrappers have no generic textual form: the type classifier maps each of
them to a fixed semantic type and the flag registry normalizes their default
text through :func:`format_flag_value`.
"""
from __future__ import annotations

import ipaddress
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable, Protocol, Tuple, Union, runtime_checkable
from urllib.parse import SplitResult, urlsplit, urlunsplit

from pydantic import SecretStr

MASKED_SECRET = "***masked***"

_DURATION_UNITS: Tuple[Tuple[str, int, bool], ...] = (
    ("y", 1000 * 60 * 60 * 24 * 365, True),
    ("w", 1000 * 60 * 60 * 24 * 7, True),
    ("d", 1000 * 60 * 60 * 24, True),
    ("h", 1000 * 60 * 60, False),
    ("m", 1000 * 60, False),
    ("s", 1000, False),
    ("ms", 1, False),
)
_UNIT_MILLIS = {unit: millis for unit, millis, _ in _DURATION_UNITS}
_DURATION_PATTERN = re.compile(r"(\d+)(ms|y|w|d|h|m|s)")


@runtime_checkable
class ExampleProvider(Protocol):
    """Capability of value types that can supply a documented example."""

    def example_doc(self) -> tuple[str, Any]:
        """Return ``(comment, value)`` describing a sample configuration."""


def format_duration(value: timedelta) -> str:
    """Render a duration in the compact ``1h30m`` form.

    Years, weeks and days are only used when they divide the duration exactly;
    sub-millisecond precision is dropped.
    """

    millis = value // timedelta(milliseconds=1)
    if millis == 0:
        return "0s"
    sign = "-" if millis < 0 else ""
    millis = abs(millis)
    parts: list[str] = []
    for unit, unit_millis, exact in _DURATION_UNITS:
        if exact and millis % unit_millis != 0:
            continue
        count, millis = divmod(millis, unit_millis)
        if count:
            parts.append(f"{count}{unit}")
    return sign + "".join(parts)


def parse_duration(text: str) -> "Duration":
    """Parse the compact duration form produced by :func:`format_duration`."""

    raw = text.strip()
    sign = 1
    if raw.startswith("-"):
        sign, raw = -1, raw[1:]
    if raw == "0":
        return Duration()
    position = 0
    millis = 0
    for match in _DURATION_PATTERN.finditer(raw):
        if match.start() != position:
            break
        millis += int(match.group(1)) * _UNIT_MILLIS[match.group(2)]
        position = match.end()
    if not raw or position != len(raw):
        raise ValueError(f"not a valid duration string: {text!r}")
    return Duration(milliseconds=sign * millis)


class Duration(timedelta):
    """Duration wrapper rendered in the compact textual form."""

    @classmethod
    def parse(cls, text: str) -> "Duration":
        return parse_duration(text)

    def __str__(self) -> str:
        return format_duration(self)


class URLValue:
    """Optional URL setting; an unset value renders as empty text."""

    __slots__ = ("parts",)

    def __init__(self, url: str = "") -> None:
        self.parts: SplitResult | None = urlsplit(url) if url else None

    def __str__(self) -> str:
        return urlunsplit(self.parts) if self.parts else ""

    def __repr__(self) -> str:
        return f"URLValue({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, URLValue):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))


class LogLevel(str, Enum):
    """Only log messages with the given severity or above."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(str, Enum):
    """Output format of log records."""

    LOGFMT = "logfmt"
    JSON = "json"


class StringSliceCSV(list):
    """List of strings configured as one comma-separated value."""

    @classmethod
    def parse(cls, text: str) -> "StringSliceCSV":
        return cls(item.strip() for item in text.split(",") if item.strip())

    def __str__(self) -> str:
        return ",".join(str(item) for item in self)


Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


class CIDRSliceCSV(list):
    """List of CIDR networks configured as one comma-separated value."""

    @classmethod
    def parse(cls, text: str) -> "CIDRSliceCSV":
        return cls(
            ipaddress.ip_network(item.strip(), strict=False)
            for item in text.split(",")
            if item.strip()
        )

    def __str__(self) -> str:
        return ",".join(str(network) for network in self)


@dataclass
class RelabelConfig:
    """One label rewriting rule applied to incoming series."""

    source_labels: list[str] = field(default_factory=list)
    separator: str = ";"
    regex: str = "(.*)"
    target_label: str = ""
    replacement: str = "$1"
    action: str = "replace"


class RelabelConfigs(list):
    """Ordered list of relabel rules."""

    def example_doc(self) -> tuple[str, Any]:
        rule = RelabelConfig(
            source_labels=["__name__"],
            regex="debug_.*",
            action="drop",
        )
        return (
            "Drop every series whose metric name starts with debug_.",
            [asdict(rule)],
        )


class CustomTrackersConfig(dict):
    """Map of tracker name to the series matcher it counts."""

    def example_doc(self) -> tuple[str, Any]:
        return (
            "Count active series of the dev and prod namespaces separately for "
            'each tenant, labelled {name="dev"} and {name="prod"}.',
            {
                "dev": '{namespace=~"dev-.*"}',
                "prod": '{namespace=~"prod-.*"}',
            },
        )


def _format_float(value: float) -> str:
    text = repr(value)
    return text[:-2] if text.endswith(".0") else text


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.isoformat()
    return text.replace("+00:00", "Z")


def format_flag_value(value: Any) -> str:
    """Return the textual default of a flag registered with ``value``."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, SecretStr):
        return MASKED_SECRET if value.get_secret_value() else ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, dict):
        return ",".join(
            f"{key}={format_flag_value(item)}" for key, item in sorted(value.items())
        )
    if isinstance(value, (list, tuple, set, frozenset)):
        items: Iterable[Any] = sorted(value) if isinstance(value, (set, frozenset)) else value
        return ",".join(format_flag_value(item) for item in items)
    return str(value)


__all__ = [
    "CIDRSliceCSV",
    "CustomTrackersConfig",
    "Duration",
    "ExampleProvider",
    "LogFormat",
    "LogLevel",
    "MASKED_SECRET",
    "RelabelConfig",
    "RelabelConfigs",
    "StringSliceCSV",
    "URLValue",
    "format_duration",
    "format_flag_value",
    "parse_duration",
]
