"""Layered settings of the documentation tool itself.

Values are merged from built-in defaults, a TOML file, a ``.env`` file and
process environment variables (``CONFIGDOC__LOGGING__LEVEL=DEBUG``), in that
order. Every value remembers the layer it came from.
"""
from __future__ import annotations

import importlib
import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import tomli_w
from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for Py <3.11
    import tomli as tomllib  # type: ignore[no-redef]

from .categories import Category
from .errors import SettingsError
from .values import MASKED_SECRET

DEFAULT_ENV_PREFIX = "CONFIGDOC"
DEFAULT_SETTINGS_FILENAME = "configdoc.toml"
DEFAULT_ENV_FILENAME = ".env"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class StrictModel(BaseModel):
    """Base model enforcing strict validation rules."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )


class LoggingSettings(StrictModel):
    """Logging of the documentation tool."""

    level: str = Field(
        default="WARNING",
        description="Minimum level of records written to the console.",
        examples=["DEBUG"],
    )
    file_path: Optional[Path] = Field(
        default=None,
        description="Optional rotating log file; disabled when unset.",
    )
    rotation: str = Field(default="10 MB", description="Size or age at which the log file rotates.")
    retention: str = Field(default="7 days", description="How long rotated log files are kept.")
    serialize: bool = Field(default=False, description="Write records as JSON lines.")

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"level must be one of: {', '.join(LOG_LEVELS)}")
        return normalized


class Settings(StrictModel):
    """Complete settings of the documentation tool."""

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    target: str = Field(
        default="configdoc.reference:Config",
        description="Configuration section type documented by default, as MODULE:ATTR.",
    )
    roots: str = Field(
        default="configdoc.reference:ROOT_BLOCKS",
        description="Root block registry used when documenting, as MODULE:ATTR.",
    )
    category_overrides: Dict[str, Category] = Field(
        default_factory=dict,
        description="Categories forced by flag name.",
    )
    _metadata: object = PrivateAttr(default=None)


@dataclass(frozen=True)
class ValueOrigin:
    """Provenance metadata for a single settings value."""

    layer: str
    source: str
    env_var: str | None = None

    def render(self) -> str:
        details = [item for item in (self.env_var, self.source) if item]
        if details:
            return f"{self.layer} ({', '.join(details)})"
        return self.layer


@dataclass
class SettingsMetadata:
    """Metadata returned alongside the loaded settings."""

    settings_path: Path
    env_path: Optional[Path]
    env_prefix: str
    provenance: Dict[str, ValueOrigin] = field(default_factory=dict)
    load_order: tuple[str, ...] = ("defaults", "file", "env-file", "env")

    def describe_sources(self) -> list[str]:
        sources = [
            "defaults: built into configdoc.settings",
            f"settings file: {self.settings_path}",
        ]
        if self.env_path:
            sources.append(f".env file: {self.env_path}")
        else:
            sources.append(".env file: not found")
        sources.append(f"environment prefix: {self.env_prefix}__*")
        return sources


def _is_secret(path: str) -> bool:
    lowered = path.lower()
    return any(token in lowered for token in ("password", "secret", "token"))


_ENV_LITERALS: Dict[str, Any] = {"true": True, "false": False, "null": None, "none": None}
_INTEGER = re.compile(r"-?\d+")


def _env_value(raw: str) -> Any:
    """Interpret an environment string the way a TOML value would read."""

    text = raw.strip()
    if text.lower() in _ENV_LITERALS:
        return _ENV_LITERALS[text.lower()]
    if _INTEGER.fullmatch(text):
        return int(text)
    if text[:1] + text[-1:] in ("[]", "{}"):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass
    return text


def _read_toml(path: Path) -> Mapping[str, Any]:
    if not path.is_file():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as exc:
        raise SettingsError(f"Failed to parse {path}: {exc}") from exc


def _env_file_for(settings_path: Path) -> Path:
    for directory in (settings_path.parent, Path.cwd()):
        candidate = directory / DEFAULT_ENV_FILENAME
        if candidate.exists():
            return candidate
    return Path.cwd() / DEFAULT_ENV_FILENAME


class _Layers:
    """Raw settings tree built layer by layer, with the origin of each leaf.

    Keys are tracked as tuples of segments so that a segment may itself hold
    dots, as flag names in ``category_overrides`` do.
    """

    def __init__(self, env_prefix: str) -> None:
        self.env_prefix = env_prefix
        self.tree: Dict[str, Any] = {}
        self.origins: Dict[tuple[str, ...], ValueOrigin] = {}

    def set(self, key: tuple[str, ...], value: Any, origin: ValueOrigin) -> None:
        node = self.tree
        for segment in key[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = node[segment] = {}
            node = child
        node[key[-1]] = value
        self.origins[key] = origin

    def apply_mapping(self, data: Mapping[str, Any], origin: ValueOrigin, key: tuple[str, ...] = ()) -> None:
        for name, value in data.items():
            if isinstance(value, Mapping):
                self.apply_mapping(value, origin, key + (str(name),))
            else:
                self.set(key + (str(name),), value, origin)

    def apply_environment(self, variables: Mapping[str, Optional[str]], layer: str, source: str) -> None:
        marker = self.env_prefix + "__"
        for variable, raw in variables.items():
            if raw is None or not variable.startswith(marker):
                continue
            key = tuple(part.lower() for part in variable[len(marker):].split("__") if part)
            if not key:
                raise SettingsError(f"Environment override '{variable}' is missing key segments")
            self.set(key, _env_value(raw), ValueOrigin(layer=layer, source=source, env_var=variable))

    def provenance(self) -> Dict[str, ValueOrigin]:
        return {".".join(key): origin for key, origin in self.origins.items()}

    def validation_error(self, error: ValidationError) -> SettingsError:
        provenance = self.provenance()
        lines = ["Settings validation failed:"]
        for record in error.errors():
            location = ".".join(str(part) for part in record["loc"]) or "<root>"
            line = f" - {location}: {record['msg']}"
            received = record.get("input")
            if received is not None and not isinstance(received, Mapping):
                line += f" (received={MASKED_SECRET if _is_secret(location) else repr(received)})"
            origin = provenance.get(location)
            if origin is not None:
                line += f" [{origin.render()}]"
            lines.append(line)
        return SettingsError("\n".join(lines))


def load_settings(
    path: Path | None = None,
    *,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings by merging defaults, file and environment layers."""

    settings_path = path if path else Path.cwd() / DEFAULT_SETTINGS_FILENAME
    env_path = _env_file_for(settings_path)

    layers = _Layers(env_prefix)
    layers.apply_mapping(
        Settings().model_dump(mode="python"),
        ValueOrigin(layer="defaults", source="configdoc.settings.Settings"),
    )
    layers.apply_mapping(_read_toml(settings_path), ValueOrigin(layer="file", source=str(settings_path)))
    if env_path.exists():
        layers.apply_environment(dotenv_values(env_path, verbose=False), "env-file", str(env_path))
    layers.apply_environment(os.environ if environ is None else environ, "env", "process")

    try:
        settings = Settings.model_validate(layers.tree)
    except ValidationError as exc:
        raise layers.validation_error(exc) from exc
    settings._metadata = SettingsMetadata(
        settings_path=settings_path,
        env_path=env_path if env_path.exists() else None,
        env_prefix=env_prefix,
        provenance=layers.provenance(),
    )
    return settings


def _serialize_for_toml(value: Any) -> Any:
    if isinstance(value, Mapping):
        # TOML has no null; unset values are left out.
        return {key: _serialize_for_toml(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [_serialize_for_toml(item) for item in value]
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Category):
        return value.value
    return value


def dump_defaults() -> str:
    """Return the built-in defaults as TOML."""

    return tomli_w.dumps(_serialize_for_toml(Settings().model_dump(mode="python")))


def show_sources(metadata: SettingsMetadata) -> str:
    details = "\n".join(f"- {item}" for item in metadata.describe_sources())
    return f"Active settings sources:\n{details}"


def explain(settings: Settings, key: str) -> str:
    """Describe the value of ``key`` and the layer it came from."""

    metadata: SettingsMetadata | None = getattr(settings, "_metadata", None)
    if metadata is None:
        raise SettingsError("Settings metadata is unavailable")
    current: Any = settings.model_dump(mode="json")
    for segment in key.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            raise SettingsError(f"Unknown settings key: {key}")
        current = current[segment]
    origin = metadata.provenance.get(key)
    origin_text = origin.render() if origin else "unknown"
    shown = MASKED_SECRET if _is_secret(key) else json.dumps(current, ensure_ascii=False)
    return f"{key} = {shown}\nsource: {origin_text}"


def resolve_object(reference: str) -> Any:
    """Import the object named by a ``module:attribute`` reference."""

    module_name, separator, attribute = reference.partition(":")
    if not separator or not module_name or not attribute:
        raise SettingsError(f"Invalid object reference {reference!r}; expected MODULE:ATTR")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise SettingsError(f"Cannot import {module_name}: {exc}") from exc
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise SettingsError(f"{module_name} has no attribute {attribute}") from None
    return target


__all__ = [
    "DEFAULT_ENV_PREFIX",
    "LoggingSettings",
    "Settings",
    "SettingsMetadata",
    "ValueOrigin",
    "dump_defaults",
    "explain",
    "load_settings",
    "resolve_object",
    "show_sources",
]
