"""Exception hierarchy shared by the extraction engine and its tooling."""

from __future__ import annotations


class ConfigDocError(Exception):
    """Base class for every error raised by configdoc."""


class ShapeError(ConfigDocError, TypeError):
    """Raised when the value handed to the walker is not a mutable section instance."""


class UnsupportedTypeError(ConfigDocError, TypeError):
    """Raised when a field annotation has no semantic type."""


class FieldTypeError(ConfigDocError, TypeError):
    """Raised when a leaf field cannot be classified.

    Carries the fully qualified name of the owning section type and the dotted
    path of the field so the offending declaration can be located.
    """

    def __init__(self, section: str, path: str, reason: str) -> None:
        super().__init__(f"config={section} field={path}: {reason}")
        self.section = section
        self.path = path
        self.reason = reason


class MalformedAnnotationError(ConfigDocError, ValueError):
    """Raised by the strict doc tag parser for unparseable tags."""


class FlagError(ConfigDocError, ValueError):
    """Raised when flag registration is inconsistent."""


class SettingsError(ConfigDocError, RuntimeError):
    """Raised when the tool settings cannot be loaded or validated."""


__all__ = [
    "ConfigDocError",
    "FieldTypeError",
    "FlagError",
    "MalformedAnnotationError",
    "SettingsError",
    "ShapeError",
    "UnsupportedTypeError",
]
