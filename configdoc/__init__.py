"""Configuration reference extraction with lazy attribute loading.

Attributes are resolved on first access so that ``setup.py`` can read the
version metadata without importing pydantic or loguru.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Iterable

__all__ = [
    "BlockEntry",
    "ConfigBlock",
    "ConfigDocError",
    "EntryKind",
    "FieldEntry",
    "FieldExample",
    "FieldTypeError",
    "Flag",
    "FlagSet",
    "MalformedAnnotationError",
    "RootBlock",
    "RootBlockRegistry",
    "Section",
    "ShapeError",
    "UnsupportedTypeError",
    "classify",
    "collect_flags",
    "describe",
    "extract",
    "iter_fields",
    "reify",
    "PROJECT_VERSION",
    "PYTHON_REQUIRES_SPECIFIER",
    "__version__",
]

_MODULE_ATTRS: Dict[str, Iterable[str]] = {
    "configdoc.errors": [
        "ConfigDocError",
        "FieldTypeError",
        "MalformedAnnotationError",
        "ShapeError",
        "UnsupportedTypeError",
    ],
    "configdoc.model": [
        "BlockEntry",
        "ConfigBlock",
        "EntryKind",
        "FieldEntry",
        "FieldExample",
        "iter_fields",
    ],
    "configdoc.roots": ["RootBlock", "RootBlockRegistry"],
    "configdoc.schema": ["Section"],
    "configdoc.flags": ["Flag", "FlagSet", "collect_flags"],
    "configdoc.fieldtypes": ["classify", "reify"],
    "configdoc.walker": ["describe", "extract"],
    "configdoc.version": [
        "PROJECT_VERSION",
        "PYTHON_REQUIRES_SPECIFIER",
        "__version__",
    ],
}

_ATTR_TO_MODULE: Dict[str, str] = {
    attribute: module for module, attributes in _MODULE_ATTRS.items() for attribute in attributes
}


def __getattr__(name: str) -> Any:
    module_name = _ATTR_TO_MODULE.get(name)
    if module_name is None:
        raise AttributeError(f"module 'configdoc' has no attribute {name!r}")
    module = import_module(module_name)
    for attribute in _MODULE_ATTRS[module_name]:
        globals()[attribute] = getattr(module, attribute)
    return globals()[name]
