"""Ensure version metadata stays in sync across the project."""

from __future__ import annotations

from pathlib import Path

import pytest

import configdoc
from configdoc.version import PROJECT_VERSION, PYTHON_REQUIRES_SPECIFIER

ROOT_DIR = Path(__file__).resolve().parents[1]


def test_version_single_source_of_truth() -> None:
    version_file = ROOT_DIR / "configdoc" / "VERSION"
    assert version_file.read_text(encoding="utf-8").strip() == PROJECT_VERSION
    assert PYTHON_REQUIRES_SPECIFIER.startswith(">=3.")

    setup_text = (ROOT_DIR / "setup.py").read_text(encoding="utf-8")
    assert "PYTHON_REQUIRES_SPECIFIER" in setup_text
    assert "PROJECT_VERSION" in setup_text


def test_package_attributes_load_lazily() -> None:
    assert configdoc.__version__ == PROJECT_VERSION
    assert configdoc.describe.__module__ == "configdoc.walker"
    assert configdoc.Section.__module__ == "configdoc.schema"
    with pytest.raises(AttributeError):
        configdoc.not_there  # noqa: B018
