"""Version of the package, read from the bundled ``VERSION`` file."""

from __future__ import annotations

from pathlib import Path
from typing import Final

PYTHON_REQUIRES_SPECIFIER: Final[str] = ">=3.10"

PROJECT_VERSION: Final[str] = (
    (Path(__file__).resolve().parent / "VERSION").read_text(encoding="utf-8").strip()
)
__version__: Final[str] = PROJECT_VERSION

__all__ = ["PROJECT_VERSION", "PYTHON_REQUIRES_SPECIFIER", "__version__"]
