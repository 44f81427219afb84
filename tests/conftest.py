from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from configdoc.log import reset_logging  # noqa: E402


@pytest.fixture
def clean_logging() -> Iterator[None]:
    reset_logging()
    yield
    reset_logging()
