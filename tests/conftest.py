from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from pattern_maker import PatternMaker, PatternPoint  # noqa: E402


@pytest.fixture()
def maker() -> PatternMaker:
    maker = PatternMaker()
    maker.create_pattern("Test Pattern")
    return maker


@pytest.fixture()
def square() -> list[PatternPoint]:
    return [
        PatternPoint(0.0, 0.0),
        PatternPoint(100.0, 0.0),
        PatternPoint(100.0, 100.0),
        PatternPoint(0.0, 100.0),
    ]
