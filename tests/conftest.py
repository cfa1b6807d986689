"""Pytest configuration: make `src` importable without installing, shared curves."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_src_on_sys_path() -> None:
    """Prepend the repository `src` directory to `sys.path` if missing."""
    repo_root: Path = Path(__file__).resolve().parents[1]
    src_path: Path = repo_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_ensure_src_on_sys_path()


@pytest.fixture
def arch_points() -> list[tuple[float, float]]:
    """Open four-point cubic arch."""
    return [(0.0, 0.0), (50.0, 100.0), (150.0, 100.0), (200.0, 0.0)]


@pytest.fixture
def square_points() -> list[tuple[float, float]]:
    """Corners of a 100x100 square, counter-clockwise."""
    return [(0.0, 0.0), (100.0, 0.0), (100.0, 100.0), (0.0, 100.0)]


@pytest.fixture
def zigzag_points() -> list[tuple[float, float, float]]:
    """Seven weighted points, enough for several interior knots."""
    return [
        (0.0, 0.0, 1.0),
        (40.0, 80.0, 2.0),
        (90.0, -20.0, 0.5),
        (130.0, 60.0, 1.0),
        (180.0, 10.0, 3.0),
        (220.0, 90.0, 1.0),
        (260.0, 30.0, 1.0),
    ]
