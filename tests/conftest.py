"""
conftest.py
-----------
Shared pytest fixtures for the framepipe test suite.
"""

from __future__ import annotations

import sys

import pytest

from framepipe.encoding.sink import MemorySink
from framepipe.frame.buffer import Frame
from framepipe.pixels.models import Rgb


# ---------------------------------------------------------------------------
# Reusable fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def quadrants() -> dict[tuple[int, int], Rgb]:
    """Pixels of a 2×2 frame keyed by (x, y), in row-major emission order."""
    return {
        (0, 0): Rgb(1, 2, 3),
        (1, 0): Rgb(4, 5, 6),
        (0, 1): Rgb(7, 8, 9),
        (1, 1): Rgb(10, 11, 12),
    }


@pytest.fixture
def quadrant_frame(quadrants) -> Frame[Rgb]:
    """A 2×2 RGB frame with four distinct colours."""
    frame = Frame((2, 2), Rgb)
    for (x, y), pixel in quadrants.items():
        frame[x, y] = pixel
    return frame


@pytest.fixture
def copy_to_file_cmd():
    """Build a command that copies its stdin into *path*, standing in for ffmpeg."""
    def _build(path) -> list[str]:
        return [
            sys.executable,
            "-c",
            "import sys; data = sys.stdin.buffer.read(); open(sys.argv[1], 'wb').write(data)",
            str(path),
        ]
    return _build
