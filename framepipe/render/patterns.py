"""
render/patterns.py
------------------
Procedural demo animations. Each painter draws frame number ``t`` into a
frame buffer in place; ``PATTERNS`` pairs each painter with the pixel model
it paints in.
"""

from __future__ import annotations

import math
from typing import Callable, NamedTuple

from framepipe.frame.buffer import Frame
from framepipe.pixels.models import Hsl, Hsv, Pixel, Rgb

Painter = Callable[[Frame, int, int], None]


def rainbow(frame: Frame, t: int, fps: int) -> None:
    """Horizontal hue bands scrolling one full cycle every 4 seconds."""
    width, height = frame.resolution
    phase = (t / (fps * 4.0)) % 1.0
    for x in range(width):
        colour = Hsl.from_floats((x / width + phase) % 1.0, 1.0, 0.5)
        for y in range(height):
            frame[x, y] = colour


def pulse(frame: Frame, t: int, fps: int) -> None:
    """Vertical hue gradient whose brightness breathes once per second."""
    width, height = frame.resolution
    value = 0.5 + 0.5 * math.sin(2.0 * math.pi * t / fps)
    for y in range(height):
        colour = Hsv.from_floats(y / height, 0.8, value)
        for x in range(width):
            frame[x, y] = colour


def gradient(frame: Frame, t: int, fps: int) -> None:
    """Red across, green down, blue cycling over 2 seconds."""
    width, height = frame.resolution
    blue = int(255 * (t % (fps * 2)) / (fps * 2))
    for y in range(height):
        green = 255 * y // max(height - 1, 1)
        for x in range(width):
            frame[x, y] = Rgb(255 * x // max(width - 1, 1), green, blue)


class Pattern(NamedTuple):
    pixel_type: type[Pixel]
    paint: Painter


PATTERNS: dict[str, Pattern] = {
    "rainbow": Pattern(Hsl, rainbow),
    "pulse": Pattern(Hsv, pulse),
    "gradient": Pattern(Rgb, gradient),
}
