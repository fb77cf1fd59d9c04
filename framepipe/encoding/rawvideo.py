"""
encoding/rawvideo.py
--------------------
Raw video wire format shared by the session and the sink.

Each frame is ``width * height * 3`` bytes: R, G, B per pixel, row-major
(y outer, x inner), no padding, and no delimiter between frames.
"""

from __future__ import annotations

from framepipe.frame.buffer import Frame

PIXEL_FORMAT = "rgb24"
BYTES_PER_PIXEL = 3


def frame_size(resolution: tuple[int, int]) -> int:
    """Number of bytes one frame occupies on the wire."""
    width, height = resolution
    return width * height * BYTES_PER_PIXEL


def encode_frame(frame: Frame) -> bytes:
    """Convert *frame* to its canonical rgb24 byte string."""
    return frame.to_bytes()
