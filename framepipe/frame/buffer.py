"""
frame/buffer.py
---------------
Fixed-resolution 2-D pixel grid, stored row-major (``index = x + width * y``).

Two access paths are provided:

* ``get(x, y)`` / ``set(x, y, pixel)`` never raise for out-of-range
  coordinates; they return ``None`` / ``False`` instead.
* ``frame[x, y]`` assumes the caller knows the coordinates are valid and
  raises :class:`FrameIndexError` naming the offending axis otherwise.

Every write must be an instance of the frame's pixel type; anything else
raises ``TypeError``.

The resolution is fixed at construction; ``reset()`` refills the existing
storage rather than allocating a new frame.
"""

from __future__ import annotations

import itertools
from typing import Generic, Iterator, Optional, TypeVar

import numpy as np

from framepipe.core.exceptions import FrameIndexError
from framepipe.pixels.models import Pixel, Rgb

P = TypeVar("P", bound=Pixel)


class Frame(Generic[P]):
    """A single frame of video holding pixels of one model type."""

    def __init__(self, resolution: tuple[int, int], pixel_type: type[P] = Rgb) -> None:  # type: ignore[assignment]
        width, height = resolution
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame resolution must be positive, got {width}x{height}")

        self._width = int(width)
        self._height = int(height)
        self._pixel_type = pixel_type
        self._data: list[P] = [pixel_type() for _ in range(self._width * self._height)]

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def resolution(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def pixel_type(self) -> type[P]:
        return self._pixel_type

    def __len__(self) -> int:
        return len(self._data)

    # ------------------------------------------------------------------
    # Non-raising access
    # ------------------------------------------------------------------

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def get(self, x: int, y: int) -> Optional[P]:
        """Return the pixel at (x, y), or ``None`` if outside the frame."""
        if not self.in_bounds(x, y):
            return None
        return self._data[x + self._width * y]

    def set(self, x: int, y: int, pixel: P) -> bool:
        """Store *pixel* at (x, y). Returns ``False`` if outside the frame."""
        self._check_pixel(pixel)
        if not self.in_bounds(x, y):
            return False
        self._data[x + self._width * y] = pixel
        return True

    # ------------------------------------------------------------------
    # Direct access: frame[x, y]
    # ------------------------------------------------------------------

    def _verify_index(self, x: int, y: int) -> None:
        if not 0 <= x < self._width:
            raise FrameIndexError(
                f"frame index out of bounds: the x value is {x} but the width is {self._width}"
            )
        if not 0 <= y < self._height:
            raise FrameIndexError(
                f"frame index out of bounds: the y value is {y} but the height is {self._height}"
            )

    def _check_pixel(self, pixel: object) -> None:
        if not isinstance(pixel, self._pixel_type):
            raise TypeError(
                f"frame holds {self._pixel_type.__name__} pixels, got {type(pixel).__name__}"
            )

    def __getitem__(self, index: tuple[int, int]) -> P:
        x, y = index
        self._verify_index(x, y)
        return self._data[x + self._width * y]

    def __setitem__(self, index: tuple[int, int], pixel: P) -> None:
        x, y = index
        self._verify_index(x, y)
        self._check_pixel(pixel)
        self._data[x + self._width * y] = pixel

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Overwrite every cell with the model's default value, in place."""
        default = self._pixel_type()
        self._data[:] = itertools.repeat(default, len(self._data))

    def fill(self, pixel: P) -> None:
        self._check_pixel(pixel)
        self._data[:] = itertools.repeat(pixel, len(self._data))

    def __iter__(self) -> Iterator[P]:
        """Iterate pixels row-major: y outer, x inner."""
        return iter(self._data)

    def rows(self) -> Iterator[list[P]]:
        for y in range(self._height):
            start = self._width * y
            yield self._data[start : start + self._width]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return self.resolution == other.resolution and self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Frame({self._width}x{self._height}, {self._pixel_type.__name__})"

    # ------------------------------------------------------------------
    # Canonical RGB export
    # ------------------------------------------------------------------

    def to_array(self) -> np.ndarray:
        """Canonical RGB image, shape (height, width, 3), dtype uint8."""
        flat = np.fromiter(
            itertools.chain.from_iterable(p.to_rgb24() for p in self._data),
            dtype=np.uint8,
            count=len(self._data) * 3,
        )
        return flat.reshape(self._height, self._width, 3)

    def to_bytes(self) -> bytes:
        """Row-major R, G, B bytes with no padding."""
        return self.to_array().tobytes()
