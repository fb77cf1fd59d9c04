"""
pixels/models.py
----------------
Pixel colour models. Every model converts to a canonical 8-bit RGB triplet
via ``to_rgb24()``, which is what gets streamed to the encoder.

HSL and HSV conversions follow the chroma-based formulas from
https://en.wikipedia.org/wiki/HSL_and_HSV ("HSL to RGB alternative" and
"HSV to RGB alternative").

Values are clamped into range on construction and never re-validated
afterwards, so conversion cannot fail.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

RGB24 = tuple[int, int, int]


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* into [lo, hi]; NaN maps to *lo*."""
    if math.isnan(value):
        return lo
    return max(lo, min(value, hi))


def unit_to_byte(value: float) -> int:
    """Convert a [0, 1] channel to 0..255, rounding half up.

    The clamp is applied even for in-range input to absorb float error.
    """
    return int(math.floor(clamp(value * 255.0, 0.0, 255.0) + 0.5))


class Pixel(ABC):
    """A colour sample that can be emitted as canonical RGB bytes."""

    @abstractmethod
    def to_rgb24(self) -> RGB24:
        """Return the ``(r, g, b)`` byte triplet for this colour."""


# ---------------------------------------------------------------------------
# RGB
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rgb(Pixel):
    """8-bit RGB, the canonical representation."""

    r: int = 0
    g: int = 0
    b: int = 0

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            object.__setattr__(self, name, int(clamp(getattr(self, name), 0, 255)))

    @classmethod
    def from_hex(cls, hex_color: str) -> "Rgb":
        """Parse ``#RRGGBB`` (leading ``#`` optional)."""
        digits = hex_color.lstrip("#")
        if len(digits) != 6:
            raise ValueError(f"Invalid HEX color format: {hex_color!r}")
        try:
            r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        except ValueError as exc:
            raise ValueError(f"Invalid HEX color format: {hex_color!r}") from exc
        return cls(r, g, b)

    def to_rgb24(self) -> RGB24:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"


# ---------------------------------------------------------------------------
# Hue-based models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _UnitTriplet(Pixel):
    """Three channels stored as fractions in [0, 1]."""

    def __post_init__(self) -> None:
        for name in self.__dataclass_fields__:
            object.__setattr__(self, name, clamp(float(getattr(self, name)), 0.0, 1.0))


@dataclass(frozen=True)
class Hsl(_UnitTriplet):
    """Hue / saturation / lightness, each stored as a fraction in [0, 1].

    ``h`` is hue/360, ``s`` saturation/100 and ``l`` lightness/100.
    """

    h: float = 0.0
    s: float = 0.0
    l: float = 0.0  # noqa: E741

    @classmethod
    def from_ints(cls, hue: int, saturation: int, lightness: int) -> "Hsl":
        """Build from degrees (0-360) and percentages (0-100)."""
        return cls(
            clamp(hue, 0, 360) / 360.0,
            clamp(saturation, 0, 100) / 100.0,
            clamp(lightness, 0, 100) / 100.0,
        )

    @classmethod
    def from_floats(cls, h: float, s: float, l: float) -> "Hsl":  # noqa: E741
        return cls(h, s, l)

    def to_rgb24(self) -> RGB24:
        hue = self.h * 360.0
        a = self.s * min(self.l, 1.0 - self.l)

        def channel(n: float) -> int:
            k = (n + hue / 30.0) % 12.0
            return unit_to_byte(self.l - a * clamp(min(k - 3.0, 9.0 - k), -1.0, 1.0))

        return (channel(0), channel(8), channel(4))


@dataclass(frozen=True)
class Hsv(_UnitTriplet):
    """Hue / saturation / value, each stored as a fraction in [0, 1]."""

    h: float = 0.0
    s: float = 0.0
    v: float = 0.0

    @classmethod
    def from_ints(cls, hue: int, saturation: int, value: int) -> "Hsv":
        """Build from degrees (0-360) and percentages (0-100)."""
        return cls(
            clamp(hue, 0, 360) / 360.0,
            clamp(saturation, 0, 100) / 100.0,
            clamp(value, 0, 100) / 100.0,
        )

    @classmethod
    def from_floats(cls, h: float, s: float, v: float) -> "Hsv":
        return cls(h, s, v)

    def to_rgb24(self) -> RGB24:
        hue = self.h * 360.0

        def channel(n: float) -> int:
            k = (n + hue / 60.0) % 6.0
            return unit_to_byte(self.v * (1.0 - self.s * clamp(min(k, 4.0 - k), 0.0, 1.0)))

        return (channel(5), channel(3), channel(1))


PIXEL_MODELS: dict[str, type[Pixel]] = {
    "rgb": Rgb,
    "hsl": Hsl,
    "hsv": Hsv,
}
