"""Colour distance and per-pixel colour transforms.

Colours are straight (non-premultiplied) 8-bit RGBA tuples. Every
transform works on a single colour (:meth:`convert`) and on a whole
``(..., 4)`` uint8 array (:meth:`convert_array`) with identical results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

Color = tuple[int, int, int, int]

TRANSPARENT: Color = (0, 0, 0, 0)

# Largest possible squared RGB distance.
MAX_DIST = 255.0 * 255.0 * 3


def to_rgba(color: tuple[int, ...] | np.ndarray) -> Color:
    """Project an RGB or RGBA colour onto a canonical 8-bit RGBA tuple."""
    values = [int(v) for v in color]
    if len(values) == 3:
        values.append(255)
    if len(values) != 4:
        msg = f"Expected an RGB or RGBA colour, got {color!r}"
        raise ValueError(msg)
    r, g, b, a = (min(255, max(0, v)) for v in values)
    return (r, g, b, a)


def distance(c1: tuple[int, ...], c2: tuple[int, ...]) -> float:
    """Distance between two colours in ``[0, 1]``.

    Two fully transparent colours are identical; a fully transparent
    colour never matches an opaque one. Otherwise the squared RGB
    difference is normalised and alpha is ignored.

    This is a cheap Euclidean RGB metric and is not perceptually uniform.
    """
    r1, g1, b1, a1 = to_rgba(c1)
    r2, g2, b2, a2 = to_rgba(c2)

    if a1 == 0 and a2 == 0:
        return 0.0
    if a1 == 0 or a2 == 0:
        return 1.0

    dr = r1 - r2
    dg = g1 - g2
    db = b1 - b2
    return (dr * dr + dg * dg + db * db) / MAX_DIST


@dataclass(frozen=True)
class Quantize:
    """Snap every channel (alpha included) onto a grid of *levels* steps.

    ``levels == 0`` leaves colours untouched.
    """

    levels: int

    def __post_init__(self) -> None:
        if not 0 <= self.levels <= 255:
            msg = f"Quantize levels must be in [0, 255], got {self.levels}"
            raise ValueError(msg)

    def _channel(self, v: int) -> int:
        q = self.levels
        return int(math.floor(v * q / 255 + 0.5) * 255 / q)

    def convert(self, color: tuple[int, ...]) -> Color:
        rgba = to_rgba(color)
        if self.levels < 1:
            return rgba
        r, g, b, a = (self._channel(v) for v in rgba)
        return (r, g, b, a)

    def convert_array(self, arr: np.ndarray) -> np.ndarray:
        if self.levels < 1:
            return arr
        q = float(self.levels)
        steps = np.floor(arr.astype(np.float64) * q / 255.0 + 0.5)
        return np.trunc(steps * 255.0 / q).astype(np.uint8)


@dataclass(frozen=True)
class Scale:
    """Multiply R, G and B by independent factors in ``[0, 1]``."""

    r: float = 1.0
    g: float = 1.0
    b: float = 1.0

    def __post_init__(self) -> None:
        for name, f in (("r", self.r), ("g", self.g), ("b", self.b)):
            if not 0.0 <= f <= 1.0:
                msg = f"Scale factor {name} must be in [0, 1], got {f}"
                raise ValueError(msg)

    def convert(self, color: tuple[int, ...]) -> Color:
        r, g, b, a = to_rgba(color)
        return (int(r * self.r), int(g * self.g), int(b * self.b), a)

    def convert_array(self, arr: np.ndarray) -> np.ndarray:
        factors = np.array([self.r, self.g, self.b, 1.0], dtype=np.float64)
        return np.trunc(arr.astype(np.float64) * factors).astype(np.uint8)
