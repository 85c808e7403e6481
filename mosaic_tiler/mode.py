"""Dominant-colour signatures ("modes") of image regions."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

import numpy as np
from PIL import Image

from mosaic_tiler.color_utils import TRANSPARENT, Color, Quantize, distance
from mosaic_tiler.pixel_grid import PixelGrid

# Bucket granularity used when counting colours. Unrelated to the
# user-facing colour permutations.
MODE_QUANTIZE_LEVELS = 32

_QUANT = Quantize(MODE_QUANTIZE_LEVELS)


@dataclass(frozen=True)
class Mode:
    """An image together with its most common (quantised) colour.

    Attributes:
        image:     The region or tile variant the mode describes.
        color:     Dominant quantised RGBA colour.
        frequency: Share of counted pixels that fall in the dominant bucket.
        total:     Number of counted pixels (0 means degenerate).
    """

    image: PixelGrid
    color: Color
    frequency: float
    total: int

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    @property
    def degenerate(self) -> bool:
        return self.total == 0

    def distance_to(self, other: Mode) -> float:
        """Colour distance weighted by the confidence of both modes.

        Low-frequency modes are penalised; the result may exceed 1.
        """
        if self.degenerate or other.degenerate:
            return math.inf
        return distance(self.color, other.color) / self.frequency / other.frequency

    def scale(self, factor: float) -> Mode:
        return replace(self, image=scale_image(self.image, factor))

    def rotate(self, fraction: float) -> Mode:
        return replace(self, image=rotate_image(self.image, fraction))


def compute_mode(grid: PixelGrid, include_transparent: bool) -> Mode:
    """Find the dominant colour of *grid*.

    Pixels are quantised before counting. Fully transparent pixels are
    skipped, or all counted in a single transparent bucket when
    *include_transparent* is set. On equal counts the colour that reached
    the count first in row-major order wins.
    """
    if grid.is_empty:
        msg = f"Cannot compute the mode of an empty grid {grid!r}"
        raise ValueError(msg)

    pixels = _QUANT.convert_array(grid.rgba()).reshape(-1, 4)
    opaque = pixels[:, 3] > 0
    if include_transparent:
        pixels = pixels.copy()
        pixels[~opaque] = 0
    else:
        pixels = pixels[opaque]

    total = len(pixels)
    if total == 0:
        return Mode(image=grid, color=TRANSPARENT, frequency=0.0, total=0)

    keys = pixels.astype(np.uint32)
    keys = (keys[:, 0] << 24) | (keys[:, 1] << 16) | (keys[:, 2] << 8) | keys[:, 3]
    uniq, inverse, counts = np.unique(keys, return_inverse=True, return_counts=True)
    inverse = inverse.reshape(-1)

    best = int(counts.max())
    tied = np.flatnonzero(counts == best)
    if len(tied) == 1:
        winner = int(tied[0])
    else:
        # The bucket whose last hit comes earliest reached the maximum first.
        last_hit = [np.flatnonzero(inverse == t)[-1] for t in tied]
        winner = int(tied[int(np.argmin(last_hit))])

    key = int(uniq[winner])
    color: Color = ((key >> 24) & 0xFF, (key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)
    return Mode(image=grid, color=color, frequency=best / total, total=total)


def scale_image(grid: PixelGrid, factor: float) -> PixelGrid:
    """Resample *grid* bilinearly to ``ceil(factor * size)``."""
    if factor <= 0:
        msg = f"Scale factor must be positive, got {factor}"
        raise ValueError(msg)
    if factor == 1:
        return PixelGrid(grid.rgba())
    w, h = grid.size
    new_size = (max(1, math.ceil(factor * w)), max(1, math.ceil(factor * h)))
    img = grid.to_image().resize(new_size, Image.BILINEAR)
    return PixelGrid.from_image(img)


def rotated_size(width: int, height: int, fraction: float) -> tuple[int, int]:
    """Bounding box of a ``width x height`` image rotated by ``fraction * 360``."""
    angle = 2 * math.pi * fraction
    cos, sin = abs(math.cos(angle)), abs(math.sin(angle))
    new_w = math.ceil(round(width * cos + height * sin, 6))
    new_h = math.ceil(round(width * sin + height * cos, 6))
    return max(1, new_w), max(1, new_h)


def rotate_image(grid: PixelGrid, fraction: float) -> PixelGrid:
    """Rotate *grid* clockwise by ``fraction * 360`` degrees about its centre.

    The canvas grows to the rotated bounding box; uncovered pixels are
    fully transparent.
    """
    if float(fraction).is_integer():
        return PixelGrid(grid.rgba())

    w, h = grid.size
    new_w, new_h = rotated_size(w, h, fraction)
    angle = 2 * math.pi * fraction
    cos, sin = math.cos(angle), math.sin(angle)

    # Affine map from output coordinates back to input coordinates.
    cx, cy = w / 2, h / 2
    ncx, ncy = new_w / 2, new_h / 2
    data = (
        cos, sin, cx - cos * ncx - sin * ncy,
        -sin, cos, cy + sin * ncx - cos * ncy,
    )
    img = grid.to_image().transform(
        (new_w, new_h),
        Image.AFFINE,
        data,
        resample=Image.BILINEAR,
        fillcolor=(0, 0, 0, 0),
    )
    return PixelGrid.from_image(img)
