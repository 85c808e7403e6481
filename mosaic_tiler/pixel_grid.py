"""Read-only rectangular pixel grids and cheap views over them.

A :class:`PixelGrid` wraps an ``(H, W, 4)`` uint8 RGBA array placed at an
integer origin. Sub-views are numpy slices flagged read-only, so they
never copy and never write into their parent. Colour transforms are
recorded on the view and applied lazily by :meth:`PixelGrid.at` or all at
once by :meth:`PixelGrid.rgba`.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

import numpy as np
from PIL import Image

from mosaic_tiler.color_utils import TRANSPARENT, Color

Point = tuple[int, int]


class ColorTransform(Protocol):
    def convert(self, color: tuple[int, ...]) -> Color: ...

    def convert_array(self, arr: np.ndarray) -> np.ndarray: ...


@dataclass(frozen=True)
class Rect:
    """Half-open integer rectangle ``[min_x, max_x) x [min_y, max_y)``."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @classmethod
    def from_size(cls, width: int, height: int, origin: Point = (0, 0)) -> Rect:
        x, y = origin
        return cls(x, y, x + width, y + height)

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    @property
    def size(self) -> Point:
        return (self.width, self.height)

    @property
    def origin(self) -> Point:
        return (self.min_x, self.min_y)

    @property
    def empty(self) -> bool:
        return self.min_x >= self.max_x or self.min_y >= self.max_y

    def intersect(self, other: Rect) -> Rect:
        """Largest rectangle inside both; ``Rect(0, 0, 0, 0)`` if none."""
        r = Rect(
            max(self.min_x, other.min_x),
            max(self.min_y, other.min_y),
            min(self.max_x, other.max_x),
            min(self.max_y, other.max_y),
        )
        return EMPTY_RECT if r.empty else r


EMPTY_RECT = Rect(0, 0, 0, 0)


def area(rect: Rect) -> int:
    return rect.width * rect.height


class PointIterator:
    """Row-major walk over ``rect`` from ``min`` to ``max`` inclusive.

    Iterating the same object twice restarts from the first point.
    """

    def __init__(self, rect: Rect, step: Point | None = None) -> None:
        dx, dy = step if step is not None else (1, 1)
        if dx <= 0 or dy <= 0:
            msg = f"Iteration step must be positive, got {(dx, dy)}"
            raise ValueError(msg)
        self.rect = rect
        self.step = (dx, dy)

    def __iter__(self) -> Iterator[Point]:
        dx, dy = self.step
        r = self.rect
        for y in range(r.min_y, r.max_y + 1, dy):
            for x in range(r.min_x, r.max_x + 1, dx):
                yield (x, y)


def iterate(rect: Rect, step: Point | None = None) -> PointIterator:
    return PointIterator(rect, step)


class PixelGrid:
    """A rectangle of RGBA colours, optionally seen through colour transforms."""

    __slots__ = ("_pixels", "_bounds", "_transforms")

    def __init__(
        self,
        pixels: np.ndarray,
        origin: Point = (0, 0),
        transforms: tuple[ColorTransform, ...] = (),
    ) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != 4 or pixels.dtype != np.uint8:
            msg = f"Expected an (H, W, 4) uint8 array, got {pixels.shape} {pixels.dtype}"
            raise ValueError(msg)
        h, w = pixels.shape[:2]
        self._pixels = pixels
        self._bounds = Rect.from_size(w, h, origin) if w and h else EMPTY_RECT
        self._transforms = transforms

    # -- constructors --------------------------------------------------

    @classmethod
    def empty(cls) -> PixelGrid:
        """The canonical zero-area grid."""
        return cls(np.zeros((0, 0, 4), dtype=np.uint8))

    @classmethod
    def new(cls, rect: Rect) -> PixelGrid:
        """A fully transparent grid covering *rect*."""
        if rect.empty:
            return cls.empty()
        return cls(np.zeros((rect.height, rect.width, 4), dtype=np.uint8), rect.origin)

    @classmethod
    def from_array(cls, arr: np.ndarray, origin: Point = (0, 0)) -> PixelGrid:
        """Copy an ``(H, W, 3)`` or ``(H, W, 4)`` array into an owned grid.

        RGB input is treated as fully opaque.
        """
        arr = np.asarray(arr)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            msg = f"Expected an (H, W, 3|4) array, got {arr.shape}"
            raise ValueError(msg)
        arr = np.clip(arr, 0, 255).astype(np.uint8)
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        return cls(np.ascontiguousarray(arr), origin)

    @classmethod
    def from_image(cls, img: Image.Image) -> PixelGrid:
        return cls(np.array(img.convert("RGBA"), dtype=np.uint8))

    # -- geometry ------------------------------------------------------

    @property
    def bounds(self) -> Rect:
        return self._bounds

    @property
    def width(self) -> int:
        return self._bounds.width

    @property
    def height(self) -> int:
        return self._bounds.height

    @property
    def size(self) -> Point:
        return self._bounds.size

    @property
    def is_empty(self) -> bool:
        return self._bounds.empty

    @property
    def pixels(self) -> np.ndarray:
        """Backing array, untransformed; writable only for owned grids."""
        return self._pixels

    def __repr__(self) -> str:
        b = self._bounds
        return (
            f"PixelGrid(({b.min_x}, {b.min_y})-({b.max_x}, {b.max_y}), "
            f"transforms={len(self._transforms)})"
        )

    # -- pixel access --------------------------------------------------

    def at(self, x: int, y: int) -> Color:
        """Colour at ``(x, y)``; fully transparent outside the bounds."""
        b = self._bounds
        if not (b.min_x <= x < b.max_x and b.min_y <= y < b.max_y):
            return TRANSPARENT
        r, g, bl, a = self._pixels[y - b.min_y, x - b.min_x]
        c: Color = (int(r), int(g), int(bl), int(a))
        for t in self._transforms:
            c = t.convert(c)
        return c

    def rgba(self) -> np.ndarray:
        """Owned ``(H, W, 4)`` uint8 copy with every transform applied."""
        arr = self._pixels
        for t in self._transforms:
            arr = t.convert_array(arr)
        return np.array(arr, dtype=np.uint8, copy=True)

    def alpha(self) -> np.ndarray:
        return self.rgba()[..., 3]

    def to_image(self) -> Image.Image:
        if self.is_empty:
            return Image.new("RGBA", (0, 0))
        return Image.fromarray(self.rgba())

    # -- views ---------------------------------------------------------

    def sub_view(self, rect: Rect) -> PixelGrid:
        """Non-copying view of ``rect`` clipped to the bounds.

        An empty intersection yields :meth:`empty`.
        """
        r = rect.intersect(self._bounds)
        if r.empty:
            return PixelGrid.empty()
        b = self._bounds
        sliced = self._pixels[
            r.min_y - b.min_y:r.max_y - b.min_y,
            r.min_x - b.min_x:r.max_x - b.min_x,
        ].view()
        sliced.flags.writeable = False
        return PixelGrid(sliced, r.origin, self._transforms)

    def with_color_model(self, transform: ColorTransform) -> PixelGrid:
        """Non-copying view that applies *transform* after any existing ones."""
        view = self._pixels.view()
        view.flags.writeable = False
        return PixelGrid(view, self._bounds.origin, self._transforms + (transform,))

    def translated(self, origin: Point) -> PixelGrid:
        """Non-copying view of the same pixels placed at *origin*."""
        view = self._pixels.view()
        view.flags.writeable = False
        return PixelGrid(view, origin, self._transforms)


def intersect(a: PixelGrid, b: PixelGrid) -> bool:
    """True if some point has alpha > 0 in both grids."""
    rect = a.bounds.intersect(b.bounds)
    if rect.empty:
        return False
    alpha_a = a.sub_view(rect).alpha()
    alpha_b = b.sub_view(rect).alpha()
    return bool(np.any((alpha_a > 0) & (alpha_b > 0)))
