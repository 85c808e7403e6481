"""Paint matched tiles onto the output canvas."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

import numpy as np

from mosaic_tiler.matcher import Match
from mosaic_tiler.pixel_grid import PixelGrid, Rect, area, intersect

logger = logging.getLogger(__name__)

UpdateFn = Callable[[PixelGrid], None]


def sort_matches(matches: Sequence[Match], overlap: bool) -> list[Match]:
    """Order matches for painting.

    Without overlap the closest matches go first so they claim space.
    With overlap the most distant go first so better ones end up on top.
    Equal distances put the larger tile first.
    """
    sign = -1 if overlap else 1
    return sorted(
        matches,
        key=lambda m: (sign * m.distance, -area(m.tile.image.bounds)),
    )


def match_intersects(match: Match, canvas: PixelGrid) -> bool:
    """Would the tile cover any already painted pixel of *canvas*?"""
    loc = match.location
    patch = canvas.sub_view(loc)
    patch = patch.translated(
        (patch.bounds.min_x - loc.min_x, patch.bounds.min_y - loc.min_y),
    )
    return intersect(patch, match.tile.image)


def draw_over(canvas: np.ndarray, canvas_rect: Rect, tile: PixelGrid, location: Rect) -> None:
    """Source-over blend *tile* into *canvas* at *location*, in place.

    The tile's top-left pixel lands on ``location``'s top-left corner;
    whatever falls outside ``location`` or the canvas is dropped.
    """
    dst_rect = location.intersect(canvas_rect).intersect(
        Rect.from_size(tile.width, tile.height, location.origin),
    )
    if dst_rect.empty:
        return

    sx, sy = dst_rect.min_x - location.min_x, dst_rect.min_y - location.min_y
    src = tile.rgba()[sy:sy + dst_rect.height, sx:sx + dst_rect.width].astype(np.float64)
    dx, dy = dst_rect.min_x - canvas_rect.min_x, dst_rect.min_y - canvas_rect.min_y
    region = canvas[dy:dy + dst_rect.height, dx:dx + dst_rect.width]
    dst = region.astype(np.float64)

    sa = src[..., 3:4] / 255.0
    da = dst[..., 3:4] / 255.0
    out_a = sa + da * (1.0 - sa)
    weighted = src[..., :3] * sa + dst[..., :3] * da * (1.0 - sa)
    out_rgb = np.divide(weighted, out_a, out=np.zeros_like(weighted), where=out_a > 0)

    region[..., :3] = np.clip(np.rint(out_rgb), 0, 255).astype(np.uint8)
    region[..., 3] = np.clip(np.rint(out_a[..., 0] * 255.0), 0, 255).astype(np.uint8)


def compose_matches(
    rect: Rect,
    matches: Sequence[Match],
    overlap: bool,
    on_update: UpdateFn | None = None,
) -> PixelGrid:
    """Paint *matches* onto a transparent canvas covering *rect*.

    Args:
        rect:      Canvas bounds (the target image bounds).
        matches:   Matches from :func:`mosaic_tiler.matcher.compute_matches`.
        overlap:   When false, a match touching painted pixels is skipped.
        on_update: Called with the canvas after every placement.

    Returns:
        The composed canvas.
    """
    ordered = sort_matches(matches, overlap)
    out = PixelGrid.new(rect)
    canvas = out.pixels

    placed = 0
    t0 = time.perf_counter()
    for match in ordered:
        if not overlap and match_intersects(match, out):
            continue
        draw_over(canvas, out.bounds, match.tile.image, match.location)
        placed += 1
        if on_update is not None:
            on_update(out)

    logger.debug(
        "Placed %d of %d matches  (%.1f s)",
        placed, len(ordered), time.perf_counter() - t0,
    )
    return out
