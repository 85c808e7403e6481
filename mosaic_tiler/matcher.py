"""Match grid cells of the target image against tile variants."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from mosaic_tiler.mode import Mode, compute_mode
from mosaic_tiler.pixel_grid import PixelGrid, Rect, iterate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Match:
    """A tile variant assigned to an area of the target image.

    Attributes:
        tile:     The matched tile variant.
        location: Target-image area the tile is placed on.
        distance: Mode distance between the area and the tile.
    """

    tile: Mode
    location: Rect
    distance: float


def grid(
    target: PixelGrid,
    size: tuple[int, int],
    shift: tuple[int, int] | None = None,
) -> list[PixelGrid]:
    """Cells of *size* over *target*, one per grid origin.

    Cells are clipped at the target edges and empty ones are dropped.
    """
    step = shift or size
    w, h = size
    cells = []
    for x, y in iterate(target.bounds, step):
        cell = target.sub_view(Rect.from_size(w, h, (x, y)))
        if not cell.is_empty:
            cells.append(cell)
    return cells


def closest_mode(
    mode: Mode,
    candidates: Sequence[Mode],
) -> tuple[Mode, float] | None:
    """Nearest candidate to *mode* and its distance.

    Returns ``None`` for a transparent-dominated *mode* or when no
    candidate is at a finite distance. The first minimum wins.
    """
    if mode.color[3] == 0:
        return None

    best: Mode | None = None
    best_dist = float("inf")
    for other in candidates:
        dist = mode.distance_to(other)
        if dist < best_dist:
            best_dist = dist
            best = other
    if best is None:
        return None
    return best, best_dist


def group_by_size(modes: Sequence[Mode]) -> dict[tuple[int, int], list[Mode]]:
    """Bucket modes by exact pixel size, preserving their order."""
    groups: dict[tuple[int, int], list[Mode]] = {}
    for mode in modes:
        groups.setdefault(mode.size, []).append(mode)
    return groups


def _match_size_class(
    target: PixelGrid,
    size: tuple[int, int],
    candidates: list[Mode],
    shift: tuple[int, int] | None,
) -> list[Match]:
    matches = []
    for cell in grid(target, size, shift):
        found = closest_mode(compute_mode(cell, include_transparent=True), candidates)
        if found is None:
            continue
        tile, dist = found
        matches.append(Match(tile=tile, location=cell.bounds, distance=dist))
    return matches


def compute_matches(
    target: PixelGrid,
    modes: Sequence[Mode],
    shift: tuple[int, int] | None = None,
    max_workers: int | None = None,
) -> list[Match]:
    """One match per non-transparent grid cell, for every tile size class.

    Args:
        target:      Image to tile.
        modes:       Tile variants (see :func:`mosaic_tiler.permute.permute`).
        shift:       Grid step; ``None`` or ``(0, 0)`` uses the tile size.
        max_workers: Thread-pool size (``None`` = executor default).

    Returns:
        Matches of all size classes, concatenated.
    """
    if shift is not None and tuple(shift) == (0, 0):
        shift = None

    groups = group_by_size([m for m in modes if not m.degenerate])
    logger.debug("Matching %d size classes", len(groups))

    t0 = time.perf_counter()
    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        results = list(ex.map(
            lambda item: _match_size_class(target, item[0], item[1], shift),
            groups.items(),
        ))

    matches = [m for size_matches in results for m in size_matches]
    logger.debug("Matching done  (%.1f s)", time.perf_counter() - t0)
    return matches
