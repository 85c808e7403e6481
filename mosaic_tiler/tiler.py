"""Tile a target image from a pool of tile images."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from mosaic_tiler.compositor import UpdateFn, compose_matches
from mosaic_tiler.config import TileConfig
from mosaic_tiler.errors import EmptyInputError
from mosaic_tiler.matcher import compute_matches
from mosaic_tiler.permute import permute
from mosaic_tiler.pixel_grid import PixelGrid

logger = logging.getLogger(__name__)


def tile(
    target: PixelGrid,
    tiles: Sequence[PixelGrid],
    config: TileConfig | None = None,
    on_update: UpdateFn | None = None,
    max_workers: int | None = None,
) -> PixelGrid:
    """Rebuild *target* out of variants of *tiles*.

    Args:
        target:      Image to reproduce.
        tiles:       Candidate tile images.
        config:      Grid shift, overlap policy and tile permutations.
        on_update:   Called with the canvas after every placed tile.
        max_workers: Thread-pool size for the parallel phases.

    Returns:
        A new grid with the bounds of *target*.

    Raises:
        EmptyInputError: *tiles* is empty.
    """
    if not tiles:
        msg = "No tiles to match against"
        raise EmptyInputError(msg)
    cfg = config or TileConfig()

    logger.info("Computing tiles permutations ...")
    t0 = time.perf_counter()
    perms = permute(tiles, cfg.permute, max_workers=max_workers)
    logger.info(
        "Using %d tiles permutations  (%.1f s)", len(perms), time.perf_counter() - t0,
    )

    logger.info("Computing tiles matches ...")
    t0 = time.perf_counter()
    matches = compute_matches(target, perms, cfg.grid_shift, max_workers=max_workers)
    logger.info(
        "Computed tiles matching in %d locations  (%.1f s)",
        len(matches), time.perf_counter() - t0,
    )

    logger.info("Composing output ...")
    return compose_matches(target.bounds, matches, cfg.overlap, on_update)
