"""Colour / scale / rotation variants of the tile images."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from mosaic_tiler.color_utils import Scale
from mosaic_tiler.config import PermuteConfig
from mosaic_tiler.mode import Mode, compute_mode
from mosaic_tiler.pixel_grid import PixelGrid

logger = logging.getLogger(__name__)


def iterate_steps(steps: int) -> list[float]:
    """*steps* evenly spaced factors in ``[0, 1]``; ``[1.0]`` for 0 or 1."""
    if steps <= 1:
        return [1.0]
    step = 1 / (steps - 1)
    return [i * step for i in range(steps)]


def permute_colors(nr: int, ng: int, nb: int) -> list[Scale]:
    """All colour scalings, blue varying fastest."""
    return [
        Scale(r, g, b)
        for r in iterate_steps(nr)
        for g in iterate_steps(ng)
        for b in iterate_steps(nb)
    ]


def permute_image(
    grid: PixelGrid,
    colors: Sequence[Scale],
    scales: Sequence[float],
    rotations: Sequence[float],
) -> list[Mode]:
    """Every variant of one tile, colour outermost and rotation innermost.

    Empty tiles produce no variants.
    """
    if grid.is_empty:
        return []
    perms: list[Mode] = []
    for color in colors:
        colored = compute_mode(grid.with_color_model(color), include_transparent=False)
        for scale in scales:
            scaled = colored.scale(scale)
            for rotation in rotations:
                perms.append(scaled.rotate(rotation))
    return perms


def permute(
    tiles: Sequence[PixelGrid],
    config: PermuteConfig | None = None,
    max_workers: int | None = None,
) -> list[Mode]:
    """Expand every tile into its permutations, one worker per tile.

    Each worker returns its own list; lists are concatenated in tile order
    once all workers are done.

    Args:
        tiles:       Candidate tile images.
        config:      Colour levels, scales and rotations to generate.
        max_workers: Thread-pool size (``None`` = executor default).

    Returns:
        Flat list of tile-variant modes.
    """
    cfg = (config or PermuteConfig()).resolved()
    colors = permute_colors(cfg.num_r, cfg.num_g, cfg.num_b)
    logger.debug(
        "Permuting %d tiles x %d colours x %d scales x %d rotations",
        len(tiles), len(colors), len(cfg.scales), len(cfg.rotations),
    )

    t0 = time.perf_counter()
    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        results = list(ex.map(
            lambda tile: permute_image(tile, colors, cfg.scales, cfg.rotations),
            tiles,
        ))

    out = [mode for perms in results for mode in perms]
    logger.debug("Permutations ready  (%.1f s)", time.perf_counter() - t0)
    return out
