"""Image loading, saving, and tile discovery."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from mosaic_tiler.config import TileConfig
from mosaic_tiler.errors import ImageIOError
from mosaic_tiler.pixel_grid import PixelGrid

logger = logging.getLogger(__name__)


def load_image(path: str | Path) -> PixelGrid:
    """Decode an image file into an RGBA grid.

    Raises:
        ImageIOError: The file is missing or not a readable image.
    """
    try:
        with Image.open(path) as img:
            return PixelGrid.from_image(img)
    except (OSError, UnidentifiedImageError) as exc:
        raise ImageIOError(path, exc) from exc


def save_image(grid: PixelGrid, path: str | Path) -> None:
    """Encode *grid* as a PNG file, creating missing parent folders."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        grid.to_image().save(path, format="PNG")
    except (OSError, ValueError) as exc:
        raise ImageIOError(path, exc) from exc


def collect_tile_paths(
    path: str | Path,
    extensions: Iterable[str] = TileConfig.SUPPORTED_EXTENSIONS,
) -> list[Path]:
    """A single tile file, or the matching files directly inside a folder."""
    path = Path(path)
    if not path.exists():
        raise ImageIOError(path, "no such file or directory")
    if path.is_file():
        return [path]
    exts = {e.lower() for e in extensions}
    return sorted(
        f for f in path.iterdir()
        if f.is_file() and f.suffix.lower() in exts
    )


def load_tiles(
    path: str | Path,
    extensions: Iterable[str] = TileConfig.SUPPORTED_EXTENSIONS,
) -> list[PixelGrid]:
    """Load every tile found by :func:`collect_tile_paths`."""
    paths = collect_tile_paths(path, extensions)
    tiles = [load_image(p) for p in paths]
    logger.debug("Loaded %d tiles from %s", len(tiles), path)
    return tiles
