"""
Mosaic Tiler
============

Rebuild a target image out of many small tile images. Every tile is
expanded into colour / scale / rotation variants, every grid cell of the
target is matched to the variant with the closest dominant colour, and
the winners are painted onto a fresh canvas.

- :func:`tile` runs the whole pipeline.
- :func:`permute` exposes the variant generation on its own.
"""

__version__ = "1.0.0"

from mosaic_tiler.color_utils import Quantize, Scale, distance
from mosaic_tiler.compositor import compose_matches
from mosaic_tiler.config import PermuteConfig, TileConfig
from mosaic_tiler.errors import (
    EmptyInputError,
    ImageIOError,
    InvalidConfigurationError,
    MosaicError,
)
from mosaic_tiler.image_io import load_image, load_tiles, save_image
from mosaic_tiler.matcher import Match, compute_matches
from mosaic_tiler.mode import Mode, compute_mode
from mosaic_tiler.permute import permute
from mosaic_tiler.pixel_grid import PixelGrid, Rect
from mosaic_tiler.tiler import tile

__all__ = [
    "EmptyInputError",
    "ImageIOError",
    "InvalidConfigurationError",
    "Match",
    "Mode",
    "MosaicError",
    "PermuteConfig",
    "PixelGrid",
    "Quantize",
    "Rect",
    "Scale",
    "TileConfig",
    "compose_matches",
    "compute_matches",
    "compute_mode",
    "distance",
    "load_image",
    "load_tiles",
    "permute",
    "save_image",
    "tile",
]
