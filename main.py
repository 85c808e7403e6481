#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

    python main.py tile photo.jpg tiles/ --out tiled.png

Or use the full CLI:

    python -m mosaic_tiler.cli tile --help
    python -m mosaic_tiler.cli permute tiles/ --colors 3 --rotate 0,0.25
"""

from mosaic_tiler.cli import app

if __name__ == "__main__":
    app()
