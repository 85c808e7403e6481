"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from mosaic_tiler.config import (
    PermuteConfig,
    TileConfig,
    parse_colors,
    parse_floats,
    parse_shift,
)
from mosaic_tiler.errors import EmptyInputError, MosaicError
from mosaic_tiler.image_io import load_image, load_tiles, save_image
from mosaic_tiler.matcher import group_by_size
from mosaic_tiler.permute import permute
from mosaic_tiler.pixel_grid import PixelGrid
from mosaic_tiler.tiler import tile as tile_image

app = typer.Typer(
    name="mosaic-tiler",
    help="Rebuild an image out of many small tile images.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()

# Log a progress line every this many placed tiles.
PROGRESS_EVERY = 500


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _permute_config(
    colors: str | None,
    scale: str | None,
    rotate: str | None,
) -> PermuteConfig:
    num_r, num_g, num_b = parse_colors(colors) if colors else (0, 0, 0)
    return PermuteConfig(
        num_r=num_r,
        num_g=num_g,
        num_b=num_b,
        scales=parse_floats("scale", scale) if scale else (),
        rotations=parse_floats("rotate", rotate) if rotate else (),
    )


def _fail(exc: MosaicError) -> typer.Exit:
    console.print(f"[bold red]Error:[/bold red] {exc}")
    return typer.Exit(1)


# Defaults come from TileConfig - single source of truth
_DEFAULTS = TileConfig()


# -- tile command ------------------------------------------------------

@app.command()
def tile(
    target: Path = typer.Argument(..., help="Image to tile"),
    tiles: Path = typer.Argument(..., help="Tile image, or folder of tile images"),
    out: Path = typer.Option(_DEFAULTS.out_path, "--out", "-o", help="Destination PNG"),
    shift: str | None = typer.Option(
        None, "--shift",
        help="Grid step 'x,y'. Defaults to each tile's size",
    ),
    colors: str | None = typer.Option(
        None, "--colors",
        help="Colour scalings per channel: 'n' or 'r,g,b'",
    ),
    scale: str | None = typer.Option(
        None, "--scale", help="Comma-separated tile scale factors",
    ),
    rotate: str | None = typer.Option(
        None, "--rotate", help="Comma-separated rotations in [0, 1]",
    ),
    overlap: bool = typer.Option(
        _DEFAULTS.overlap, "--overlap/--no-overlap", help="Let tiles overlap",
    ),
    workers: int | None = typer.Option(
        None, "--workers", "-w", help="Worker threads (default: automatic)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Tile TARGET with the images found in TILES."""
    _setup_logging(verbose)
    logger = logging.getLogger("mosaic_tiler")

    # Validate every flag before touching any image.
    try:
        cfg = TileConfig(
            shift=parse_shift(shift) if shift else None,
            overlap=overlap,
            permute=_permute_config(colors, scale, rotate),
            out_path=out,
        )
    except MosaicError as exc:
        raise _fail(exc) from exc

    t_total = time.perf_counter()
    try:
        with console.status("Loading images ..."):
            img = load_image(target)
            tile_grids = load_tiles(tiles, cfg.SUPPORTED_EXTENSIONS)
        logger.info("Loaded %d tiles", len(tile_grids))
        if not tile_grids:
            msg = f"No tiles found in {tiles}"
            raise EmptyInputError(msg)

        console.print(Panel.fit(
            f"[bold]MOSAIC TILER[/bold]\n"
            f"Target: {target.name} ({img.width}x{img.height})  |  Tiles: {len(tile_grids)}\n"
            f"Shift: {cfg.shift or 'tile size'}  |  Overlap: {cfg.overlap}\n"
            f"Colours: {cfg.permute.num_r},{cfg.permute.num_g},{cfg.permute.num_b}"
            f"  |  Scales: {list(cfg.permute.resolved().scales)}"
            f"  |  Rotations: {list(cfg.permute.resolved().rotations)}",
            border_style="cyan",
        ))

        placed = 0

        def _on_update(_canvas: PixelGrid) -> None:
            nonlocal placed
            placed += 1
            if placed % PROGRESS_EVERY == 0:
                logger.debug("  placed %d tiles", placed)

        result = tile_image(img, tile_grids, cfg, _on_update, max_workers=workers)

        save_image(result, out)
    except MosaicError as exc:
        raise _fail(exc) from exc

    elapsed = time.perf_counter() - t_total
    console.print(
        f"[green]✓[/green] Saved to {out}  "
        f"[dim]{placed} tiles placed  time={elapsed:.1f}s[/dim]"
    )


# -- permute command ---------------------------------------------------

@app.command(name="permute")
def permute_command(
    tiles: Path = typer.Argument(..., help="Tile image, or folder of tile images"),
    colors: str | None = typer.Option(None, "--colors"),
    scale: str | None = typer.Option(None, "--scale"),
    rotate: str | None = typer.Option(None, "--rotate"),
    workers: int | None = typer.Option(None, "--workers", "-w"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Count the tile variants per size class, without tiling anything."""
    _setup_logging(verbose)

    try:
        permute_cfg = _permute_config(colors, scale, rotate)
        tile_grids = load_tiles(tiles)
        modes = permute(tile_grids, permute_cfg, max_workers=workers)
    except MosaicError as exc:
        raise _fail(exc) from exc

    table = Table(title=f"{len(modes)} variants from {len(tile_grids)} tiles")
    table.add_column("Size", justify="right")
    table.add_column("Variants", justify="right")
    for (w, h), group in sorted(group_by_size(modes).items()):
        table.add_row(f"{w}x{h}", str(len(group)))
    console.print(table)


if __name__ == "__main__":
    app()
