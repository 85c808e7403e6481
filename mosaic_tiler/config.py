"""Centralised configuration via frozen dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from mosaic_tiler.errors import InvalidConfigurationError


@dataclass(frozen=True)
class PermuteConfig:
    """Which variants to generate from every tile.

    Attributes:
        num_r, num_g, num_b: Number of scalings of each colour channel
                             (0 or 1 = original colour only).
        scales:              Scale factors; empty means ``(1.0,)``.
        rotations:           Rotations in ``[0, 1]`` (1 = 360 degrees);
                             empty means ``(0.0,)``.
    """

    num_r: int = 0
    num_g: int = 0
    num_b: int = 0
    scales: tuple[float, ...] = ()
    rotations: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        for name in ("num_r", "num_g", "num_b"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise InvalidConfigurationError(name, value, "must be in [0, 255]")
        for s in self.scales:
            if s <= 0:
                raise InvalidConfigurationError("scales", s, "must be positive")
        for r in self.rotations:
            if not 0 <= r <= 1:
                raise InvalidConfigurationError("rotations", r, "must be in [0, 1]")

    def resolved(self) -> PermuteConfig:
        """Copy with the identity scale/rotation filled in where empty."""
        return replace(
            self,
            scales=tuple(self.scales) or (1.0,),
            rotations=tuple(self.rotations) or (0.0,),
        )


@dataclass(frozen=True)
class TileConfig:
    """All tuneable parameters for a tiling run.

    Attributes:
        shift:    Grid step ``(x, y)``; ``None`` uses each tile size.
        overlap:  Let tiles paint over already placed tiles.
        permute:  Tile variants to generate.
        out_path: Destination of the CLI result.
    """

    shift: tuple[int, int] | None = None
    overlap: bool = False
    permute: PermuteConfig = field(default_factory=PermuteConfig)
    out_path: Path = field(default_factory=lambda: Path("tiled.png"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"}
    )

    def __post_init__(self) -> None:
        if self.shift is not None:
            _check_shift(self.shift, self.shift)

    @property
    def grid_shift(self) -> tuple[int, int] | None:
        """Shift with the ``(0, 0)`` spelling normalised to ``None``."""
        if self.shift is None or tuple(self.shift) == (0, 0):
            return None
        return self.shift


# -- flag parsing ------------------------------------------------------

def _check_shift(shift: tuple[int, int], value: object) -> None:
    x, y = shift
    if x < 0 or y < 0:
        raise InvalidConfigurationError("shift", value, "must not be negative")
    if (x == 0) != (y == 0):
        raise InvalidConfigurationError(
            "shift", value, "x and y must both be 0 or both be positive",
        )


def _split(field_name: str, s: str) -> list[str]:
    parts = [p.strip() for p in s.split(",")]
    if any(not p for p in parts):
        raise InvalidConfigurationError(field_name, s, "empty component")
    return parts


def parse_shift(s: str) -> tuple[int, int]:
    """Parse ``"x,y"``."""
    parts = _split("shift", s)
    if len(parts) != 2:
        raise InvalidConfigurationError("shift", s, "must be of the form x,y")
    try:
        x, y = (int(p) for p in parts)
    except ValueError as exc:
        raise InvalidConfigurationError("shift", s, "x and y must be integers") from exc
    _check_shift((x, y), s)
    return (x, y)


def parse_colors(s: str) -> tuple[int, int, int]:
    """Parse ``"n"`` (same for every channel) or ``"r,g,b"``."""
    parts = _split("colors", s)
    if len(parts) == 1:
        parts = parts * 3
    if len(parts) != 3:
        raise InvalidConfigurationError("colors", s, "must be of the form 'n' or 'r,g,b'")
    values = []
    for name, p in zip("rgb", parts, strict=True):
        try:
            n = int(p)
        except ValueError as exc:
            raise InvalidConfigurationError("colors", s, f"bad value for {name}: {p!r}") from exc
        if not 0 <= n <= 255:
            raise InvalidConfigurationError("colors", s, f"{name} must be in [0, 255]")
        values.append(n)
    r, g, b = values
    return (r, g, b)


def parse_floats(field_name: str, s: str) -> tuple[float, ...]:
    """Parse a comma-separated list of floats."""
    values = []
    for p in _split(field_name, s):
        try:
            values.append(float(p))
        except ValueError as exc:
            raise InvalidConfigurationError(field_name, s, f"bad float {p!r}") from exc
    return tuple(values)
