"""Exception hierarchy shared by the pipeline and the CLI."""

from __future__ import annotations

from pathlib import Path


class MosaicError(Exception):
    """Base class for every error raised by :mod:`mosaic_tiler`."""


class InvalidConfigurationError(MosaicError, ValueError):
    """A user-supplied option could not be parsed or is out of range."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Bad value for {field} ({value!r}): {reason}")


class EmptyInputError(MosaicError, ValueError):
    """There is nothing to match against."""


class ImageIOError(MosaicError, OSError):
    """Decoding, encoding or listing an image path failed."""

    def __init__(self, path: str | Path, reason: object) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {reason}")
