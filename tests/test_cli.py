"""Smoke tests for the Typer CLI."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image
from typer.testing import CliRunner

from mosaic_tiler.cli import app

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path: Path) -> tuple[Path, Path]:
    target = tmp_path / "target.png"
    Image.new("RGB", (4, 4), (255, 0, 0)).save(target)

    tiles = tmp_path / "tiles"
    tiles.mkdir()
    Image.new("RGBA", (2, 2), (255, 0, 0, 255)).save(tiles / "red.png")
    Image.new("RGBA", (2, 2), (0, 0, 255, 255)).save(tiles / "blue.png")
    (tiles / "readme.txt").write_text("ignored")
    return target, tiles


class TestTileCommand:
    def test_writes_output(self, workspace: tuple[Path, Path], tmp_path: Path) -> None:
        target, tiles = workspace
        out = tmp_path / "out" / "tiled.png"
        result = runner.invoke(app, ["tile", str(target), str(tiles), "--out", str(out)])
        assert result.exit_code == 0, result.output
        assert out.exists()
        arr = np.array(Image.open(out).convert("RGBA"))
        assert arr.shape == (4, 4, 4)
        assert (arr == (255, 0, 0, 255)).all()

    def test_bad_shift_fails_fast(self, workspace: tuple[Path, Path], tmp_path: Path) -> None:
        target, tiles = workspace
        out = tmp_path / "tiled.png"
        result = runner.invoke(
            app, ["tile", str(target), str(tiles), "--out", str(out), "--shift", "a,b"],
        )
        assert result.exit_code == 1
        assert "shift" in result.output
        assert not out.exists()

    def test_single_zero_axis_shift_fails_fast(
        self, workspace: tuple[Path, Path], tmp_path: Path,
    ) -> None:
        target, tiles = workspace
        out = tmp_path / "tiled.png"
        result = runner.invoke(
            app, ["tile", str(target), str(tiles), "--out", str(out), "--shift", "0,1"],
        )
        assert result.exit_code == 1
        assert not isinstance(result.exception, ValueError)
        assert "shift" in result.output
        assert not out.exists()

    def test_output_under_a_file_is_reported(
        self, workspace: tuple[Path, Path], tmp_path: Path,
    ) -> None:
        target, tiles = workspace
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a folder")
        result = runner.invoke(
            app, ["tile", str(target), str(tiles), "--out", str(blocker / "o.png")],
        )
        assert result.exit_code == 1
        assert not isinstance(result.exception, OSError)
        assert "Error" in result.output

    def test_missing_target(self, workspace: tuple[Path, Path], tmp_path: Path) -> None:
        _, tiles = workspace
        result = runner.invoke(app, ["tile", str(tmp_path / "nope.png"), str(tiles)])
        assert result.exit_code == 1

    def test_no_tiles(self, workspace: tuple[Path, Path], tmp_path: Path) -> None:
        target, _ = workspace
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(
            app, ["tile", str(target), str(empty), "--out", str(tmp_path / "x.png")],
        )
        assert result.exit_code == 1
        assert "No tiles" in result.output


class TestPermuteCommand:
    def test_counts_variants(self, workspace: tuple[Path, Path]) -> None:
        _, tiles = workspace
        result = runner.invoke(
            app, ["permute", str(tiles), "--colors", "2", "--rotate", "0,0.25"],
        )
        assert result.exit_code == 0, result.output
        # 2 tiles x 8 colours x 1 scale x 2 rotations
        assert "32 variants" in result.output
