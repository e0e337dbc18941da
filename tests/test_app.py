"""Tests for tileforge.app – command-line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from tileforge.app import main, render_grid
from tileforge.core.grid import TileGrid, TileType


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "catalog.yaml"
    path.write_text(
        yaml.dump({"overworld_count": 2, "nether_count": 1, "rows": 4, "storage_key": "cli"}),
        encoding="utf-8",
    )
    return path


def _run(tmp_path: Path, config_path: Path, *args: str) -> int:
    return main(["--config", str(config_path), "--data-dir", str(tmp_path / "data"), *args])


class TestRenderGrid:
    def test_glyphs(self):
        grid = TileGrid(3, 2)
        grid.set(0, 1, TileType.SOLID)
        grid.set(2, 1, TileType.NETHER)
        assert render_grid(grid) == "...\n#.%"


class TestMain:
    def test_list(self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str]):
        assert _run(tmp_path, config_path, "list") == 0
        out = capsys.readouterr().out
        assert "Story 1" in out
        assert "Nether 1" in out
        assert (tmp_path / "data" / "cli.json").exists()

    def test_list_category_filter(self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str]):
        _run(tmp_path, config_path, "list", "--category", "nether")
        out = capsys.readouterr().out
        assert "Nether 1" in out
        assert "Story 1" not in out

    def test_show(self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str]):
        assert _run(tmp_path, config_path, "show", "3") == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 4
        assert set("".join(lines)) <= {".", "%"}

    def test_show_unknown(self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str]):
        assert _run(tmp_path, config_path, "show", "99") == 1
        assert "No level with id 99" in capsys.readouterr().err

    def test_complete_unlocks_freeplay_and_persists(self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str]):
        assert _run(tmp_path, config_path, "complete", "3", "5", "--time", "41.5") == 0
        assert "Freeplay unlocked!" in capsys.readouterr().out
        _run(tmp_path, config_path, "stats")
        out = capsys.readouterr().out
        assert "Completed: 1/3" in out
        assert "Freeplay: unlocked" in out

    def test_stars(self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str]):
        assert _run(tmp_path, config_path, "stars", "1", "2") == 0
        assert "Story 1: 2 star(s), completed=False" in capsys.readouterr().out

    def test_nan_stars_does_not_crash(self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str]):
        assert _run(tmp_path, config_path, "stars", "1", "nan") == 2
        assert "Story 1: 0 star(s)" in capsys.readouterr().out

    def test_infinite_stars_clamped(self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str]):
        assert _run(tmp_path, config_path, "complete", "1", "inf") == 0
        assert "Story 1: 5 star(s), completed=True" in capsys.readouterr().out

    def test_complete_unknown(self, tmp_path: Path, config_path: Path):
        assert _run(tmp_path, config_path, "complete", "42", "3") == 1
