"""Tests for tileforge.core.grid – tile grid queries and records."""

from __future__ import annotations

import pytest

from tileforge.core.exceptions import LevelDecodeError
from tileforge.core.grid import Rect, TileGrid, TileRange, TileType


@pytest.fixture()
def grid() -> TileGrid:
    g = TileGrid(cols=10, rows=5, tile_size=32)
    g.set(2, 3, TileType.SOLID)
    g.set(7, 4, TileType.NETHER)
    return g


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_starts_empty(self):
        g = TileGrid(4, 3)
        assert g.count_solid() == 0
        assert g.tile_size == 64

    def test_world_size(self, grid: TileGrid):
        assert grid.world_width_pixels == 320
        assert grid.world_height_pixels == 160

    @pytest.mark.parametrize("cols, rows, size", [(0, 1, 8), (1, 0, 8), (1, 1, 0)])
    def test_rejects_non_positive_sizes(self, cols: int, rows: int, size: int):
        with pytest.raises(ValueError):
            TileGrid(cols, rows, size)


# ---------------------------------------------------------------------------
# get / set
# ---------------------------------------------------------------------------

class TestGetSet:
    def test_set_then_get(self, grid: TileGrid):
        assert grid.get(2, 3) == TileType.SOLID
        assert grid.get(7, 4) == TileType.NETHER
        assert grid.get(0, 0) == TileType.EMPTY

    @pytest.mark.parametrize("col, row", [(-1, 0), (0, -1), (10, 0), (0, 5), (100, 100)])
    def test_out_of_bounds_reads_empty(self, grid: TileGrid, col: int, row: int):
        assert grid.get(col, row) == 0

    def test_out_of_bounds_write_ignored(self, grid: TileGrid):
        before = grid.to_record()
        grid.set(-1, 2, 1)
        grid.set(10, 2, 1)
        grid.set(3, 5, 1)
        assert grid.to_record() == before

    def test_remap_solid(self, grid: TileGrid):
        grid.remap_solid(TileType.NETHER)
        assert grid.get(2, 3) == TileType.NETHER
        assert grid.get(0, 0) == TileType.EMPTY
        assert grid.count_solid() == 2

    def test_fill(self, grid: TileGrid):
        grid.fill(TileType.SOLID)
        assert grid.count_solid() == 50


# ---------------------------------------------------------------------------
# Collision queries
# ---------------------------------------------------------------------------

class TestPointQuery:
    def test_inside_solid_cell(self, grid: TileGrid):
        assert grid.is_solid_at_point(2 * 32 + 5, 3 * 32 + 31)

    def test_inside_empty_cell(self, grid: TileGrid):
        assert not grid.is_solid_at_point(5, 5)

    def test_outside_world(self, grid: TileGrid):
        assert not grid.is_solid_at_point(-10, -10)
        assert not grid.is_solid_at_point(10_000, 10)


class TestRectCollides:
    def test_rect_spanning_one_solid_cell(self, grid: TileGrid):
        assert grid.rect_collides(Rect(x=64, y=96, w=32, h=32))

    def test_rect_inside_empty_cell(self, grid: TileGrid):
        assert not grid.rect_collides(Rect(x=4 * 32 + 2, y=32 + 2, w=10, h=10))

    def test_aligned_rect_touches_high_side_cell(self, grid: TileGrid):
        # Exactly covers cell (1, 2); its floored right/bottom edge reaches (2, 3).
        assert grid.rect_collides(Rect(x=32, y=64, w=32, h=32))

    def test_rect_just_short_of_solid(self, grid: TileGrid):
        assert not grid.rect_collides(Rect(x=32, y=64, w=31.9, h=31.9))

    def test_rect_partly_outside_world(self, grid: TileGrid):
        assert not grid.rect_collides(Rect(x=-100, y=-100, w=50, h=50))


class TestVisibleTileRange:
    def test_clamped_to_grid(self, grid: TileGrid):
        assert grid.visible_tile_range(-50, -50, 10_000, 10_000) == TileRange(0, 9, 0, 4)

    def test_camera_inside(self, grid: TileGrid):
        assert grid.visible_tile_range(40, 0, 100, 64) == TileRange(1, 4, 0, 2)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class TestRecords:
    def test_round_trip(self, grid: TileGrid):
        record = grid.to_record()
        assert set(record) == {"cols", "rows", "tileSize", "cells"}
        assert TileGrid.from_record(record) == grid

    def test_record_is_detached(self, grid: TileGrid):
        record = grid.to_record()
        record["cells"][0][0] = 9
        assert grid.get(0, 0) == 0

    def test_copy_is_detached(self, grid: TileGrid):
        clone = grid.copy()
        clone.set(0, 0, 1)
        assert grid.get(0, 0) == 0
        assert clone != grid

    def test_rejects_non_object(self):
        with pytest.raises(LevelDecodeError, match="must be an object"):
            TileGrid.from_record([1, 2])

    def test_rejects_bad_dimension(self, grid: TileGrid):
        record = grid.to_record()
        record["cols"] = "10"
        with pytest.raises(LevelDecodeError, match="cols"):
            TileGrid.from_record(record)

    def test_rejects_wrong_row_count(self, grid: TileGrid):
        record = grid.to_record()
        record["cells"].pop()
        with pytest.raises(LevelDecodeError, match="5 rows"):
            TileGrid.from_record(record)

    def test_rejects_ragged_row(self, grid: TileGrid):
        record = grid.to_record()
        record["cells"][1] = [0, 0]
        with pytest.raises(LevelDecodeError, match=r"cells\[1\]"):
            TileGrid.from_record(record)

    def test_rejects_negative_tile(self, grid: TileGrid):
        record = grid.to_record()
        record["cells"][0][0] = -1
        with pytest.raises(LevelDecodeError, match="non-negative"):
            TileGrid.from_record(record)
