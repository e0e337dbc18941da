"""Fixed-size tile grid with collision and visibility queries."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List

from tileforge.core.exceptions import LevelDecodeError


class TileType(IntEnum):
    EMPTY = 0
    SOLID = 1
    NETHER = 2


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in world pixels."""

    x: float
    y: float
    w: float
    h: float


@dataclass(frozen=True)
class TileRange:
    """Inclusive column/row bounds of the tiles a camera can see."""

    start_col: int
    end_col: int
    start_row: int
    end_row: int


class TileGrid:
    """A ``cols`` x ``rows`` matrix of tile ids, indexed ``cells[row][col]``.

    Dimensions are fixed at construction. Reads outside the grid return
    ``TileType.EMPTY`` and writes outside it are ignored, so callers never
    have to bounds-check world coordinates.
    """

    def __init__(self, cols: int, rows: int, tile_size: int = 64) -> None:
        if cols <= 0 or rows <= 0:
            raise ValueError("cols and rows must be > 0")
        if tile_size <= 0:
            raise ValueError("tile_size must be > 0")
        self._cols = cols
        self._rows = rows
        self._tile_size = tile_size
        self._cells: List[List[int]] = [[0] * cols for _ in range(rows)]

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def tile_size(self) -> int:
        return self._tile_size

    @property
    def world_width_pixels(self) -> int:
        return self._cols * self._tile_size

    @property
    def world_height_pixels(self) -> int:
        return self._rows * self._tile_size

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self._cols and 0 <= row < self._rows

    def get(self, col: int, row: int) -> int:
        if not self.in_bounds(col, row):
            return TileType.EMPTY
        return self._cells[row][col]

    def set(self, col: int, row: int, value: int) -> None:
        if not self.in_bounds(col, row):
            return
        self._cells[row][col] = int(value)

    def fill(self, value: int) -> None:
        for row in self._cells:
            row[:] = [int(value)] * self._cols

    def remap_solid(self, value: int) -> None:
        """Rewrite every non-empty tile to ``value``."""
        for row in self._cells:
            for col, tile in enumerate(row):
                if tile > 0:
                    row[col] = int(value)

    def count_solid(self) -> int:
        return sum(1 for row in self._cells for tile in row if tile > 0)

    # ----- Queries -----

    def _cell_index(self, pixel: float) -> int:
        return math.floor(pixel / self._tile_size)

    def is_solid_at_point(self, x: float, y: float) -> bool:
        return self.get(self._cell_index(x), self._cell_index(y)) > 0

    def rect_collides(self, rect: Rect) -> bool:
        # Both edges are floored, so a rect ending exactly on a cell boundary
        # also tests the cell on the far side of that boundary.
        left = self._cell_index(rect.x)
        right = self._cell_index(rect.x + rect.w)
        top = self._cell_index(rect.y)
        bottom = self._cell_index(rect.y + rect.h)
        for row in range(top, bottom + 1):
            for col in range(left, right + 1):
                if self.get(col, row) > 0:
                    return True
        return False

    def visible_tile_range(
        self,
        camera_x: float,
        camera_y: float,
        view_width: float,
        view_height: float,
    ) -> TileRange:
        return TileRange(
            start_col=max(0, self._cell_index(camera_x)),
            end_col=min(self._cols - 1, self._cell_index(camera_x + view_width)),
            start_row=max(0, self._cell_index(camera_y)),
            end_row=min(self._rows - 1, self._cell_index(camera_y + view_height)),
        )

    # ----- Serialization -----

    def copy(self) -> TileGrid:
        clone = TileGrid(self._cols, self._rows, self._tile_size)
        clone._cells = [list(row) for row in self._cells]
        return clone

    def to_record(self) -> Dict[str, Any]:
        return {
            "cols": self._cols,
            "rows": self._rows,
            "tileSize": self._tile_size,
            "cells": [list(row) for row in self._cells],
        }

    @classmethod
    def from_record(cls, obj: Any) -> TileGrid:
        if not isinstance(obj, dict):
            raise LevelDecodeError("grid record must be an object.")

        cols = obj.get("cols")
        rows = obj.get("rows")
        tile_size = obj.get("tileSize")
        for name, value in (("cols", cols), ("rows", rows), ("tileSize", tile_size)):
            if not _is_int(value) or value <= 0:
                raise LevelDecodeError(f"grid {name} must be a positive integer.")

        cells = obj.get("cells")
        if not isinstance(cells, list) or len(cells) != rows:
            raise LevelDecodeError(f"grid cells must be a list of {rows} rows.")
        for r, row in enumerate(cells):
            if not isinstance(row, list) or len(row) != cols:
                raise LevelDecodeError(f"grid cells[{r}] must be a list of {cols} tiles.")
            if not all(_is_int(tile) and tile >= 0 for tile in row):
                raise LevelDecodeError(f"grid cells[{r}] must hold non-negative integers.")

        grid = cls(cols, rows, tile_size)
        grid._cells = [list(row) for row in cells]
        return grid

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TileGrid):
            return NotImplemented
        return (
            self._cols == other._cols
            and self._rows == other._rows
            and self._tile_size == other._tile_size
            and self._cells == other._cells
        )

    def __repr__(self) -> str:
        return f"TileGrid(cols={self._cols}, rows={self._rows}, tile_size={self._tile_size})"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
