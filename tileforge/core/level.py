from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from tileforge.core.exceptions import LevelDecodeError
from tileforge.core.generator import generate
from tileforge.core.grid import TileGrid, TileType
from tileforge.core.rng import RandomSource

MAX_STARS = 5

BASE_CHANCE = 0.12
NETHER_BASE_CHANCE = 0.18
NETHER_DIFFICULTY_BONUS = 0.25


class Category(str, Enum):
    OVERWORLD = "overworld"
    NETHER = "nether"
    CUSTOM = "custom"


def random_seed() -> int:
    return random.randrange(2**32)


@dataclass
class Level:
    """A catalog or custom level: metadata, cached grid and progress.

    Progress fields are written only by the catalog manager. ``cached_grid``
    holds the serialized grid once generated and is never regenerated.
    """

    id: int
    name: str
    category: Category
    difficulty: float
    cols: int
    rows: int
    tile_size: int
    seed: Optional[int] = None
    cached_grid: Optional[Dict[str, Any]] = None
    completed: bool = False
    stars: int = 0
    best_time: Optional[float] = None
    created_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        self.category = Category(self.category)
        if self.seed is None:
            self.seed = random_seed()

    @property
    def is_generated(self) -> bool:
        return self.cached_grid is not None

    def ensure_generated(self, *, ambient: Optional[RandomSource] = None) -> bool:
        """Generate and cache the grid if needed. Returns True if it was generated now."""
        if self.cached_grid is not None:
            return False

        grid = TileGrid(self.cols, self.rows, self.tile_size)
        nether = self.category is Category.NETHER
        base_chance = NETHER_BASE_CHANCE if nether else BASE_CHANCE
        difficulty = self.difficulty
        if nether:
            difficulty = min(1.0, difficulty + NETHER_DIFFICULTY_BONUS)

        generate(grid, base_chance, difficulty=difficulty, seed=self.seed, ambient=ambient)
        if nether:
            grid.remap_solid(TileType.NETHER)

        self.cached_grid = grid.to_record()
        return True

    def get_grid(self) -> TileGrid:
        """Return a fresh grid rebuilt from the cache; edits never reach the cache."""
        self.ensure_generated()
        return TileGrid.from_record(self.cached_grid)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "difficulty": self.difficulty,
            "seed": self.seed,
            "cols": self.cols,
            "rows": self.rows,
            "tileSize": self.tile_size,
            "cachedGrid": _copy_grid_record(self.cached_grid),
            "completed": self.completed,
            "stars": self.stars,
            "bestTime": self.best_time,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, obj: Any, *, where: str = "level") -> Level:
        if not isinstance(obj, dict):
            raise LevelDecodeError(f"{where} must be an object.")

        level_id = obj.get("id")
        if not _is_int(level_id) or level_id <= 0:
            raise LevelDecodeError(f"{where}.id must be a positive integer.")

        name = obj.get("name")
        if not isinstance(name, str):
            raise LevelDecodeError(f"{where}.name must be a string.")

        try:
            category = Category(obj.get("category"))
        except ValueError:
            raise LevelDecodeError(f"{where}.category must be one of overworld, nether, custom.") from None

        difficulty = obj.get("difficulty")
        if not _is_number(difficulty) or not 0.0 <= difficulty <= 1.0:
            raise LevelDecodeError(f"{where}.difficulty must be a number in [0, 1].")

        seed = obj.get("seed")
        if not _is_int(seed) or not 0 <= seed < 2**32:
            raise LevelDecodeError(f"{where}.seed must be a 32-bit unsigned integer.")

        for key in ("cols", "rows", "tileSize"):
            value = obj.get(key)
            if not _is_int(value) or value <= 0:
                raise LevelDecodeError(f"{where}.{key} must be a positive integer.")

        cached = obj.get("cachedGrid")
        if cached is not None:
            try:
                cached = TileGrid.from_record(cached).to_record()
            except LevelDecodeError as e:
                raise LevelDecodeError(f"{where}.cachedGrid: {e}") from e
            if (cached["cols"], cached["rows"], cached["tileSize"]) != (obj["cols"], obj["rows"], obj["tileSize"]):
                raise LevelDecodeError(f"{where}.cachedGrid dimensions must match the level cols/rows/tileSize.")

        completed = obj.get("completed", False)
        if not isinstance(completed, bool):
            raise LevelDecodeError(f"{where}.completed must be a boolean.")

        stars = obj.get("stars", 0)
        if not _is_int(stars) or not 0 <= stars <= MAX_STARS:
            raise LevelDecodeError(f"{where}.stars must be an integer in [0, {MAX_STARS}].")

        best_time = obj.get("bestTime")
        if best_time is not None and not _is_number(best_time):
            raise LevelDecodeError(f"{where}.bestTime must be a number or null.")

        created_at = obj.get("createdAt")
        if not _is_number(created_at):
            raise LevelDecodeError(f"{where}.createdAt must be a number.")

        return cls(
            id=level_id,
            name=name,
            category=category,
            difficulty=difficulty,
            seed=seed,
            cols=obj["cols"],
            rows=obj["rows"],
            tile_size=obj["tileSize"],
            cached_grid=cached,
            completed=completed,
            stars=stars,
            best_time=best_time,
            created_at=created_at,
        )


def _copy_grid_record(record: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if record is None:
        return None
    return {**record, "cells": [list(row) for row in record["cells"]]}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
