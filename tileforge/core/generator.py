"""Column-by-column procedural platform synthesis."""

from __future__ import annotations

import math
import random
from typing import Optional

from tileforge.core.grid import TileGrid, TileType
from tileforge.core.rng import RandomSource, SeededRandom

GROUND_FILL_CUTOFF = 0.9
GROUND_HOLE_CHANCE = 0.005


def generate(
    grid: TileGrid,
    base_chance: float,
    ground_row: Optional[int] = None,
    difficulty: float = 0.0,
    seed: Optional[int] = None,
    *,
    ambient: Optional[RandomSource] = None,
) -> None:
    """Populate ``grid`` in place with solid columns, floating platforms and gaps.

    Every decision of the column pass is drawn from the mulberry32 stream for
    ``seed``, so it is reproducible across processes. The ground-fill pass that
    follows (only for ``difficulty < 0.9``) draws from ``ambient`` instead,
    which defaults to the process-wide ``random`` module and is therefore not
    reproducible even for a fixed seed.
    """
    if ambient is None:
        ambient = random
    rng: RandomSource = SeededRandom(seed) if seed is not None else ambient
    if ground_row is None:
        ground_row = grid.rows - 1

    cols = grid.cols
    spawn_chance = max(0.02, base_chance + difficulty * 0.25)
    max_height = min(grid.rows, 1 + math.floor(2 + difficulty * 3))
    platform_chance = 0.08 + difficulty * 0.12
    gap_chance = 0.02 + difficulty * 0.05

    for col in range(cols):
        if rng.random() < spawn_chance:
            height = 1 + math.floor(rng.random() * max_height)
            for h in range(height):
                row = ground_row - h
                if row >= 0:
                    grid.set(col, row, TileType.SOLID)

            if rng.random() < platform_chance:
                row = max(0, ground_row - height - (1 + math.floor(rng.random() * 2)))
                length = 1 + math.floor(rng.random() * min(4, cols - col))
                for c in range(col, min(cols, col + length)):
                    grid.set(c, row, TileType.SOLID)
        elif rng.random() < gap_chance:
            # Gaps are the default empty state; the draw keeps the stream aligned.
            pass

    if difficulty < GROUND_FILL_CUTOFF:
        for col in range(cols):
            if ambient.random() < GROUND_HOLE_CHANCE:
                continue
            grid.set(col, ground_row, TileType.SOLID)
