"""Level catalog: the fixed story/nether roster, custom levels and progress."""

from __future__ import annotations

import json
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from tileforge.core.config import CatalogConfig
from tileforge.core.exceptions import LevelDecodeError
from tileforge.core.grid import TileGrid
from tileforge.core.level import MAX_STARS, Category, Level
from tileforge.core.storage import BlobStorage

logger = logging.getLogger(__name__)

OVERWORLD_SEED_BASE = 12345
NETHER_SEED_BASE = 987654
CUSTOM_DIFFICULTY = 0.5


@dataclass(frozen=True)
class LevelSummary:
    id: int
    name: str
    category: Category
    completed: bool
    stars: int


@dataclass(frozen=True)
class ProgressStats:
    completed: int
    total: int
    stars: int
    max_stars: int


def _progress_fraction(i: int, count: int) -> float:
    # A single-level tier sits at the start of its curve.
    return i / (count - 1) if count > 1 else 0.0


def build_catalog(config: CatalogConfig) -> List[Level]:
    """Build the deterministic overworld + nether roster for ``config``."""
    levels: List[Level] = []
    now = time.time()

    for i in range(config.overworld_count):
        level_id = i + 1
        levels.append(
            Level(
                id=level_id,
                name=f"Story {i + 1}",
                category=Category.OVERWORLD,
                difficulty=min(0.9, 0.05 + _progress_fraction(i, config.overworld_count) * 0.7),
                cols=300 + math.floor((i / config.overworld_count) * 400),
                rows=config.rows,
                tile_size=config.tile_size,
                seed=OVERWORLD_SEED_BASE + level_id,
                created_at=now,
            )
        )

    for i in range(config.nether_count):
        level_id = config.overworld_count + i + 1
        levels.append(
            Level(
                id=level_id,
                name=f"Nether {i + 1}",
                category=Category.NETHER,
                difficulty=min(1.0, 0.4 + _progress_fraction(i, config.nether_count) * 0.6),
                cols=400 + math.floor((i / config.nether_count) * 600),
                rows=config.rows,
                tile_size=config.tile_size,
                seed=NETHER_SEED_BASE + level_id,
                created_at=now,
            )
        )

    return levels


def _clamp_stars(stars: float) -> int:
    if stars >= MAX_STARS:
        return MAX_STARS
    if stars <= 0:
        return 0
    return math.floor(stars)


def decode_state(blob: Union[str, Dict[str, Any]]) -> Tuple[List[Level], List[Level]]:
    """Validate a persisted state document and return (catalog, custom) levels.

    Any malformed record rejects the whole document.
    """
    if isinstance(blob, str):
        try:
            blob = json.loads(blob)
        except json.JSONDecodeError as e:
            raise LevelDecodeError(f"state is not valid JSON: {e}") from e
    if not isinstance(blob, dict):
        raise LevelDecodeError("state must be an object.")

    raw_levels = blob.get("levels")
    raw_custom = blob.get("customLevels", [])
    if not isinstance(raw_levels, list):
        raise LevelDecodeError("levels must be a list.")
    if not isinstance(raw_custom, list):
        raise LevelDecodeError("customLevels must be a list.")

    flag = blob.get("freeplayUnlocked", False)
    if not isinstance(flag, bool):
        raise LevelDecodeError("freeplayUnlocked must be a boolean.")
    meta = blob.get("meta", {})
    if not isinstance(meta, dict):
        raise LevelDecodeError("meta must be an object.")

    levels = [Level.from_record(r, where=f"levels[{i}]") for i, r in enumerate(raw_levels)]
    custom = [Level.from_record(r, where=f"customLevels[{i}]") for i, r in enumerate(raw_custom)]

    for i, level in enumerate(levels):
        if level.category is Category.CUSTOM:
            raise LevelDecodeError(f"levels[{i}] must not be a custom level.")
    for i, level in enumerate(custom):
        if level.category is not Category.CUSTOM:
            raise LevelDecodeError(f"customLevels[{i}] must be a custom level.")

    seen = set()
    for level in levels + custom:
        if level.id in seen:
            raise LevelDecodeError(f"duplicate level id {level.id}.")
        seen.add(level.id)

    return levels, custom


class CatalogManager:
    """Owns every level record and derives the freeplay unlock from progress.

    State is restored from ``storage`` when possible, otherwise the roster is
    rebuilt from ``config``. Every mutation is applied in memory first and then
    persisted; persistence failures are logged and reported as ``False``.
    """

    def __init__(self, storage: BlobStorage, config: Optional[CatalogConfig] = None) -> None:
        self._storage = storage
        self._config = config or CatalogConfig()
        self._levels: List[Level] = []
        self._custom: List[Level] = []
        self._freeplay_unlocked = False

        if not self._restore():
            self._levels = build_catalog(self._config)
            self._custom = []
            self._recompute_unlock()
            logger.info(
                "Built catalog with %d overworld and %d nether levels",
                self._config.overworld_count,
                self._config.nether_count,
            )
            self._persist()

    @property
    def config(self) -> CatalogConfig:
        return self._config

    @property
    def levels(self) -> List[Level]:
        return list(self._levels)

    @property
    def custom_levels(self) -> List[Level]:
        return list(self._custom)

    @property
    def freeplay_unlocked(self) -> bool:
        return self._freeplay_unlocked

    def get_by_id(self, level_id: int) -> Optional[Level]:
        for level in self._levels:
            if level.id == level_id:
                return level
        for level in self._custom:
            if level.id == level_id:
                return level
        return None

    def get_grid(self, level_id: int) -> Optional[TileGrid]:
        """Return a detached grid for the level, generating and persisting it on first use."""
        level = self.get_by_id(level_id)
        if level is None:
            return None
        if level.ensure_generated():
            self._persist()
        return level.get_grid()

    # ----- Progress -----

    def mark_complete(self, level_id: int, stars: float, elapsed: Optional[float] = None) -> bool:
        level = self.get_by_id(level_id)
        if level is None:
            return False
        if math.isnan(stars):
            logger.warning("Ignoring NaN star rating for level %d", level_id)
            return False
        level.completed = True
        level.stars = max(level.stars, _clamp_stars(stars))
        if elapsed is not None:
            level.best_time = elapsed if level.best_time is None else min(level.best_time, elapsed)
        self._recompute_unlock()
        return self._persist()

    def set_stars(self, level_id: int, stars: float) -> bool:
        level = self.get_by_id(level_id)
        if level is None:
            return False
        if math.isnan(stars):
            logger.warning("Ignoring NaN star rating for level %d", level_id)
            return False
        level.stars = max(level.stars, _clamp_stars(stars))
        self._recompute_unlock()
        return self._persist()

    def recompute_unlock(self) -> bool:
        self._recompute_unlock()
        return self._freeplay_unlocked

    def _recompute_unlock(self) -> None:
        nether = [level for level in self._levels if level.category is Category.NETHER]
        # An empty nether tier unlocks freeplay trivially.
        self._freeplay_unlocked = all(level.completed for level in nether) and all(
            level.stars == MAX_STARS for level in nether
        )

    def progress_stats(self) -> ProgressStats:
        return ProgressStats(
            completed=sum(1 for level in self._levels if level.completed),
            total=len(self._levels),
            stars=sum(level.stars for level in self._levels),
            max_stars=len(self._levels) * MAX_STARS,
        )

    # ----- Custom levels -----

    def register_custom_level(self, grid: TileGrid, name: str) -> Level:
        live_ids = [level.id for level in self._levels + self._custom]
        next_id = max([len(self._levels) + len(self._custom)] + live_ids) + 1
        level = Level(
            id=next_id,
            name=name,
            category=Category.CUSTOM,
            difficulty=CUSTOM_DIFFICULTY,
            cols=grid.cols,
            rows=grid.rows,
            tile_size=grid.tile_size,
            cached_grid=grid.to_record(),
        )
        self._custom.append(level)
        logger.info("Registered custom level %d (%s)", level.id, name)
        self._persist()
        return level

    def remove_custom_level(self, level_id: int) -> bool:
        for index, level in enumerate(self._custom):
            if level.id == level_id:
                del self._custom[index]
                logger.info("Removed custom level %d", level_id)
                return self._persist()
        return False

    def list_summaries(self) -> List[LevelSummary]:
        return [
            LevelSummary(
                id=level.id,
                name=level.name,
                category=level.category,
                completed=level.completed,
                stars=level.stars,
            )
            for level in self._levels + self._custom
        ]

    # ----- Persistence -----

    def export_state(self) -> Dict[str, Any]:
        return {
            "levels": [level.to_record() for level in self._levels],
            "customLevels": [level.to_record() for level in self._custom],
            "freeplayUnlocked": self._freeplay_unlocked,
            "meta": {"savedAt": time.time()},
        }

    def import_state(self, blob: Union[str, Dict[str, Any]]) -> bool:
        """Replace all in-memory state with ``blob``. Malformed input leaves state untouched."""
        try:
            levels, custom = decode_state(blob)
        except LevelDecodeError as e:
            logger.warning("Rejected state import: %s", e)
            return False
        self._levels = levels
        self._custom = custom
        self._recompute_unlock()
        return self._persist()

    def save(self) -> bool:
        """Persist current state (e.g. on exit)."""
        return self._persist()

    def _restore(self) -> bool:
        key = self._config.storage_key
        try:
            blob = self._storage.load(key)
        except OSError as e:
            logger.warning("Could not load catalog state %r: %s", key, e)
            return False
        if blob is None:
            return False
        try:
            levels, custom = decode_state(blob)
        except LevelDecodeError as e:
            logger.warning("Discarding malformed catalog state %r: %s", key, e)
            return False
        self._levels = levels
        self._custom = custom
        self._recompute_unlock()
        logger.debug("Restored %d catalog and %d custom levels", len(levels), len(custom))
        return True

    def _persist(self) -> bool:
        key = self._config.storage_key
        try:
            self._storage.save(key, json.dumps(self.export_state()))
        except OSError as e:
            logger.warning("Could not save catalog state %r: %s", key, e)
            return False
        return True
