from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_STORAGE_KEY = "tileforge.catalog.v1"


@dataclass(frozen=True)
class CatalogConfig:
    overworld_count: int = 500
    nether_count: int = 1000
    rows: int = 8
    tile_size: int = 64
    storage_key: str = DEFAULT_STORAGE_KEY

    @property
    def catalog_size(self) -> int:
        return self.overworld_count + self.nether_count

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> CatalogConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ValueError(f"unknown config keys: {', '.join(unknown)}")

        values = dict(raw)
        minimums = {"overworld_count": 0, "nether_count": 0, "rows": 1, "tile_size": 1}
        for name, minimum in minimums.items():
            if name not in values:
                continue
            value = values[name]
            if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
                raise ValueError(f"'{name}' must be an integer >= {minimum}")

        key = values.get("storage_key", DEFAULT_STORAGE_KEY)
        if not isinstance(key, str) or not key.strip():
            raise ValueError("'storage_key' must be a non-empty string")
        values["storage_key"] = key.strip()
        return cls(**values)


def load_config(path: Path) -> CatalogConfig:
    """Read a YAML config file; missing keys keep their defaults."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return CatalogConfig()
    if not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected a YAML mapping of config keys")
    return CatalogConfig.from_mapping(raw)
