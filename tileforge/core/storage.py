"""Key-value blob stores used to persist catalog state."""

from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

from tileforge.core.exceptions import StorageError


class BlobStorage(Protocol):
    def load(self, key: str) -> Optional[str]:
        ...

    def save(self, key: str, blob: str) -> None:
        ...


def default_data_dir() -> Path:
    override = os.environ.get("TILEFORGE_HOME")
    if override:
        return Path(override)
    return Path.home() / ".tileforge"


class JsonFileStorage:
    """Stores each key as ``<base_dir>/<key>.json``."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir is not None else default_data_dir()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, key: str) -> Path:
        return self._base_dir / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def save(self, key: str, blob: str) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(blob, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {path}: {e}") from e


class MemoryStorage:
    """In-process store. ``fail_reads``/``fail_writes`` simulate a broken medium."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.blobs: Dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False
        self.save_count = 0

    def load(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageError(f"read of {key!r} failed")
        return self.blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        if self.fail_writes:
            raise StorageError(f"write of {key!r} failed")
        self.blobs[key] = blob
        self.save_count += 1
