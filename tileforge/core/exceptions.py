class LevelDecodeError(ValueError):
    """Raised when a grid record, level record or state document fails validation."""


class StorageError(OSError):
    """Raised by a storage backend when a blob cannot be read or written."""
