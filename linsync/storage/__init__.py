"""
Storage layer.

Usage:
    from linsync.storage import LocalFileStorage, read_locale_tree

    storage = LocalFileStorage(config.cwd)
    tree = await read_locale_tree(storage, "locales/en-US.json")
"""

from linsync.storage.base import (
    FileStorage,
    read_locale_tree,
    read_snapshot,
    write_locale_tree,
    write_snapshot,
)
from linsync.storage.local import InMemoryFileStorage, LocalFileStorage, normalize_path
from linsync.storage.undo import UndoHistory

__all__ = [
    "FileStorage",
    "read_locale_tree",
    "read_snapshot",
    "write_locale_tree",
    "write_snapshot",
    "InMemoryFileStorage",
    "LocalFileStorage",
    "normalize_path",
    "UndoHistory",
]
