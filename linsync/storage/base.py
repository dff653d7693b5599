"""
Storage abstraction layer.

All file access goes through ``FileStorage`` so commands can run against
the real project directory or an in-memory tree in tests. Paths are
always POSIX-style and relative to the storage root.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod

from linsync.core.errors import LocaleParseError
from linsync.core.models import FlatKeyMap, LocaleTree
from linsync.engine.json_adapter import dumps_locale_tree, parse_locale_tree
from linsync.locale import flatten_tree

logger = logging.getLogger(__name__)


# =============================================================================
# Storage Interface
# =============================================================================


class FileStorage(ABC):
    """
    UTF-8 text files addressed by relative path.

    Local Implementation: project directory on disk
    Test Implementation: in-memory dict
    """

    @abstractmethod
    async def read_text(self, path: str) -> str:
        """
        Read a file.

        Raises:
            FileNotFoundError: if the file does not exist.
        """
        pass

    @abstractmethod
    async def write_text(self, path: str, text: str) -> None:
        """Write a file, creating parent directories as needed."""
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """Delete a file. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def glob(self, patterns: list[str]) -> list[str]:
        """Sorted, de-duplicated relative paths matching any pattern."""
        pass


# =============================================================================
# Locale file helpers
# =============================================================================


async def read_locale_tree(storage: FileStorage, path: str) -> LocaleTree:
    """
    Load a JSON locale tree; a missing file is an empty tree.

    Raises:
        LocaleParseError: if the file exists but is not a JSON object.
    """
    try:
        source = await storage.read_text(path)
    except FileNotFoundError:
        logger.debug("Locale file %s not found, using empty tree", path)
        return {}
    return parse_locale_tree(source, path)


async def write_locale_tree(storage: FileStorage, path: str, tree: LocaleTree) -> None:
    """Write a tree with 2-space indentation and a trailing newline."""
    await storage.write_text(path, f"{dumps_locale_tree(tree)}\n")


async def read_snapshot(storage: FileStorage, path: str) -> FlatKeyMap:
    """
    Load a markdown unit snapshot as a flat map.

    A missing or unreadable snapshot is treated as empty: it only ever
    serves as a baseline for diffing.
    """
    try:
        source = await storage.read_text(path)
    except FileNotFoundError:
        return {}
    try:
        data = parse_locale_tree(source, path)
    except LocaleParseError:
        logger.warning("Could not parse snapshot %s, treating it as empty", path)
        return {}
    return flatten_tree(data)


async def write_snapshot(storage: FileStorage, path: str, units: FlatKeyMap) -> None:
    await storage.write_text(path, json.dumps(units, indent=2, ensure_ascii=False))
