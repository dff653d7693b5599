"""
Undo history.

Before a command overwrites files it snapshots their current content
into ``.lin/undo/<timestamp>.json``. ``restore_latest`` puts the newest
snapshot back and removes it, so repeated undos walk back in time.
"""

from __future__ import annotations

import json
import logging

from linsync.core.utils import utc_now
from linsync.storage.base import FileStorage

logger = logging.getLogger(__name__)


UNDO_DIR = ".lin/undo"


class UndoHistory:
    """
    Pre-write snapshots of files.

    Usage:
        history = UndoHistory(storage)
        await history.save(["locales/fr-FR.json"])
        ...
        restored = await history.restore_latest()
    """

    def __init__(self, storage: FileStorage, enabled: bool = True, directory: str = UNDO_DIR):
        self.storage = storage
        self.enabled = enabled
        self.directory = directory.rstrip("/")
        self._last_stamp = ""

    def _next_name(self) -> str:
        stamp = utc_now().strftime("%Y%m%dT%H%M%S%fZ")
        # Two saves within the same microsecond must not overwrite each other
        if stamp <= self._last_stamp:
            stamp = f"{self._last_stamp}_1"
        self._last_stamp = stamp
        return f"{self.directory}/{stamp}.json"

    async def save(self, paths: list[str]) -> str | None:
        """
        Snapshot ``paths``. Files that do not exist yet are recorded as
        absent and deleted on restore.

        Returns:
            The snapshot path, or None when undo is disabled or nothing
            was listed.
        """
        if not self.enabled or not paths:
            return None

        files: dict[str, str | None] = {}
        for path in paths:
            try:
                files[path] = await self.storage.read_text(path)
            except FileNotFoundError:
                files[path] = None

        snapshot_path = self._next_name()
        payload = {"created_at": utc_now().isoformat(), "files": files}
        await self.storage.write_text(snapshot_path, json.dumps(payload, indent=2, ensure_ascii=False))
        logger.debug("Saved undo snapshot %s (%d files)", snapshot_path, len(files))
        return snapshot_path

    async def snapshots(self) -> list[str]:
        """Snapshot paths, oldest first."""
        return await self.storage.glob([f"{self.directory}/*.json"])

    async def restore_latest(self) -> list[str]:
        """
        Restore the newest snapshot.

        Returns:
            The restored file paths (empty when there is no history).
        """
        snapshots = await self.snapshots()
        if not snapshots:
            return []

        latest = snapshots[-1]
        payload = json.loads(await self.storage.read_text(latest))
        restored = []
        for path, content in payload.get("files", {}).items():
            if content is None:
                await self.storage.delete(path)
            else:
                await self.storage.write_text(path, content)
            restored.append(path)

        await self.storage.delete(latest)
        logger.debug("Restored undo snapshot %s", latest)
        return restored
