"""
Local storage implementations.

``LocalFileStorage`` works on the project directory; ``InMemoryFileStorage``
keeps everything in a dict and is what the tests use.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from linsync.core.utils import expand_braces, glob_to_regex
from linsync.storage.base import FileStorage


def normalize_path(path: str) -> str:
    """``./locales//en.json`` -> ``locales/en.json``"""
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    path = path.lstrip("/")
    return str(PurePosixPath(path)) if path else ""


# =============================================================================
# Local Filesystem Storage
# =============================================================================


class LocalFileStorage(FileStorage):
    """Store files under a root directory on disk."""

    def __init__(self, root: str | Path = "."):
        self.root = Path(root)

    def _path(self, path: str) -> Path:
        return self.root / normalize_path(path)

    async def read_text(self, path: str) -> str:
        file_path = self._path(path)
        if not file_path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return file_path.read_text(encoding="utf-8")

    async def write_text(self, path: str, text: str) -> None:
        file_path = self._path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(text, encoding="utf-8")

    async def exists(self, path: str) -> bool:
        return self._path(path).is_file()

    async def delete(self, path: str) -> bool:
        file_path = self._path(path)
        if file_path.is_file():
            file_path.unlink()
            return True
        return False

    async def glob(self, patterns: list[str]) -> list[str]:
        found: set[str] = set()
        for pattern in patterns:
            for expanded in expand_braces(normalize_path(pattern)):
                for match in self.root.glob(expanded):
                    if match.is_file():
                        found.add(match.relative_to(self.root).as_posix())
        return sorted(found)


# =============================================================================
# In-Memory Storage
# =============================================================================


class InMemoryFileStorage(FileStorage):
    """Dict-backed storage for tests and dry runs."""

    def __init__(self, files: dict[str, str] | None = None):
        self._files: dict[str, str] = {}
        for path, text in (files or {}).items():
            self._files[normalize_path(path)] = text

    @property
    def files(self) -> dict[str, str]:
        return dict(self._files)

    async def read_text(self, path: str) -> str:
        key = normalize_path(path)
        if key not in self._files:
            raise FileNotFoundError(f"File not found: {path}")
        return self._files[key]

    async def write_text(self, path: str, text: str) -> None:
        self._files[normalize_path(path)] = text

    async def exists(self, path: str) -> bool:
        return normalize_path(path) in self._files

    async def delete(self, path: str) -> bool:
        return self._files.pop(normalize_path(path), None) is not None

    async def glob(self, patterns: list[str]) -> list[str]:
        regexes = [
            glob_to_regex(expanded)
            for pattern in patterns
            for expanded in expand_braces(normalize_path(pattern))
        ]
        return sorted(
            path for path in self._files
            if any(regex.match(path) for regex in regexes)
        )
