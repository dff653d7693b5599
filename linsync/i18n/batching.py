"""
Request batching.

Splits a locale's keys into batches small enough for one model request.
Entries keep their input order; a boundary is drawn before any entry
that would push the batch past either limit. An entry too long to fit
any batch goes alone into its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from linsync.core.errors import ConfigurationError
from linsync.core.models import FlatKeyMap


@dataclass
class Batch:
    """An ordered slice of a flat key map."""
    
    entries: FlatKeyMap = field(default_factory=dict)
    char_count: int = 0
    
    def __len__(self) -> int:
        return len(self.entries)
    
    def add(self, key: str, value: str) -> None:
        self.entries[key] = value
        self.char_count += len(value)


def iter_batches(flat: FlatKeyMap, max_keys: int, max_chars: int) -> Iterator[Batch]:
    """
    Yield batches of ``flat`` bounded by ``max_keys`` entries and
    ``max_chars`` total value length.
    
    Raises:
        ConfigurationError: if either limit is not a positive integer.
    """
    if max_keys <= 0 or max_chars <= 0:
        raise ConfigurationError(
            f"Invalid batch limits: key={max_keys}, char={max_chars}",
            "Both limits must be positive integers.",
        )
    
    current = Batch()
    for key, value in flat.items():
        value = "" if value is None else str(value)
        would_overflow = (
            len(current) + 1 > max_keys
            or current.char_count + len(value) > max_chars
        )
        if len(current) > 0 and would_overflow:
            yield current
            current = Batch()
        current.add(key, value)
    
    if len(current) > 0:
        yield current


def make_batches(flat: FlatKeyMap, max_keys: int, max_chars: int) -> list[Batch]:
    """List form of ``iter_batches``."""
    return list(iter_batches(flat, max_keys, max_chars))


def chunk_locales(locales: list[str], size: int) -> list[list[str]]:
    """Split a locale list into groups of ``size`` (all in one when size <= 0)."""
    if size <= 0:
        return [list(locales)] if locales else []
    return [locales[i:i + size] for i in range(0, len(locales), size)]
