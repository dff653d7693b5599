"""
Shared utility functions.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

_LEADING_DOTS_RE = re.compile(r"^[./]+")


def relative_file_path(file_path: str) -> str:
    """
    Normalize a file path into the form used inside unit keys.

    Backslashes become forward slashes and leading ``./`` or ``/`` runs
    are dropped, so ``./docs/index.md`` and ``docs\\index.md`` both map to
    ``docs/index.md``.
    """
    return _LEADING_DOTS_RE.sub("", file_path.replace("\\", "/"))


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def format_locales(locales: list[str]) -> str:
    """Render a locale list the way console messages show it."""
    return ", ".join(f"**{locale}**" for locale in locales)


_BRACE_RE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """
    Expand ``{a,b}`` alternatives in a glob pattern.

    ``src/**/*.{ts,vue}`` becomes ``src/**/*.ts`` and ``src/**/*.vue``.
    """
    match = _BRACE_RE.search(pattern)
    if not match:
        return [pattern]
    head, tail = pattern[:match.start()], pattern[match.end():]
    expanded = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def glob_to_regex(pattern: str) -> re.Pattern:
    """
    Compile a path glob where ``**`` spans directories and ``*`` does not.
    """
    parts = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts) + r"\Z")
