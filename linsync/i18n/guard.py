"""
Deletion guard.

The last checkpoint before locale files are written: any locale that
would end up with fewer keys than it started with needs explicit
confirmation, unless running silently.
"""

from __future__ import annotations

import logging

from linsync.console import ICONS, Console
from linsync.core.models import KeyCountDelta

logger = logging.getLogger(__name__)


def key_count_deltas(before: dict[str, int], after: dict[str, int]) -> list[KeyCountDelta]:
    """One delta per locale present in ``after``, in its order."""
    return [
        KeyCountDelta(locale=locale, before=before.get(locale, 0), after=count)
        for locale, count in after.items()
    ]


def removal_message(deltas: list[KeyCountDelta]) -> str:
    parts = [
        f"`{-d.delta}` keys from **{d.locale}**"
        for d in deltas
        if d.delta < 0
    ]
    return f"{ICONS.WARNING} This will remove {', '.join(parts)}. Continue?"


def delta_summary(deltas: list[KeyCountDelta]) -> str:
    """``en-US (+2), fr-FR (0)`` style one-liner."""
    return ", ".join(
        f"{d.locale} ({'+' if d.delta > 0 else ''}{d.delta})"
        for d in deltas
    )


def deletion_guard(
    before: dict[str, int],
    after: dict[str, int],
    locales: list[str] | None = None,
    silent: bool = False,
    console: Console | None = None,
) -> bool:
    """
    Approve or reject a pending write based on key count changes.

    Args:
        before: locale -> leaf count before the operation.
        after: locale -> leaf count the write would produce.
        locales: Locales in scope for the command (informational).
        silent: Approve removals without asking.
        console: Where to print and ask; a default ``Console`` otherwise.

    Returns:
        True if the caller may write, False if the user declined.
    """
    deltas = key_count_deltas(before, after)
    removals = [d for d in deltas if d.delta < 0]

    if removals:
        logger.debug(
            "Pending removals in %s (scope: %s)",
            ", ".join(d.locale for d in removals),
            ", ".join(locales or []) or "all",
        )
        if silent:
            return True
        console = console or Console()
        if not console.confirm(removal_message(deltas), default=False):
            return False

    if not silent and deltas:
        console = console or Console()
        console.log(ICONS.RESULT, delta_summary(deltas))
    return True
