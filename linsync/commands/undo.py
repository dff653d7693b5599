"""
``undo`` - restore the files changed by the last write.
"""

from __future__ import annotations

from linsync.commands.base import CommandContext
from linsync.console import ICONS


async def run_undo(ctx: CommandContext) -> int:
    restored = await ctx.undo.restore_latest()
    if not restored:
        ctx.console.log(ICONS.INFO, "Nothing to undo.")
        return 0
    ctx.console.log(ICONS.SUCCESS, f"Restored {', '.join(f'`{p}`' for p in restored)}")
    return 0
