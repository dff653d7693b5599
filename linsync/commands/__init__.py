"""
Commands - one async ``run_*`` function per CLI verb.

Usage:
    from linsync.commands import CommandContext, run_sync

    ctx = CommandContext.create(resolve_config().config)
    exit_code = asyncio.run(run_sync(ctx, locales=["fr"]))
"""

from linsync.commands.base import CommandContext, key_suggestions, provide_suggestions
from linsync.commands.add import run_add
from linsync.commands.check import run_check
from linsync.commands.delete import run_del
from linsync.commands.edit import run_edit
from linsync.commands.sync import run_sync
from linsync.commands.undo import run_undo

__all__ = [
    "CommandContext",
    "key_suggestions",
    "provide_suggestions",
    "run_add",
    "run_check",
    "run_del",
    "run_edit",
    "run_sync",
    "run_undo",
]
