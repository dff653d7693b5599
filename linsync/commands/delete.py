"""
``del`` - remove keys from one or more locales.
"""

from __future__ import annotations

from linsync.commands.base import CommandContext, provide_suggestions
from linsync.console import ICONS
from linsync.core.models import Command, LocaleTree
from linsync.i18n import normalize_locales
from linsync.locale import find_nested_key
from linsync.storage import read_locale_tree


async def run_del(
    ctx: CommandContext,
    keys: list[str],
    locales: list[str] | None = None,
    silent: bool = False,
) -> int:
    """
    Delete ``keys`` and any ancestors they leave empty.

    A single key naming a branch lists the keys under it instead.
    """
    config, console, i18n = ctx.config, ctx.console, ctx.i18n
    keys = [k.strip() for k in keys if k.strip()]

    for adapter in ctx.adapters_for(Command.DEL):
        with console.section(adapter.kind.value.upper()):
            if len(keys) == 1:
                default_tree = await read_locale_tree(ctx.storage, config.locale_path(i18n.default_locale))
                if provide_suggestions(console, default_tree, keys[0]):
                    return 0

            deleted: dict[str, list[str]] = {}
            to_write: dict[str, LocaleTree] = {}
            for locale in normalize_locales(locales, i18n) or i18n.locales:
                path = config.locale_path(locale)
                if not await ctx.storage.exists(path):
                    console.log(ICONS.INFO, f"Skipped: **{locale}** *(file not found)*")
                    continue
                tree = await read_locale_tree(ctx.storage, path)
                for key in keys:
                    nested = find_nested_key(tree, key)
                    if not nested.found:
                        console.log(ICONS.INFO, f"Skipped: **{locale}** *(key `{key}` not found)*")
                        continue
                    nested.delete()
                    deleted.setdefault(key, []).append(locale)
                    to_write[path] = tree

            await ctx.commit(to_write)
            if not silent:
                for key, where in deleted.items():
                    console.log(ICONS.SUCCESS, f"Deleted key `{key}` from {', '.join(f'**{l}**' for l in where)}")

    return 0
