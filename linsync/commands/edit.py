"""
``edit`` - set the value of an existing key in one or more locales.
"""

from __future__ import annotations

from linsync.commands.base import CommandContext, provide_suggestions
from linsync.console import ICONS
from linsync.core.errors import ConfigurationError
from linsync.core.models import Command, LocaleTree
from linsync.i18n import normalize_locales
from linsync.locale import find_nested_key
from linsync.storage import read_locale_tree


def set_leaf(tree: LocaleTree, key: str, value: str) -> bool:
    """
    Overwrite the leaf at ``key`` in place.

    Returns False when ``key`` does not name an existing leaf.
    """
    if key in tree and not isinstance(tree[key], dict):
        tree[key] = value
        return True
    head, sep, rest = key.partition(".")
    while sep:
        child = tree.get(head)
        if isinstance(child, dict) and set_leaf(child, rest, value):
            return True
        next_head, sep, rest = rest.partition(".")
        head = f"{head}.{next_head}"
    return False


async def run_edit(
    ctx: CommandContext,
    key: str,
    text: str,
    locales: list[str] | None = None,
    silent: bool = False,
) -> int:
    """Set ``key`` to ``text`` verbatim in the selected locales (all by default)."""
    config, console, i18n = ctx.config, ctx.console, ctx.i18n

    for adapter in ctx.adapters_for(Command.EDIT):
        with console.section(adapter.kind.value.upper()):
            default_path = config.locale_path(i18n.default_locale)
            if not await ctx.storage.exists(default_path):
                raise ConfigurationError(f"Default locale file not found: {default_path}")
            default_tree = await read_locale_tree(ctx.storage, default_path)
            if provide_suggestions(console, default_tree, key):
                return 0

            edited: list[str] = []
            to_write: dict[str, LocaleTree] = {}
            for locale in normalize_locales(locales, i18n) or i18n.locales:
                path = config.locale_path(locale)
                if not await ctx.storage.exists(path):
                    console.log(ICONS.INFO, f"Skipped: **{locale}** *(file not found)*")
                    continue
                tree = await read_locale_tree(ctx.storage, path)
                if not isinstance(find_nested_key(tree, key).value, str) or not set_leaf(tree, key, text):
                    console.log(ICONS.INFO, f"Skipped: **{locale}** *(key `{key}` not found)*")
                    continue
                edited.append(locale)
                to_write[path] = tree

            await ctx.commit(to_write)
            if edited and not silent:
                console.log(ICONS.SUCCESS, f"Edited key `{key}` in {', '.join(f'**{l}**' for l in edited)}")

    return 0
