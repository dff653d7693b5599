"""
``add`` - add one key to the default locale and translate it everywhere.
"""

from __future__ import annotations

import logging

from linsync.commands.base import CommandContext, provide_suggestions
from linsync.commands.sync import _load_reference
from linsync.console import ICONS
from linsync.core.errors import ConfigurationError
from linsync.core.models import Command, FlatKeyMap, LocaleTree
from linsync.core.utils import format_locales
from linsync.engine.json_adapter import parse_locale_tree
from linsync.i18n import (
    Translator,
    chunk_locales,
    deletion_guard,
    normalize_locales,
    resolve_context_locales,
)
from linsync.locale import count_keys, find_nested_key, merge_missing_translations, unflatten_tree
from linsync.storage import read_locale_tree

logger = logging.getLogger(__name__)


def _replace_key(tree: LocaleTree, key: str, value: str) -> LocaleTree:
    """Set ``key`` to ``value``, replacing whatever is there."""
    find_nested_key(tree, key).delete()
    return merge_missing_translations(tree, unflatten_tree({key: value}))


async def run_add(
    ctx: CommandContext,
    key: str,
    text: str | None = None,
    locales: list[str] | None = None,
    force: bool = False,
    silent: bool = False,
    with_: str | list[str] | None = None,
) -> int:
    """
    Add ``key`` with ``text`` as the default locale value.

    ``text=None`` means none was given: an existing key (or branch) gets
    suggestions, otherwise the user is asked for the text. An empty text
    is written as-is to every locale without a model call.
    """
    config, console, i18n = ctx.config, ctx.console, ctx.i18n

    for adapter in ctx.adapters_for(Command.ADD):
        with console.section(adapter.kind.value.upper()):
            default_path = config.locale_path(i18n.default_locale)
            try:
                default_tree = parse_locale_tree(await ctx.storage.read_text(default_path), default_path)
            except FileNotFoundError:
                raise ConfigurationError(f"Default locale file not found: {default_path}") from None

            if key.endswith("."):
                provide_suggestions(console, default_tree, key)
                return 0

            if text is None:
                if provide_suggestions(console, default_tree, key, suggest_on_exact=True):
                    return 0
                text = console.prompt(f"Enter {i18n.default_locale} translation for key `{key}`:")
                if not text:
                    return 0

            targets = normalize_locales(locales, i18n) or list(i18n.locales)
            profile = with_ if with_ is not None else config.with_

            before: dict[str, int] = {}
            after: dict[str, int] = {}
            to_write: dict[str, LocaleTree] = {}

            async with ctx.make_provider() as provider:
                translator = Translator(
                    provider, i18n, config.limits,
                    context=config.context, sampling=ctx.sampling,
                )
                for batch in chunk_locales(targets, config.limits.locale):
                    reference = await _load_reference(ctx, resolve_context_locales(profile, i18n, batch))
                    if reference and not silent:
                        console.log(ICONS.INFO, f"With: {format_locales(list(reference))}")

                    existing: dict[str, LocaleTree] = {}
                    to_translate: dict[str, FlatKeyMap] = {}
                    overwrite: list[str] = []
                    for locale in batch:
                        path = config.locale_path(locale)
                        if await ctx.storage.exists(path):
                            existing[locale] = await read_locale_tree(ctx.storage, path)
                        else:
                            if not silent:
                                console.log(ICONS.WARNING, f"File not found for locale **{locale}**. Creating a new one.")
                            existing[locale] = {}
                        before[locale] = count_keys(existing[locale])

                        if find_nested_key(existing[locale], key).found:
                            if not force:
                                if not silent:
                                    console.log(ICONS.INFO, f"Skipped: **{locale}**")
                                continue
                            overwrite.append(locale)
                        to_translate[locale] = {key: text}

                    if overwrite and not silent:
                        plural = "s" if len(overwrite) > 1 else ""
                        console.log(ICONS.INFO, f"Overwriting translation for locale{plural}: {format_locales(overwrite)}")

                    if not to_translate:
                        continue

                    # The default locale takes the text as given
                    model_keys = {l: keys for l, keys in to_translate.items() if l != i18n.default_locale}
                    translations = await translator.translate_keys(model_keys, reference or None)
                    if i18n.default_locale in to_translate:
                        translations[i18n.default_locale] = to_translate[i18n.default_locale]
                    logger.debug("Translations: %s", translations)

                    for locale, flat in translations.items():
                        final = _replace_key(existing[locale], key, flat.get(key, text))
                        after[locale] = count_keys(final)
                        to_write[config.locale_path(locale)] = final

            if not to_write:
                if not silent:
                    console.log(ICONS.SUCCESS, "All locales are up to date.")
                    console.log(ICONS.NOTE, f"Keys: {count_keys(default_tree)}")
                continue

            if not silent:
                default_count = after.get(i18n.default_locale, count_keys(default_tree))
                console.log(ICONS.NOTE, f"Keys: {default_count}")

            if not deletion_guard(before, after, targets, silent=silent, console=console):
                continue
            await ctx.commit(to_write)

    return 0
