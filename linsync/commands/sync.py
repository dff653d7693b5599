"""
``sync`` - translate whatever the target locales are missing.

JSON locales are diffed against the default locale file. Markdown
documents are diffed through unit snapshots, then re-rendered per locale.
"""

from __future__ import annotations

import logging
import posixpath

from linsync.commands.base import CommandContext
from linsync.console import ICONS
from linsync.core.errors import ConfigurationError, LocaleParseError
from linsync.core.models import AdapterKind, Command, FlatKeyMap, LocaleTree
from linsync.core.utils import format_locales, relative_file_path
from linsync.engine import markdown_adapter
from linsync.engine.json_adapter import parse_locale_tree
from linsync.i18n import (
    Translator,
    chunk_locales,
    deletion_guard,
    normalize_locales,
    resolve_context_locales,
)
from linsync.locale import (
    count_keys,
    find_missing_keys,
    merge_missing_translations,
    shape_matches,
    unflatten_tree,
)
from linsync.storage import read_locale_tree, read_snapshot, write_snapshot

logger = logging.getLogger(__name__)


async def run_sync(
    ctx: CommandContext,
    locales: list[str] | None = None,
    force: bool = False,
    silent: bool = False,
    with_: str | list[str] | None = None,
) -> int:
    """
    Sync every selected adapter.

    Returns:
        Process exit code.
    """
    selected = normalize_locales(locales, ctx.i18n)
    adapters = ctx.adapters_for(Command.SYNC)

    async with ctx.make_provider() as provider:
        translator = Translator(
            provider,
            ctx.i18n,
            ctx.config.limits,
            context=ctx.config.context,
            sampling=ctx.sampling,
        )
        for adapter in adapters:
            with ctx.console.section(adapter.kind.value.upper()):
                if adapter.kind == AdapterKind.MARKDOWN:
                    await sync_markdown(ctx, translator, selected, silent)
                else:
                    await sync_json(ctx, translator, selected, force, silent, with_)
    return 0


# =============================================================================
# JSON
# =============================================================================


async def _load_reference(ctx: CommandContext, context_locales: list[str]) -> dict[str, LocaleTree]:
    """Locale trees sent along as terminology context; unreadable ones are skipped."""
    reference: dict[str, LocaleTree] = {}
    for locale in context_locales:
        path = ctx.config.locale_path(locale)
        try:
            reference[locale] = parse_locale_tree(await ctx.storage.read_text(path), path)
        except FileNotFoundError:
            logger.debug("Skipping context for %s (file not found)", locale)
        except LocaleParseError:
            logger.warning("Could not parse context file for locale %s, skipping", locale)
    return reference


async def sync_json(
    ctx: CommandContext,
    translator: Translator,
    locales: list[str],
    force: bool = False,
    silent: bool = False,
    with_: str | list[str] | None = None,
) -> None:
    config, console, i18n = ctx.config, ctx.console, ctx.i18n
    targets = locales or i18n.target_locales

    default_path = config.locale_path(i18n.default_locale)
    try:
        default_tree = parse_locale_tree(await ctx.storage.read_text(default_path), default_path)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Default locale file not found: {default_path}",
            "Create it or point adapters.json.directory at your locales.",
        ) from None

    profile = with_ if with_ is not None else config.with_
    before: dict[str, int] = {}
    after: dict[str, int] = {}
    to_write: dict[str, LocaleTree] = {}

    for batch in chunk_locales(targets, config.limits.locale):
        reference = await _load_reference(ctx, resolve_context_locales(profile, i18n, batch))
        if reference and not silent:
            console.log(ICONS.INFO, f"With: {format_locales(list(reference))}")

        existing: dict[str, LocaleTree] = {}
        keys_to_translate: dict[str, LocaleTree] = {}
        for locale in batch:
            path = config.locale_path(locale)
            if not await ctx.storage.exists(path):
                if not force and not silent:
                    console.log(ICONS.WARNING, f"File not found for locale **{locale}**. Creating a new one.")
                existing[locale] = {}
            else:
                existing[locale] = await read_locale_tree(ctx.storage, path)

            if force:
                keys_to_translate[locale] = default_tree
                before[locale] = count_keys(existing[locale])
                if not silent:
                    console.log(ICONS.INFO, f"Force syncing entire JSON for locale: **{locale}**")
                continue

            if shape_matches(default_tree, existing[locale]):
                if not silent:
                    console.log(ICONS.INFO, f"Skipped: **{locale}**")
                continue

            missing = find_missing_keys(default_tree, existing[locale])
            if missing:
                keys_to_translate[locale] = missing
                before[locale] = count_keys(existing[locale])

        logger.debug("To sync: %s", keys_to_translate)
        if not silent and batch:
            console.log(ICONS.NOTE, f"Keys: {count_keys(default_tree)}")

        if not keys_to_translate:
            continue

        if not silent:
            what = "entire JSON" if force else "missing keys"
            console.log(ICONS.INFO, f"Syncing {what} for {format_locales(list(keys_to_translate))}")

        translations = await translator.translate_keys(keys_to_translate, reference or None)
        logger.debug("Translations: %s", translations)

        for locale, flat in translations.items():
            translated = unflatten_tree(flat)
            if force:
                final = translated
            else:
                final = merge_missing_translations(existing.get(locale, {}), translated)
            after[locale] = count_keys(final)
            to_write[config.locale_path(locale)] = final

    if not deletion_guard(before, after, locales, silent=silent, console=console):
        return

    if to_write:
        await ctx.commit(to_write)
    elif silent:
        console.log("All locales are up to date.")
    else:
        console.log(ICONS.SUCCESS, "All locales are up to date.")


# =============================================================================
# Markdown
# =============================================================================


def output_path(pattern: str | None, file_path: str, locale: str) -> str:
    """
    Where the rendered copy of ``file_path`` goes.

    Without a pattern: ``<dir>/<locale>/<name>`` next to the source.
    """
    if not pattern:
        return posixpath.join(posixpath.dirname(file_path), locale, posixpath.basename(file_path))
    return pattern.replace("{locale}", locale).replace("{path}", file_path)


def group_units_by_file(units: FlatKeyMap) -> dict[str, FlatKeyMap]:
    grouped: dict[str, FlatKeyMap] = {}
    for key, value in units.items():
        file_path = key.split("::", 1)[0]
        grouped.setdefault(file_path, {})[key] = value
    return grouped


async def extract_sources(ctx: CommandContext) -> tuple[dict[str, str], FlatKeyMap]:
    """Read every configured markdown file and extract its units."""
    patterns = ctx.config.adapters.markdown.files
    if not patterns:
        logger.debug("No markdown files configured")
        return {}, {}

    # Rendered copies live in <locale>/ directories and are not sources
    locale_dirs = set(ctx.i18n.locales)
    files = [
        f for f in await ctx.storage.glob(patterns)
        if not locale_dirs.intersection(f.split("/")[:-1])
    ]
    if not files:
        logger.debug("No markdown files found for glob: %s", ", ".join(patterns))
        return {}, {}

    sources: dict[str, str] = {}
    units: FlatKeyMap = {}
    for file_path in files:
        sources[file_path] = await ctx.storage.read_text(file_path)
        units.update(markdown_adapter.extract(file_path, sources[file_path]))
    return sources, units


async def sync_markdown(
    ctx: CommandContext,
    translator: Translator,
    locales: list[str],
    silent: bool = False,
) -> None:
    config, console, i18n = ctx.config, ctx.console, ctx.i18n
    sources, source_units = await extract_sources(ctx)
    if not sources:
        return

    await write_snapshot(ctx.storage, config.snapshot_path(i18n.default_locale), source_units)

    for locale in locales or i18n.target_locales:
        snapshot_path = config.snapshot_path(locale)
        target_units = await read_snapshot(ctx.storage, snapshot_path)

        missing = find_missing_keys(source_units, target_units)
        if not missing:
            if not silent:
                console.log(ICONS.INFO, f"Markdown for **{locale}** is up to date.")
            continue

        translated = await translator.translate_keys({locale: missing})
        new_units = merge_missing_translations(target_units, translated.get(locale, {}))

        rendered: dict[str, str] = {}
        by_file = group_units_by_file(new_units)
        for file_path, source in sources.items():
            file_units = by_file.get(relative_file_path(file_path))
            if not file_units:
                continue
            result = markdown_adapter.render(file_path, source, file_units)
            if result.changed:
                rendered[output_path(config.adapters.markdown.output, file_path, locale)] = result.text

        await ctx.undo.save([snapshot_path, *rendered])
        await write_snapshot(ctx.storage, snapshot_path, new_units)
        for path, text in rendered.items():
            await ctx.storage.write_text(path, text)

    if not silent:
        console.log(ICONS.SUCCESS, "Markdown content synced for all locales.")
