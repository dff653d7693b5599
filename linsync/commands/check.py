"""
``check`` - validate locale files and optionally fix, prune or sort them.
"""

from __future__ import annotations

import logging

from linsync.commands.base import CommandContext, samples
from linsync.commands.sync import extract_sources
from linsync.console import ICONS
from linsync.core.errors import ConfigurationError, LocaleParseError
from linsync.core.models import AdapterKind, Command, FlatKeyMap, LocaleTree, SortOrder
from linsync.i18n import collect_used_keys, find_key_usages, normalize_locales
from linsync.locale import (
    cleanup_empty_objects,
    count_keys,
    find_missing_keys,
    find_nested_key,
    get_all_keys,
    merge_missing_translations,
    shape_matches,
    sort_keys,
    unflatten_tree,
)
from linsync.storage import read_locale_tree, read_snapshot, write_snapshot

logger = logging.getLogger(__name__)


async def run_check(
    ctx: CommandContext,
    locales: list[str] | None = None,
    keys: bool = False,
    fix: bool = False,
    prune: bool = False,
    sort: str | None = None,
    info: bool = False,
    silent: bool = False,
) -> int:
    """
    Check every selected adapter.

    Returns:
        1 when issues were found and not fixed, else 0.
    """
    if sort is not None:
        try:
            sort = SortOrder(sort)
        except ValueError:
            raise ConfigurationError(
                f'Invalid sort "{sort}"',
                f"Available sorts: {', '.join(s.value for s in SortOrder)}",
            ) from None

    selected = normalize_locales(locales, ctx.i18n)
    exit_code = 0
    for adapter in ctx.adapters_for(Command.CHECK):
        with ctx.console.section(adapter.kind.value.upper()):
            if adapter.kind == AdapterKind.MARKDOWN:
                code = await check_markdown(ctx, fix=fix, prune=prune, silent=silent)
            elif info:
                code = await show_info(ctx, selected)
            elif sort is not None:
                code = await sort_locales(ctx, selected, sort)
            elif keys:
                code = await check_locale_keys(ctx, selected, fix=fix)
            else:
                code = await check_code_usage(ctx, fix=fix, prune=prune, silent=silent)
            exit_code = max(exit_code, code)
    return exit_code


# =============================================================================
# JSON
# =============================================================================


async def _read_default(ctx: CommandContext) -> LocaleTree:
    path = ctx.config.locale_path(ctx.i18n.default_locale)
    try:
        return await read_locale_tree(ctx.storage, path)
    except LocaleParseError:
        logger.warning("Could not parse default locale file %s", path)
        return {}


async def show_info(ctx: CommandContext, locales: list[str]) -> int:
    config, console = ctx.config, ctx.console
    targets = locales or ctx.i18n.locales
    default_tree = await _read_default(ctx)

    if ctx.sources:
        console.log(ICONS.NOTE, f"Lin config path: `{ctx.sources[0]}`")
    else:
        console.log(ICONS.ERROR, "Lin config not found")
    if ctx.i18n_sources:
        console.log(ICONS.NOTE, f"I18n config path: `{ctx.i18n_sources[0]}`")
    else:
        console.log(ICONS.ERROR, "I18n config not found")

    console.log(ICONS.NOTE, f"Provider: `{config.options.provider.value if config.options.provider else None}`")
    console.log(ICONS.NOTE, f"Model: `{config.options.model}`")
    if config.options.temperature is not None:
        console.log(ICONS.NOTE, f"Temperature: `{config.options.temperature}`")
    console.log(ICONS.NOTE, f"Keys: `{count_keys(default_tree)}`")

    parts = []
    for locale in targets:
        path = config.locale_path(locale)
        if not await ctx.storage.exists(path):
            parts.append(f"**{locale}** ({ICONS.ERROR})")
            continue
        try:
            tree = await read_locale_tree(ctx.storage, path)
        except LocaleParseError:
            parts.append(f"**{locale}** ({ICONS.ERROR})")
            continue
        parts.append(f"**{locale}** (`{count_keys(tree)}`)")
    plural = "s" if len(targets) > 1 else ""
    console.log(ICONS.NOTE, f"Locale{plural} (`{len(targets)}`): {' '.join(parts)}")
    return 0


async def sort_locales(ctx: CommandContext, locales: list[str], order: SortOrder) -> int:
    """Rewrite locale files with sorted keys; out-of-date locales are skipped."""
    config, console = ctx.config, ctx.console
    targets = locales or ctx.i18n.locales
    default_tree = await _read_default(ctx)
    default_count = count_keys(default_tree)

    label = "**alphabetically**" if order == SortOrder.ABC else "according to **default locale**"
    console.log(ICONS.INFO, f"Sorting locales {label}")

    to_write: dict[str, LocaleTree] = {}
    for locale in targets:
        path = config.locale_path(locale)
        if not await ctx.storage.exists(path):
            continue
        tree = await read_locale_tree(ctx.storage, path)
        if not shape_matches(default_tree, tree):
            default_larger = default_count > count_keys(tree)
            diff = (
                find_missing_keys(default_tree, tree)
                if default_larger
                else find_missing_keys(tree, default_tree)
            )
            console.log(
                ICONS.WARNING,
                f"Locale **{locale}** is not up to date. Skipping...",
                f"(found {'missing' if default_larger else 'extra'}: {', '.join(get_all_keys(diff))})",
            )
            continue
        reference = default_tree if order == SortOrder.DEF else None
        to_write[path] = sort_keys(tree, reference)

    await ctx.commit(to_write)
    sorted_locales = [
        locale for locale in targets if config.locale_path(locale) in to_write
    ]
    if sorted_locales:
        console.log(ICONS.SUCCESS, f"Sorted locales: {', '.join(f'**{l}**' for l in sorted_locales)}")
    return 0


async def check_locale_keys(ctx: CommandContext, locales: list[str], fix: bool = False) -> int:
    """Compare every locale's keys with the default locale."""
    config, console = ctx.config, ctx.console
    targets = locales or ctx.i18n.locales
    default_tree = await _read_default(ctx)

    existing: dict[str, LocaleTree] = {}
    missing_by_locale: dict[str, LocaleTree] = {}
    for locale in targets:
        path = config.locale_path(locale)
        if not await ctx.storage.exists(path):
            console.log(ICONS.ERROR, f"File not found for locale **{locale}**.")
        existing[locale] = await read_locale_tree(ctx.storage, path)
        missing = find_missing_keys(default_tree, existing[locale])
        if missing:
            missing_by_locale[locale] = missing

    if not missing_by_locale:
        console.log(ICONS.SUCCESS, "All locales are up to date.")
        return 0

    for locale, missing in missing_by_locale.items():
        missing_keys = get_all_keys(missing)
        console.log(ICONS.WARNING, f"Locale **{locale}** is missing `{len(missing_keys)}` keys")
        if not fix:
            console.log(ICONS.NOTE, f"Samples: {samples(missing_keys)}")

    if not fix:
        console.log(ICONS.ERROR, "Missing keys detected. Run with `--fix` to add empty keys.")
        return 1

    to_write: dict[str, LocaleTree] = {}
    for locale, missing in missing_by_locale.items():
        to_write[config.locale_path(locale)] = merge_missing_translations(existing[locale], _blank(missing))
    await ctx.commit(to_write)
    console.log(ICONS.SUCCESS, "Missing keys added successfully.")
    return 0


def _blank(shape: LocaleTree) -> LocaleTree:
    """Copy ``shape`` with every leaf blanked."""
    return {
        key: _blank(value) if isinstance(value, dict) else ""
        for key, value in shape.items()
    }


async def check_code_usage(
    ctx: CommandContext,
    fix: bool = False,
    prune: bool = False,
    silent: bool = False,
) -> int:
    """Compare keys used in source code with the default locale."""
    config, console, i18n = ctx.config, ctx.console, ctx.i18n
    default_path = config.locale_path(i18n.default_locale)
    default_tree = await _read_default(ctx)

    usages = []
    for file_path in await ctx.storage.glob(config.parser.input):
        source = await ctx.storage.read_text(file_path)
        usages.extend(find_key_usages(source, file_path, tuple(config.parser.functions)))
    used = collect_used_keys(usages)
    logger.debug("Found %d used keys in code", len(used))

    locale_keys = get_all_keys(default_tree)
    known = set(locale_keys)
    missing = [key for key in used if key not in known]
    unused = [key for key in locale_keys if key not in used]

    if missing:
        if silent:
            if not fix:
                console.log(f"Missing keys: {len(missing)}")
                console.log(f"Samples: {', '.join(missing[:10])}{'...' if len(missing) > 10 else ''}")
        else:
            console.log(ICONS.WARNING, f"Found `{len(missing)}` missing keys in default locale")
            console.log(ICONS.NOTE, f"Samples: {samples(missing)}")

    if unused:
        if silent:
            if not prune:
                console.log(f"Unused keys: {len(unused)}")
                console.log(f"Samples: {', '.join(unused[:10])}{'...' if len(unused) > 10 else ''}")
        else:
            console.log(ICONS.WARNING, f"Found `{len(unused)}` unused keys in default locale")
            console.log(ICONS.NOTE, f"Samples: {samples(unused)}")

    if not missing and not unused:
        if not silent:
            console.log(ICONS.SUCCESS, "All keys are in sync.")
        return 0

    if fix and missing:
        try:
            additions = unflatten_tree({key: used[key] or "" for key in missing})
        except ValueError as e:
            raise ConfigurationError(
                f"Conflicting translation keys in source code: {e}",
                hint="A key cannot be both a text value and a group of nested keys.",
            ) from e
        merged = merge_missing_translations(default_tree, additions)
        await ctx.commit({default_path: merged})
        if silent:
            console.log(f"Fixed {len(missing)} missing keys.")
        else:
            console.log(ICONS.SUCCESS, "Missing keys added.")

    if prune and unused:
        approved = silent or ctx.console.confirm(
            f"{ICONS.WARNING} This will remove `{len(unused)}` unused keys from all locales. Continue?"
        )
        if approved:
            to_write: dict[str, LocaleTree] = {}
            for locale in i18n.locales:
                path = config.locale_path(locale)
                if not await ctx.storage.exists(path):
                    continue
                tree = await read_locale_tree(ctx.storage, path)
                for key in unused:
                    nested = find_nested_key(tree, key)
                    if nested.found:
                        nested.delete()
                to_write[path] = cleanup_empty_objects(tree)
            await ctx.commit(to_write)
            if silent:
                console.log(f"Removed {len(unused)} unused keys.")
            else:
                console.log(ICONS.SUCCESS, "Unused keys removed.")

    if not fix and not prune:
        if silent:
            console.log("Key issues detected. Run with --fix to add missing keys or --prune to delete them.")
        else:
            console.log(ICONS.INFO, "Key issues detected. Run with `--fix` to add missing keys or `--prune` to delete them.")
        return 1
    return 0


# =============================================================================
# Markdown
# =============================================================================


def _missing_flat(a: FlatKeyMap, b: FlatKeyMap) -> FlatKeyMap:
    return {key: value for key, value in a.items() if key not in b}


async def check_markdown(
    ctx: CommandContext,
    fix: bool = False,
    prune: bool = False,
    silent: bool = False,
) -> int:
    """Compare extracted units with the default and target snapshots."""
    config, console, i18n = ctx.config, ctx.console, ctx.i18n
    sources, current_units = await extract_sources(ctx)
    if not sources:
        return 0

    source_path = config.snapshot_path(i18n.default_locale)
    source_snapshot = await read_snapshot(ctx.storage, source_path)

    new_blocks = _missing_flat(current_units, source_snapshot)
    stale_blocks = _missing_flat(source_snapshot, current_units)
    source_modified = False

    if fix and new_blocks:
        source_modified = True
        source_snapshot = {**source_snapshot, **new_blocks}
        await write_snapshot(ctx.storage, source_path, source_snapshot)
        if not silent:
            console.log(ICONS.SUCCESS, f"Added `{len(new_blocks)}` new content blocks to the default snapshot.")

    if prune and stale_blocks:
        source_modified = True
        for locale in i18n.locales:
            path = config.snapshot_path(locale)
            if not await ctx.storage.exists(path):
                continue
            units = await read_snapshot(ctx.storage, path)
            for key in stale_blocks:
                units.pop(key, None)
            await write_snapshot(ctx.storage, path, units)
        source_snapshot = await read_snapshot(ctx.storage, source_path)
        if not silent:
            console.log(ICONS.SUCCESS, f"Removed `{len(stale_blocks)}` unused keys from all markdown snapshots.")

    if (new_blocks and not fix) or (stale_blocks and not prune):
        if not silent:
            if new_blocks and not fix:
                console.log(
                    ICONS.WARNING,
                    f"Found `{len(new_blocks)}` new content blocks in source files not present in the default snapshot.",
                )
                console.log(ICONS.NOTE, f"Samples: {samples(list(new_blocks), 5)}")
            if stale_blocks and not prune:
                console.log(
                    ICONS.WARNING,
                    f"Found `{len(stale_blocks)}` unused keys in default snapshot (content removed from source files).",
                )
                console.log(ICONS.NOTE, f"Samples: {samples(list(stale_blocks), 5)}")
            console.log(ICONS.INFO, "Run with `--fix` to add missing content or `--prune` to remove unused content from snapshots.")
        return 1

    if not source_modified and not silent:
        console.log(ICONS.SUCCESS, "Markdown source snapshot is up to date.")

    has_issues = False
    for locale in i18n.target_locales:
        path = config.snapshot_path(locale)
        target_units = await read_snapshot(ctx.storage, path)
        missing = _missing_flat(source_snapshot, target_units)
        unused = _missing_flat(target_units, source_snapshot)
        has_issues = has_issues or bool(missing) or bool(unused)

        fixed = fix and bool(missing)
        if fixed:
            target_units = {**target_units, **{key: "" for key in missing}}
            await write_snapshot(ctx.storage, path, target_units)
            if not silent:
                console.log(ICONS.SUCCESS, f"Added `{len(missing)}` missing keys to **{locale}** markdown snapshot.")

        pruned = prune and bool(unused)
        if pruned:
            for key in unused:
                target_units.pop(key, None)
            await write_snapshot(ctx.storage, path, target_units)
            if not silent:
                console.log(ICONS.SUCCESS, f"Removed `{len(unused)}` unused keys from **{locale}** markdown snapshot.")

        if fixed or pruned or source_modified or silent:
            continue
        if not missing and not unused:
            console.log(ICONS.SUCCESS, f"Markdown for **{locale}** is up to date.")
        if missing:
            console.log(ICONS.WARNING, f"Markdown for **{locale}** is missing `{len(missing)}` keys.")
        if unused:
            console.log(ICONS.WARNING, f"Markdown for **{locale}** has `{len(unused)}` unused keys.")

    if has_issues and not fix and not prune:
        if not silent:
            console.log(ICONS.INFO, "Run with `--fix` to add missing translations or `--prune` to remove unused ones.")
        return 1
    return 0
