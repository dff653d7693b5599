"""
linsync - command line entry point.

Usage:
    linsync sync -l fr
    linsync check --keys --fix
    linsync add common.save "Save changes"
    linsync del common.save
    linsync undo
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from linsync.commands import (
    CommandContext,
    run_add,
    run_check,
    run_del,
    run_edit,
    run_sync,
    run_undo,
)
from linsync.config_loader import resolve_config
from linsync.console import ICONS, Console
from linsync.core.errors import LinError

logger = logging.getLogger(__name__)


# =============================================================================
# Arguments
# =============================================================================


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--locale", "-l", action="append", help="only act on a specific locale (repeatable)")
    parser.add_argument("--cwd", "-c", default=".", help="project root")
    parser.add_argument("--debug", "-d", action="store_true", default=None, help="debug mode")
    parser.add_argument("--adapter", "-a", action="append", help="the adapter(s) to use (default: all)")
    parser.add_argument(
        "--undo", action=argparse.BooleanOptionalAction, default=None,
        help="enable/disable undo history",
    )


def _add_llm_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--context", "-C", help="extra information to include in the system prompt")
    parser.add_argument("--provider", "-p", help="the model provider to use")
    parser.add_argument("--model", "-m", help="the model (or preset) to use")
    parser.add_argument("--api-key", help="API key for the provider")
    parser.add_argument("--temperature", "-t", help="the temperature to use")
    parser.add_argument("--mode", help="structured output mode: auto | json | tool")
    parser.add_argument("--limit-locale", help="locales per batch")
    parser.add_argument("--limit-key", help="keys per model request")
    parser.add_argument("--limit-char", help="characters per model request")
    parser.add_argument("--with", "-w", dest="with_", help="context profile: none, def, tgt, both, all or locales")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linsync",
        description="Keep locale files in sync with the default locale using a language model",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sync = sub.add_parser("sync", help="translate missing keys and content")
    _add_common_args(sync)
    _add_llm_args(sync)
    sync.add_argument("--force", "-f", action="store_true", help="retranslate everything")
    sync.add_argument("--silent", "-s", action="store_true", help="no prompts or decoration")

    check = sub.add_parser("check", help="check locales for missing or unused keys")
    _add_common_args(check)
    check.add_argument("--keys", "-k", action="store_true", help="compare locale keys with the default locale")
    check.add_argument("--fix", "-f", action="store_true", help="add missing keys")
    check.add_argument("--prune", "-p", action="store_true", help="remove unused keys")
    check.add_argument("--sort", help="sort keys: abc | def")
    check.add_argument("--info", "-i", action="store_true", help="show project information")
    check.add_argument("--silent", "-s", action="store_true", help="no prompts or decoration")

    add = sub.add_parser("add", help="add a key to every locale")
    _add_common_args(add)
    _add_llm_args(add)
    add.add_argument("key")
    add.add_argument("text", nargs="*")
    add.add_argument("--force", "-f", action="store_true", help="overwrite existing keys")
    add.add_argument("--silent", "-s", action="store_true", help="no prompts or decoration")

    edit = sub.add_parser("edit", help="edit a key in one or more locales")
    _add_common_args(edit)
    edit.add_argument("key")
    edit.add_argument("text", nargs="+")

    delete = sub.add_parser("del", help="remove keys from the locales")
    _add_common_args(delete)
    delete.add_argument("keys", nargs="+")

    undo = sub.add_parser("undo", help="restore the files changed by the last write")
    _add_common_args(undo)

    return parser


def config_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """CLI arguments as a config layer; unset values are dropped by the merge."""
    opts = vars(args)
    get = opts.get
    return {
        "debug": get("debug"),
        "undo": get("undo"),
        "adapter": get("adapter"),
        "context": get("context"),
        "with": get("with_"),
        "options": {
            "provider": get("provider"),
            "model": get("model"),
            "api_key": get("api_key"),
            "temperature": get("temperature"),
            "mode": get("mode"),
        },
        "limits": {
            "locale": get("limit_locale"),
            "key": get("limit_key"),
            "char": get("limit_char"),
        },
    }


# =============================================================================
# Dispatch
# =============================================================================


async def dispatch(ctx: CommandContext, args: argparse.Namespace) -> int:
    command = args.command
    if command == "sync":
        return await run_sync(ctx, args.locale, force=args.force, silent=args.silent, with_=args.with_)
    if command == "check":
        return await run_check(
            ctx, args.locale, keys=args.keys, fix=args.fix, prune=args.prune,
            sort=args.sort, info=args.info, silent=args.silent,
        )
    if command == "add":
        text = " ".join(args.text) if args.text else None
        return await run_add(
            ctx, args.key, text, args.locale,
            force=args.force, silent=args.silent, with_=args.with_,
        )
    if command == "edit":
        return await run_edit(ctx, args.key, " ".join(args.text), args.locale)
    if command == "del":
        return await run_del(ctx, args.keys, args.locale)
    return await run_undo(ctx)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    console = Console()
    try:
        resolved = resolve_config(config_overrides(args), cwd=args.cwd)
        ctx = CommandContext.create(
            resolved.config,
            console=console,
            sources=resolved.sources,
            i18n_sources=resolved.i18n_sources,
        )
        return asyncio.run(dispatch(ctx, args))
    except LinError as e:
        console.log(ICONS.ERROR, e.message)
        if e.hint:
            console.log(e.hint)
        logger.debug("Command failed", exc_info=True)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
