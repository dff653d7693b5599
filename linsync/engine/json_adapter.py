"""
JSON locale files.

Whole-file JSON is diffed directly as a locale tree, so ``extract`` has no
units to report and ``render`` just serializes the tree it is given.
"""

from __future__ import annotations

import json

from linsync.core.errors import LocaleParseError
from linsync.core.models import AdapterKind, Command, FlatKeyMap, LocaleTree
from linsync.engine.base import FormatAdapter, RenderResult


def extract(file_path: str, source: str) -> FlatKeyMap:
    return {}


def render(file_path: str, source: str, translations: LocaleTree) -> RenderResult:
    return RenderResult(text=dumps_locale_tree(translations), changed=True)


def dumps_locale_tree(tree: LocaleTree) -> str:
    """Pretty-print a tree with 2-space indentation (no trailing newline)."""
    return json.dumps(tree, indent=2, ensure_ascii=False)


def parse_locale_tree(source: str, path: str = "") -> LocaleTree:
    """
    Parse locale JSON text.
    
    Raises:
        LocaleParseError: on malformed JSON or a non-object document.
    """
    try:
        data = json.loads(source)
    except json.JSONDecodeError as e:
        raise LocaleParseError(f"Invalid JSON in {path or 'locale file'}: {e}", path=path) from e
    if not isinstance(data, dict):
        raise LocaleParseError(
            f"Locale file {path or ''} must contain a JSON object",
            path=path,
        )
    return data


json_adapter = FormatAdapter(
    kind=AdapterKind.JSON,
    supported_commands=frozenset({
        Command.CHECK,
        Command.SYNC,
        Command.ADD,
        Command.DEL,
        Command.EDIT,
    }),
    extract=extract,
    render=render,
)
