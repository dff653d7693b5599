"""
Translation key usage in source code.

Finds calls such as ``t('ui.title')``, ``$t("ui.title")`` or
``i18n.t('ui.title', 'Title')`` so ``check`` can compare the keys a
codebase uses against the default locale. Only literal string keys are
recognised; keys built at runtime are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


DEFAULT_FUNCTIONS = ("t", "$t", "i18n.t", "i18next.t")

_STRING = r"""(?P<{name}q>['"`])(?P<{name}>(?:\\.|(?!(?P={name}q)).)*)(?P={name}q)"""


def _build_pattern(functions: tuple[str, ...]) -> re.Pattern:
    names = "|".join(re.escape(f) for f in sorted(functions, key=len, reverse=True))
    return re.compile(
        rf"(?<![\w$.])(?:{names})\(\s*"
        + _STRING.format(name="key")
        + r"(?:\s*,\s*"
        + _STRING.format(name="default")
        + r")?",
        re.DOTALL,
    )


_DEFAULT_PATTERN = _build_pattern(DEFAULT_FUNCTIONS)


@dataclass
class KeyUsage:
    """One literal key reference found in code."""

    key: str
    default_value: str | None = None
    path: str = ""
    line: int = 0


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text)


def find_key_usages(
    source: str,
    path: str = "",
    functions: tuple[str, ...] | None = None,
) -> list[KeyUsage]:
    """All literal translation keys referenced in ``source``, in order."""
    pattern = _build_pattern(functions) if functions else _DEFAULT_PATTERN
    usages = []
    for match in pattern.finditer(source):
        key = match.group("key")
        # Template literals with interpolation are not literal keys
        if match.group("keyq") == "`" and "${" in key:
            continue
        if not key or key.endswith(".") or key.startswith("."):
            continue
        default = match.group("default")
        usages.append(KeyUsage(
            key=_unescape(key),
            default_value=_unescape(default) if default is not None else None,
            path=path,
            line=source.count("\n", 0, match.start()) + 1,
        ))
    return usages


def collect_used_keys(usages: list[KeyUsage]) -> dict[str, str | None]:
    """
    Unique keys with their default value.

    The first non-empty default seen for a key wins.
    """
    keys: dict[str, str | None] = {}
    for usage in usages:
        if usage.key not in keys or (usage.default_value and not keys[usage.key]):
            keys[usage.key] = usage.default_value
    return keys
