"""
Core module - shared models, errors and small utilities.

This module contains:
- models: Locale trees, i18n config, limits, model options
- errors: LinError and its subclasses
- utils: Path, glob and formatting helpers
"""

from linsync.core.errors import (
    ConfigurationError,
    LinError,
    LocaleParseError,
    MarkdownParseError,
    ParseError,
    ProviderError,
)
from linsync.core.models import (
    AdapterKind,
    Command,
    FlatKeyMap,
    I18nConfig,
    KeyCountDelta,
    Limits,
    LLMOptions,
    LocaleTree,
    OutputMode,
    Provider,
    SortOrder,
)

__all__ = [
    "ConfigurationError",
    "LinError",
    "LocaleParseError",
    "MarkdownParseError",
    "ParseError",
    "ProviderError",
    "AdapterKind",
    "Command",
    "FlatKeyMap",
    "I18nConfig",
    "KeyCountDelta",
    "Limits",
    "LLMOptions",
    "LocaleTree",
    "OutputMode",
    "Provider",
    "SortOrder",
]
