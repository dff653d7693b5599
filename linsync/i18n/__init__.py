"""
Internationalization - LLM-powered filling of missing locale keys.

Design:
1. Only keys missing from a locale are sent to the model
2. Empty source values never reach the model
3. Requests are bounded by key count and character count
4. Nothing is written until the deletion guard approves

Usage:
    from linsync.i18n import Translator, deletion_guard

    translator = Translator(provider, i18n, limits)
    results = await translator.translate_keys({"fr-FR": {"ui": {"title": "Home"}}})
"""

from linsync.i18n.batching import Batch, chunk_locales, iter_batches, make_batches
from linsync.i18n.guard import deletion_guard, delta_summary, key_count_deltas
from linsync.i18n.languages import (
    ContextProfile,
    describe_locale,
    get_language_name,
    match_locale,
    normalize_locales,
    resolve_context_locales,
)
from linsync.i18n.translator import Translator, build_system_prompt, split_passthrough
from linsync.i18n.usage import KeyUsage, collect_used_keys, find_key_usages

__all__ = [
    # Batching
    "Batch",
    "chunk_locales",
    "iter_batches",
    "make_batches",
    # Guard
    "deletion_guard",
    "delta_summary",
    "key_count_deltas",
    # Languages
    "ContextProfile",
    "describe_locale",
    "get_language_name",
    "match_locale",
    "normalize_locales",
    "resolve_context_locales",
    # Translation
    "Translator",
    "build_system_prompt",
    "split_passthrough",
    # Usage
    "KeyUsage",
    "collect_used_keys",
    "find_key_usages",
]
