"""
Locale names and locale selection.

Locale codes are BCP 47 style (``en-US``, ``pt-BR``); only the language
subtag matters for naming.
"""

from __future__ import annotations

from enum import Enum

from linsync.core.errors import ConfigurationError
from linsync.core.models import I18nConfig


# Human-readable names, used in prompts and console output
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "zh": "Chinese (Simplified)",
    "zh-tw": "Chinese (Traditional)",
    "pt": "Portuguese",
    "fr": "French",
    "de": "German",
    "ja": "Japanese",
    "ko": "Korean",
    "it": "Italian",
    "ru": "Russian",
    "nl": "Dutch",
    "pl": "Polish",
    "vi": "Vietnamese",
    "th": "Thai",
    "tr": "Turkish",
    "id": "Indonesian",
    "ms": "Malay",
    "sv": "Swedish",
    "no": "Norwegian",
    "nb": "Norwegian",
    "da": "Danish",
    "fi": "Finnish",
    "el": "Greek",
    "cs": "Czech",
    "sk": "Slovak",
    "hu": "Hungarian",
    "ro": "Romanian",
    "bg": "Bulgarian",
    "hr": "Croatian",
    "sr": "Serbian",
    "sl": "Slovenian",
    "uk": "Ukrainian",
    "hi": "Hindi",
    "bn": "Bengali",
    "ar": "Arabic",
    "he": "Hebrew",
    "fa": "Persian",
    "ur": "Urdu",
    "sw": "Swahili",
}


class ContextProfile(str, Enum):
    """Which existing locale files are sent to the model as reference."""

    NONE = "none"
    DEF = "def"  # Default locale only
    TGT = "tgt"  # The locales being translated
    BOTH = "both"  # Default plus targets
    ALL = "all"  # Every configured locale


# =============================================================================
# Naming
# =============================================================================


def get_language_name(locale: str) -> str:
    """Get human-readable language name, falling back to the code itself."""
    code = locale.lower().replace("_", "-")
    if code in LANGUAGE_NAMES:
        return LANGUAGE_NAMES[code]
    return LANGUAGE_NAMES.get(code.split("-")[0], locale)


def describe_locale(locale: str) -> str:
    name = get_language_name(locale)
    return locale if name == locale else f"{locale} ({name})"


# =============================================================================
# Selection
# =============================================================================


def match_locale(requested: str, i18n: I18nConfig) -> str:
    """
    Resolve one requested locale against the configured list.

    Accepts ``def`` for the default locale, an exact code (case
    insensitive) or a bare language that prefixes a configured code
    (``en`` -> ``en-US``).

    Raises:
        ConfigurationError: if nothing matches.
    """
    wanted = requested.strip()
    if wanted.lower() == "def":
        return i18n.default_locale

    lowered = wanted.lower().replace("_", "-")
    for locale in i18n.locales:
        if locale.lower() == lowered:
            return locale
    for locale in i18n.locales:
        if locale.lower().split("-")[0] == lowered:
            return locale

    raise ConfigurationError(
        f"Invalid locale: {requested}",
        f"Available locales: {', '.join(i18n.locales)}",
    )


def normalize_locales(requested: list[str] | None, i18n: I18nConfig) -> list[str]:
    """
    Turn CLI locale arguments into configured locale codes.

    An empty request returns an empty list; callers treat that as
    "every target locale". ``all`` expands to every configured locale.
    Order follows the request, duplicates are dropped.
    """
    result: list[str] = []
    for item in requested or []:
        if item.lower() == "all":
            candidates = list(i18n.locales)
        else:
            candidates = [match_locale(item, i18n)]
        for locale in candidates:
            if locale not in result:
                result.append(locale)
    return result


def resolve_context_locales(
    profile: str | list[str] | None,
    i18n: I18nConfig,
    batch: list[str],
) -> list[str]:
    """
    Locales whose files are passed to the model as reference for ``batch``.

    ``profile`` is a ``ContextProfile`` value or an explicit list of
    locales.
    """
    if profile is None:
        return []

    if isinstance(profile, (list, tuple)):
        selected = [match_locale(item, i18n) for item in profile]
    else:
        try:
            kind = ContextProfile(str(profile).lower())
        except ValueError:
            # A single explicit locale
            selected = [match_locale(str(profile), i18n)]
        else:
            if kind == ContextProfile.NONE:
                selected = []
            elif kind == ContextProfile.DEF:
                selected = [i18n.default_locale]
            elif kind == ContextProfile.TGT:
                selected = list(batch)
            elif kind == ContextProfile.BOTH:
                selected = [i18n.default_locale, *batch]
            else:
                selected = list(i18n.locales)

    unique: list[str] = []
    for locale in selected:
        if locale not in unique:
            unique.append(locale)
    return unique
