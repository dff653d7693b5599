"""
DSPy Signatures for locale translation.

The output field type is swapped per request for a pydantic model that
lists the exact locales and keys expected back.
"""

from __future__ import annotations

import dspy


class TranslateKeys(dspy.Signature):
    """
    For each locale, translate the values from the default locale into
    the language named by the locale key.
    """

    keys: str = dspy.InputField(
        desc="JSON object: locale code -> {dotted key: text in the default locale}"
    )

    translations: dict[str, dict[str, str]] = dspy.OutputField(
        desc="Object keyed by locale; each value maps every input key to its translation"
    )
