"""
LLM-powered translation of missing keys.

Keys arrive per locale, already seeded with the default locale's text.
Empty seeds are passed through untouched; everything else is split into
bounded batches and sent to the model provider one request at a time.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from linsync.core.errors import ProviderError
from linsync.core.models import FlatKeyMap, I18nConfig, Limits, LocaleTree
from linsync.i18n.batching import iter_batches
from linsync.i18n.languages import describe_locale
from linsync.locale import flatten_tree, merge_missing_translations
from linsync.services.ai import (
    GenerationRequest,
    ModelProvider,
    SamplingParams,
    build_batch_schema,
)

logger = logging.getLogger(__name__)


EXAMPLE_INPUT = '{"fr-FR": {"ui.home.title": "Home"}}'
EXAMPLE_OUTPUT = '{"fr-FR": {"ui.home.title": "Accueil"}}'


def build_system_prompt(
    default_locale: str,
    context: str = "",
    reference: dict[str, LocaleTree] | None = None,
) -> str:
    """
    Instruction text for one batch.

    Args:
        default_locale: Locale the seed values are written in.
        context: Free-text project information from the user.
        reference: Other locale trees shown to the model for terminology.
    """
    lines = [
        "For each locale, translate the values from the default locale "
        f"({describe_locale(default_locale)}) language to the corresponding "
        "languages (denoted by the locale keys).",
        "Return a JSON object where each top key is a locale, and the value is "
        "an object containing the translations for that locale.",
    ]
    if context:
        lines.append(f"Additional information from user: {context}")
    if reference:
        lines.append(
            "Other locale JSONs from the user's codebase for context: "
            + json.dumps(reference, ensure_ascii=False)
        )
        lines.append("Always use dot notation when dealing with nested keys: ui.about.title")
    lines.extend([
        "Example input:",
        EXAMPLE_INPUT,
        "Example output:",
        EXAMPLE_OUTPUT,
    ])
    return "\n".join(lines)


def split_passthrough(keys: FlatKeyMap) -> tuple[FlatKeyMap, FlatKeyMap]:
    """Split into (values for the model, empty values kept as-is)."""
    for_model: FlatKeyMap = {}
    passthrough: FlatKeyMap = {}
    for key, value in keys.items():
        if value:
            for_model[key] = value
        else:
            passthrough[key] = ""
    return for_model, passthrough


class Translator:
    """
    Translation orchestrator.

    Usage:
        async with create_model_provider(config.options) as provider:
            translator = Translator(provider, i18n, config.limits, context=config.context)
            results = await translator.translate_keys({"fr-FR": missing})

    Results are flat key maps per locale. Locales are processed one after
    another and so are their batches; a provider failure stops the run and
    propagates, leaving nothing half-merged.
    """

    def __init__(
        self,
        provider: ModelProvider,
        i18n: I18nConfig,
        limits: Limits | None = None,
        context: str = "",
        sampling: SamplingParams | None = None,
    ):
        self.provider = provider
        self.i18n = i18n
        self.limits = limits or Limits()
        self.context = context
        self.sampling = sampling or SamplingParams()
        self.request_count = 0

    async def translate_keys(
        self,
        keys_to_translate: dict[str, LocaleTree | FlatKeyMap],
        reference: dict[str, LocaleTree] | None = None,
    ) -> dict[str, FlatKeyMap]:
        """
        Translate every locale's keys.

        Args:
            keys_to_translate: locale -> tree (or flat map) of seed values.
            reference: Locale trees shown to the model as context.

        Returns:
            locale -> flat key map with one entry per input key.
        """
        results: dict[str, FlatKeyMap] = {}

        for locale, keys in keys_to_translate.items():
            flat = flatten_tree(keys)
            for_model, passthrough = split_passthrough(flat)
            translated: FlatKeyMap = {}

            for batch in iter_batches(for_model, self.limits.key, self.limits.char):
                logger.debug(
                    "Translating %d keys (%d chars) for %s",
                    len(batch), batch.char_count, locale,
                )
                response = await self.translate_batch({locale: batch.entries}, reference)
                translated.update(response.get(locale, {}))

            if passthrough:
                logger.debug("Passing through %d empty keys for %s", len(passthrough), locale)
            results[locale] = merge_missing_translations(translated, passthrough)

        return results

    async def translate_batch(
        self,
        keys_by_locale: dict[str, FlatKeyMap],
        reference: dict[str, LocaleTree] | None = None,
    ) -> dict[str, FlatKeyMap]:
        """
        Issue one model request for a batch and merge pass-through keys back.

        Raises:
            ProviderError: if the request fails or the response does not
                match the batch schema.
        """
        for_model: dict[str, FlatKeyMap] = {}
        passthrough: dict[str, FlatKeyMap] = {}
        for locale, keys in keys_by_locale.items():
            translate, keep = split_passthrough(keys)
            if translate:
                for_model[locale] = translate
            if keep:
                passthrough[locale] = keep

        result: dict[str, FlatKeyMap] = {}
        if for_model:
            schema = build_batch_schema({
                locale: list(keys) for locale, keys in for_model.items()
            })
            request = GenerationRequest(
                system_prompt=build_system_prompt(
                    self.i18n.default_locale, self.context, reference,
                ),
                user_prompt=json.dumps(for_model, ensure_ascii=False),
                output_schema=schema,
                sampling=self.sampling,
            )
            self.request_count += 1
            raw = await self.provider.generate(request)
            result = self._validate(schema, raw)

        for locale, keep in passthrough.items():
            result[locale] = merge_missing_translations(result.get(locale, {}), keep)
        return result

    @staticmethod
    def _validate(schema, raw: Any) -> dict[str, FlatKeyMap]:
        try:
            return schema.model_validate(raw).model_dump(by_alias=True)
        except ValidationError as e:
            raise ProviderError(
                "Model response did not match the requested keys",
                str(e),
            ) from e
