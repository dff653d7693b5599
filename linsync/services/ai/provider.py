"""
Model provider abstraction.

The translation pipeline only ever asks one thing of a model: given a
system prompt, a JSON user prompt and a schema, return an object matching
the schema. ``ModelProvider`` is that contract; ``DSPyModelProvider``
fulfils it through DSPy and LiteLLM.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import dspy
from pydantic import BaseModel, ConfigDict, Field, create_model

from linsync.core.errors import ProviderError
from linsync.core.models import LLMOptions
from linsync.services.ai.client import get_adapter, get_lm, validate_options
from linsync.services.ai.signatures import TranslateKeys

logger = logging.getLogger(__name__)


# =============================================================================
# Request models
# =============================================================================


class SamplingParams(BaseModel):
    """Optional sampling parameters forwarded to the model."""

    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    seed: int | None = None

    @classmethod
    def from_options(cls, options: LLMOptions) -> SamplingParams:
        return cls(
            temperature=options.temperature,
            max_tokens=options.max_output_tokens,
            top_p=options.top_p,
            frequency_penalty=options.frequency_penalty,
            presence_penalty=options.presence_penalty,
            seed=options.seed,
        )

    def as_lm_kwargs(self) -> dict[str, Any]:
        """Only the parameters that were actually set."""
        return self.model_dump(exclude_none=True)


class GenerationRequest(BaseModel):
    """One structured-generation call."""

    system_prompt: str
    user_prompt: str
    output_schema: type[BaseModel]
    sampling: SamplingParams = Field(default_factory=SamplingParams)

    model_config = ConfigDict(arbitrary_types_allowed=True)


# =============================================================================
# Provider interface
# =============================================================================


class ModelProvider(ABC):
    """
    Anything that can turn a ``GenerationRequest`` into a JSON object.

    Example:
        async with create_model_provider(options) as provider:
            data = await provider.generate(request)
    """

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> dict[str, Any]:
        """
        Run the request and return the parsed object.

        Raises:
            ProviderError: if the backend call fails.
        """
        pass

    async def open(self) -> None:
        """Acquire any client resources."""
        pass

    async def close(self) -> None:
        """Release client resources."""
        pass

    async def __aenter__(self) -> ModelProvider:
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class DSPyModelProvider(ModelProvider):
    """Structured generation through a DSPy predictor."""

    def __init__(self, options: LLMOptions):
        validate_options(options)
        self.options = options
        self._lm: dspy.LM | None = None
        self._adapter = get_adapter(options.mode)

    @property
    def lm(self) -> dspy.LM:
        if self._lm is None:
            self._lm = get_lm(self.options)
        return self._lm

    async def open(self) -> None:
        if self._lm is None:
            self._lm = get_lm(self.options)

    async def close(self) -> None:
        self._lm = None

    async def generate(self, request: GenerationRequest) -> dict[str, Any]:
        signature = (
            TranslateKeys
            .with_instructions(request.system_prompt)
            .with_updated_fields("translations", type_=request.output_schema)
        )
        predictor = dspy.Predict(signature)
        lm = self.lm

        def _run():
            with dspy.context(lm=lm, adapter=self._adapter):
                return predictor(
                    keys=request.user_prompt,
                    config=request.sampling.as_lm_kwargs(),
                )

        try:
            result = await asyncio.to_thread(_run)
        except Exception as e:
            logger.debug("Model request failed", exc_info=True)
            raise ProviderError(str(e)) from e

        translations = result.translations
        if isinstance(translations, BaseModel):
            return translations.model_dump(by_alias=True)
        return dict(translations)


def create_model_provider(options: LLMOptions) -> ModelProvider:
    """
    Build the provider for the configured options.

    Raises:
        ConfigurationError: before any request if provider or model is
            missing or unsupported.
    """
    return DSPyModelProvider(options)


# =============================================================================
# Batch schema
# =============================================================================


def build_batch_schema(keys_by_locale: dict[str, list[str]]) -> type[BaseModel]:
    """
    Build the strict response schema for one batch.

    Top-level fields are the locale codes; each holds an object whose
    fields are exactly the requested dotted keys, all strings. Field
    names are positional because keys may contain dots or dashes; the
    real names live in the aliases.
    """
    strict = ConfigDict(extra="forbid")
    locale_fields: dict[str, Any] = {}
    for i, (locale, keys) in enumerate(keys_by_locale.items()):
        key_fields = {
            f"k{j}": (str, Field(..., alias=key))
            for j, key in enumerate(keys)
        }
        locale_model = create_model(f"Translations{i}", __config__=strict, **key_fields)
        locale_fields[f"l{i}"] = (locale_model, Field(..., alias=locale))
    return create_model("BatchTranslations", __config__=strict, **locale_fields)
