"""
LLM client configuration using DSPy.

Every provider goes through LiteLLM, so building a client is mostly a
matter of picking the right model prefix and passing credentials.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import dspy

from linsync.core.errors import ConfigurationError
from linsync.core.models import LLMOptions, OutputMode, Provider

logger = logging.getLogger(__name__)


# LiteLLM model prefix per provider
MODEL_PREFIXES: dict[Provider, str] = {
    Provider.OPENAI: "openai",
    Provider.ANTHROPIC: "anthropic",
    Provider.GOOGLE: "gemini",
    Provider.XAI: "xai",
    Provider.MISTRAL: "mistral",
    Provider.GROQ: "groq",
    Provider.CEREBRAS: "cerebras",
    Provider.AZURE: "azure",
}

# Environment fallbacks when no api_key is configured
API_KEY_ENV: dict[Provider, tuple[str, ...]] = {
    Provider.OPENAI: ("OPENAI_API_KEY",),
    Provider.ANTHROPIC: ("ANTHROPIC_API_KEY",),
    # Accept both GOOGLE_API_KEY and GEMINI_API_KEY
    Provider.GOOGLE: ("GOOGLE_GENERATIVE_AI_API_KEY", "GOOGLE_API_KEY", "GEMINI_API_KEY"),
    Provider.XAI: ("XAI_API_KEY",),
    Provider.MISTRAL: ("MISTRAL_API_KEY",),
    Provider.GROQ: ("GROQ_API_KEY",),
    Provider.CEREBRAS: ("CEREBRAS_API_KEY",),
    Provider.AZURE: ("AZURE_API_KEY",),
}


def validate_options(options: LLMOptions) -> Provider:
    """
    Check that a provider and model are set and the provider is known.

    Returns:
        The provider as an enum member.

    Raises:
        ConfigurationError: on a missing or unsupported provider or model.
    """
    if not options.provider or not options.model:
        raise ConfigurationError(
            "Provider or model missing in config options.",
            [f"Provider: {options.provider}", f"Model: {options.model}"],
        )
    try:
        return Provider(options.provider)
    except ValueError:
        raise ConfigurationError(
            f"Unsupported provider: {options.provider}",
            f"Supported providers are: {', '.join(p.value for p in Provider)}.",
        ) from None


def resolve_api_key(options: LLMOptions) -> str | None:
    """Configured key first, then the provider's environment variables."""
    if options.api_key:
        return options.api_key
    provider = Provider(options.provider)
    for name in API_KEY_ENV.get(provider, ()):
        value = os.getenv(name)
        if value:
            return value
    return None


def get_lm(options: LLMOptions) -> dspy.LM:
    """
    Build a DSPy language model for the configured provider.

    Args:
        options: Provider, model and sampling settings.

    Returns:
        Configured DSPy LM instance.
    """
    provider = validate_options(options)

    kwargs: dict[str, Any] = {
        # Failed requests surface to the caller instead of being retried
        "num_retries": 0,
    }
    api_key = resolve_api_key(options)
    if api_key:
        kwargs["api_key"] = api_key

    if provider == Provider.AZURE:
        if options.base_url:
            kwargs["api_base"] = options.base_url
        elif options.resource_name:
            kwargs["api_base"] = f"https://{options.resource_name}.openai.azure.com"
        if options.api_version:
            kwargs["api_version"] = options.api_version
    elif options.base_url:
        kwargs["api_base"] = options.base_url

    model = f"{MODEL_PREFIXES[provider]}/{options.model}"
    logger.debug("Creating LM %s", model)
    return dspy.LM(model=model, **kwargs)


def get_adapter(mode: OutputMode | str) -> dspy.Adapter | None:
    """DSPy adapter for the structured-output mode (None keeps the default)."""
    if OutputMode(mode) == OutputMode.JSON:
        return dspy.JSONAdapter()
    return None
