"""
AI services using DSPy.

Only structured translation is needed: see ``ModelProvider``.
"""

from linsync.services.ai.client import get_lm, validate_options
from linsync.services.ai.provider import (
    DSPyModelProvider,
    GenerationRequest,
    ModelProvider,
    SamplingParams,
    build_batch_schema,
    create_model_provider,
)
from linsync.services.ai.signatures import TranslateKeys

__all__ = [
    "get_lm",
    "validate_options",
    "DSPyModelProvider",
    "GenerationRequest",
    "ModelProvider",
    "SamplingParams",
    "build_batch_schema",
    "create_model_provider",
    "TranslateKeys",
]
