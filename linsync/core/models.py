"""
Core data models for linsync.

These describe the normalized shapes every command works with: which
locales exist, how large a model request may grow, and which model to
ask. They are plain pydantic models so config files and CLI arguments
validate the same way.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# A locale tree maps key segments to either a string leaf or a nested tree.
LocaleTree = dict[str, Union[str, "LocaleTree"]]
FlatKeyMap = dict[str, str]


# =============================================================================
# Enums
# =============================================================================


class Command(str, Enum):
    """CLI verbs an adapter can declare support for."""
    
    ADD = "add"
    CHECK = "check"
    SYNC = "sync"
    DEL = "del"
    EDIT = "edit"


class AdapterKind(str, Enum):
    """The closed set of content formats linsync understands."""
    
    JSON = "json"
    MARKDOWN = "markdown"


class Provider(str, Enum):
    """Supported model providers."""
    
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    XAI = "xai"
    MISTRAL = "mistral"
    GROQ = "groq"
    CEREBRAS = "cerebras"
    AZURE = "azure"


class OutputMode(str, Enum):
    """How the model is asked to produce structured output."""
    
    AUTO = "auto"
    JSON = "json"
    TOOL = "tool"


class SortOrder(str, Enum):
    """Key ordering for ``check --sort``."""
    
    ABC = "abc"  # Alphabetical
    DEF = "def"  # Same order as the default locale


# =============================================================================
# I18n
# =============================================================================


class I18nConfig(BaseModel):
    """Normalized locale list, whatever framework config it came from."""
    
    locales: list[str] = Field(default_factory=list)
    default_locale: str = Field(default="en-US", alias="defaultLocale")
    
    model_config = ConfigDict(populate_by_name=True)
    
    @property
    def target_locales(self) -> list[str]:
        """Every locale except the default one."""
        return [locale for locale in self.locales if locale != self.default_locale]


# =============================================================================
# Limits and LLM options
# =============================================================================


class Limits(BaseModel):
    """Batching limits for translation requests."""
    
    locale: int = 10  # Locales handled per command batch
    key: int = 50  # Keys per model request
    char: int = 4000  # Total value characters per model request
    
    @field_validator("locale", "key", "char", mode="before")
    @classmethod
    def _positive_int(cls, value: Any) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid limit {value!r}")
        if number <= 0:
            raise ValueError(f"Limit must be positive, got {number}")
        return number


class LLMOptions(BaseModel):
    """Model selection and sampling parameters."""
    
    provider: Provider | None = Provider.OPENAI
    model: str | None = "gpt-4o"
    api_key: str | None = None
    temperature: float | None = 0
    max_output_tokens: int | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    seed: int | None = None
    mode: OutputMode = OutputMode.AUTO
    
    # Azure only
    resource_name: str | None = None
    api_version: str | None = None
    base_url: str | None = None
    
    model_config = ConfigDict(use_enum_values=False, protected_namespaces=())


class KeyCountDelta(BaseModel):
    """Leaf counts for one locale around a mutating operation."""
    
    locale: str
    before: int = 0
    after: int = 0
    
    @property
    def delta(self) -> int:
        return self.after - self.before
