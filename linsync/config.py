"""
Application configuration.

``Settings`` holds environment defaults (``LIN_*`` variables and
``.env``). ``LinConfig`` is the fully resolved configuration a command
runs with; ``linsync.config_loader`` builds it from defaults, settings,
the project config file and CLI arguments.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from linsync.core.models import AdapterKind, I18nConfig, Limits, LLMOptions, SortOrder


class Settings(BaseSettings):
    """Environment defaults."""

    # ==========================================================================
    # AI / LLM
    # ==========================================================================

    provider: str = "openai"
    model: str = "gpt-4o"
    api_key: str = ""
    temperature: float | None = None

    # ==========================================================================
    # Project
    # ==========================================================================

    config_file: str = ""  # Explicit config path, relative to cwd
    default_locale: str = "en-US"  # Used when locales come from a directory scan
    debug: bool = False
    undo: bool = True

    model_config = SettingsConfigDict(
        env_prefix="LIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# =============================================================================
# Resolved config
# =============================================================================


DEFAULT_PARSER_INPUT = ["src/**/*.{js,jsx,ts,tsx,vue,svelte,astro}"]


class ParserConfig(BaseModel):
    """Where ``check`` looks for translation key usage."""

    input: list[str] = Field(default_factory=lambda: list(DEFAULT_PARSER_INPUT))
    functions: list[str] = Field(default_factory=lambda: ["t", "$t", "i18n.t", "i18next.t"])


class JsonAdapterConfig(BaseModel):
    directory: str = "locales"
    sort: SortOrder | None = None


class MarkdownAdapterConfig(BaseModel):
    files: list[str] = Field(default_factory=list)
    locales_dir: str = ".lin/markdown"
    # Output path pattern; {locale} and {path} are substituted
    output: str | None = None


class AdaptersConfig(BaseModel):
    json_: JsonAdapterConfig = Field(default_factory=JsonAdapterConfig, alias="json")
    markdown: MarkdownAdapterConfig = Field(default_factory=MarkdownAdapterConfig)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def configured(self) -> list[AdapterKind]:
        """Adapters with enough configuration to run."""
        kinds = []
        if self.json_.directory:
            kinds.append(AdapterKind.JSON)
        if self.markdown.files:
            kinds.append(AdapterKind.MARKDOWN)
        return kinds


class LinConfig(BaseModel):
    """
    Fully resolved configuration for one command invocation.

    Example:
        config = LinConfig(i18n=I18nConfig(locales=["en-US", "fr-FR"]))
        config.locale_path("fr-FR")  # "locales/fr-FR.json"
    """

    cwd: str = "."
    debug: bool = False
    undo: bool = True
    adapter: list[AdapterKind] = Field(default_factory=lambda: [AdapterKind.JSON])
    context: str = ""
    with_: str | list[str] = Field(default="none", alias="with")
    limits: Limits = Field(default_factory=Limits)
    options: LLMOptions = Field(default_factory=LLMOptions)
    presets: dict[str, dict[str, Any]] = Field(default_factory=dict)
    parser: ParserConfig = Field(default_factory=ParserConfig)
    adapters: AdaptersConfig = Field(default_factory=AdaptersConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)

    model_config = ConfigDict(populate_by_name=True)

    def locale_path(self, locale: str) -> str:
        """Relative path of a JSON locale file."""
        return f"{self.adapters.json_.directory.rstrip('/')}/{locale}.json"

    def snapshot_path(self, locale: str) -> str:
        """Relative path of a markdown unit snapshot."""
        return f"{self.adapters.markdown.locales_dir.rstrip('/')}/{locale}.json"
