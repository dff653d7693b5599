"""
Shared plumbing for CLI commands.

A ``CommandContext`` bundles the resolved config with the collaborators a
command needs (storage, console, undo history, model provider factory),
so commands stay plain async functions that tests can call directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from linsync.config import LinConfig
from linsync.console import ICONS, Console
from linsync.core.models import Command, I18nConfig, LLMOptions, LocaleTree
from linsync.engine import FormatAdapter, get_adapter
from linsync.locale import find_nested_key, get_all_keys
from linsync.services.ai import ModelProvider, SamplingParams, create_model_provider
from linsync.storage import FileStorage, LocalFileStorage, UndoHistory, write_locale_tree

logger = logging.getLogger(__name__)


ProviderFactory = Callable[[LLMOptions], ModelProvider]


@dataclass
class CommandContext:
    """
    Everything a command runs against.

    Example:
        ctx = CommandContext.create(resolved.config)
        exit_code = await run_check(ctx, keys=True)
    """

    config: LinConfig
    storage: FileStorage
    console: Console
    undo: UndoHistory
    provider_factory: ProviderFactory = create_model_provider
    sources: list[str] = field(default_factory=list)
    i18n_sources: list[str] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        config: LinConfig,
        storage: FileStorage | None = None,
        console: Console | None = None,
        provider_factory: ProviderFactory | None = None,
        sources: list[str] | None = None,
        i18n_sources: list[str] | None = None,
    ) -> CommandContext:
        storage = storage or LocalFileStorage(config.cwd)
        return cls(
            config=config,
            storage=storage,
            console=console or Console(),
            undo=UndoHistory(storage, enabled=config.undo),
            provider_factory=provider_factory or create_model_provider,
            sources=sources or [],
            i18n_sources=i18n_sources or [],
        )

    @property
    def i18n(self) -> I18nConfig:
        return self.config.i18n

    @property
    def sampling(self) -> SamplingParams:
        return SamplingParams.from_options(self.config.options)

    def adapters_for(self, command: Command) -> list[FormatAdapter]:
        """Selected adapters that declare support for ``command``."""
        adapters = []
        for kind in self.config.adapter:
            adapter = get_adapter(kind)
            if adapter.supports(command):
                adapters.append(adapter)
            else:
                logger.debug("Adapter %s does not support %s, skipping", kind.value, command.value)
        return adapters

    def make_provider(self) -> ModelProvider:
        """
        Build the model provider.

        Raises:
            ConfigurationError: if provider or model is missing or unknown.
        """
        return self.provider_factory(self.config.options)

    async def commit(self, files: dict[str, LocaleTree]) -> None:
        """Snapshot then write buffered locale trees."""
        if not files:
            return
        await self.undo.save(list(files))
        for path, tree in files.items():
            await write_locale_tree(self.storage, path, tree)


def samples(keys: list[str], limit: int = 10) -> str:
    """```a`, `b`...`` preview of a key list."""
    shown = keys[:limit]
    more = "..." if len(keys) > len(shown) else ""
    return ", ".join(f"`{k}`" for k in shown) + more


def key_suggestions(tree: LocaleTree, key: str, suggest_on_exact: bool = False) -> list[str] | None:
    """
    Keys to offer instead of acting on ``key``.

    A key ending in ``.`` or naming a branch lists the leaves under it.
    With ``suggest_on_exact`` an existing leaf is offered back as itself.
    Returns None when ``key`` should be acted on as given.
    """
    prefix = key[:-1] if key.endswith(".") else key
    value = find_nested_key(tree, prefix).value if prefix else tree
    if isinstance(value, dict):
        return [f"{prefix}.{k}" if prefix else k for k in get_all_keys(value)]
    if key.endswith("."):
        return []
    if suggest_on_exact and value is not None:
        return [prefix]
    return None


def provide_suggestions(console: Console, tree: LocaleTree, key: str, suggest_on_exact: bool = False) -> bool:
    """Print suggestions for ``key``. Returns True when any were due."""
    suggestions = key_suggestions(tree, key, suggest_on_exact)
    if suggestions is None:
        return False
    if not suggestions:
        console.log(ICONS.WARNING, f"No keys found under `{key.rstrip('.')}`")
        return True
    if suggest_on_exact and suggestions == [key]:
        console.log(ICONS.INFO, f"Key `{key}` already exists. Pass a translation with `--force` to overwrite it.")
        return True
    console.log(ICONS.INFO, f"Keys under `{key.rstrip('.')}`:")
    for suggestion in suggestions[:20]:
        console.log(f"  {suggestion}")
    if len(suggestions) > 20:
        console.log(f"  ...and {len(suggestions) - 20} more")
    return True
