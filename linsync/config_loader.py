"""
Configuration loader.

Resolves the ``LinConfig`` a command runs with. Sources, lowest
precedence first:

1. Built-in defaults
2. Environment settings (``LIN_*``, ``.env``)
3. ``lin.config.yaml`` / ``lin.config.yml`` / ``.linrc.yaml`` in cwd
4. A named preset selected with ``--model <preset>``
5. CLI arguments

Locales come from a fixed list of resolvers, tried in order, each
returning a normalized ``I18nConfig`` or nothing.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import ValidationError

from linsync.config import LinConfig, Settings, get_settings
from linsync.core.errors import ConfigurationError
from linsync.core.models import AdapterKind, I18nConfig, OutputMode, Provider, SortOrder

logger = logging.getLogger(__name__)


CONFIG_FILES = ("lin.config.yaml", "lin.config.yml", ".linrc.yaml", ".linrc.yml")

ADAPTER_ALIASES = {
    "md": AdapterKind.MARKDOWN.value,
    "mdx": AdapterKind.MARKDOWN.value,
    "j": AdapterKind.JSON.value,
}


@dataclass
class ResolvedConfig:
    config: LinConfig
    sources: list[str] = field(default_factory=list)
    i18n_sources: list[str] = field(default_factory=list)


# =============================================================================
# Helpers
# =============================================================================


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; lists are replaced."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _check_choice(value: Any, choices: list[str], label: str) -> None:
    if value is not None and str(value) not in choices:
        raise ConfigurationError(
            f'Invalid {label} "{value}"',
            f"Available {label}s: {', '.join(choices)}",
        )


def _load_yaml(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse {path.name}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path.name} must contain a mapping at the top level")
    return data


def _load_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Could not parse {path.name}: {e}") from e


# =============================================================================
# I18n resolvers
# =============================================================================


I18nResolver = Callable[[Path, dict[str, Any], Settings], "tuple[I18nConfig, str] | None"]


def _from_lin_config(cwd: Path, data: dict[str, Any], settings: Settings):
    section = data.get("i18n")
    if not isinstance(section, dict) or not section.get("locales"):
        return None
    return I18nConfig.model_validate(section), "lin config"


def _from_i18next_parser(cwd: Path, data: dict[str, Any], settings: Settings):
    path = cwd / "i18next-parser.config.json"
    if not path.is_file():
        return None
    parsed = _load_json(path)
    locales = parsed.get("locales") if isinstance(parsed, dict) else None
    if not locales:
        return None
    default = parsed.get("defaultLocale") or locales[0]
    return I18nConfig(locales=list(locales), default_locale=default), path.name


def _from_angular(cwd: Path, data: dict[str, Any], settings: Settings):
    path = cwd / "angular.json"
    if not path.is_file():
        return None
    parsed = _load_json(path)
    projects = parsed.get("projects") or {}
    name = parsed.get("defaultProject") or next(iter(projects), None)
    project = projects.get(name) if name else None
    if not project or not project.get("i18n"):
        return None
    i18n = project["i18n"]
    source = i18n.get("sourceLocale") or settings.default_locale
    if isinstance(source, dict):
        source = source.get("code") or settings.default_locale
    locales = [source] + [l for l in (i18n.get("locales") or {}) if l != source]
    return I18nConfig(locales=locales, default_locale=source), path.name


def _from_locale_dir(cwd: Path, data: dict[str, Any], settings: Settings):
    directory = (data.get("adapters") or {}).get("json", {}) or {}
    locale_dir = cwd / (directory.get("directory") or "locales")
    if not locale_dir.is_dir():
        return None
    locales = sorted(p.stem for p in locale_dir.glob("*.json"))
    if not locales:
        return None
    default = settings.default_locale
    if default not in locales:
        prefix = default.split("-")[0].lower()
        default = next((l for l in locales if l.lower().split("-")[0] == prefix), locales[0])
    return I18nConfig(locales=locales, default_locale=default), f"{locale_dir.name}/"


I18N_RESOLVERS: list[I18nResolver] = [
    _from_lin_config,
    _from_i18next_parser,
    _from_angular,
    _from_locale_dir,
]


def resolve_i18n(cwd: Path, data: dict[str, Any], settings: Settings) -> tuple[I18nConfig, list[str]]:
    """
    First resolver that recognises the project wins.

    Raises:
        ConfigurationError: if no resolver matches.
    """
    for resolver in I18N_RESOLVERS:
        result = resolver(cwd, data, settings)
        if result is not None:
            i18n, source = result
            if i18n.default_locale not in i18n.locales:
                i18n.locales.insert(0, i18n.default_locale)
            logger.debug("Locales from %s: %s", source, i18n.locales)
            return i18n, [source]
    raise ConfigurationError(
        "No i18n configuration found.",
        [
            "Add an `i18n` section with `locales` and `defaultLocale` to lin.config.yaml,",
            "or create a locales directory containing <locale>.json files.",
        ],
    )


# =============================================================================
# Config loader
# =============================================================================


class ConfigLoader:
    """
    Builds a ``LinConfig`` for a project directory.

    Usage:
        loader = ConfigLoader(cwd=".")
        resolved = loader.resolve({"adapter": ["md"], "options": {"model": "fast"}})
    """

    def __init__(self, cwd: Path | str = ".", settings: Settings | None = None):
        self.cwd = Path(cwd)
        self.settings = settings or get_settings()

    def find_config_file(self) -> Path | None:
        if self.settings.config_file:
            path = self.cwd / self.settings.config_file
            if not path.is_file():
                raise ConfigurationError(f"Config file not found: {self.settings.config_file}")
            return path
        for name in CONFIG_FILES:
            path = self.cwd / name
            if path.is_file():
                return path
        return None

    def settings_layer(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "provider": self.settings.provider,
            "model": self.settings.model,
        }
        if self.settings.api_key:
            options["api_key"] = self.settings.api_key
        if self.settings.temperature is not None:
            options["temperature"] = self.settings.temperature
        return {
            "debug": self.settings.debug,
            "undo": self.settings.undo,
            "options": options,
        }

    def resolve(self, overrides: dict[str, Any] | None = None) -> ResolvedConfig:
        """
        Merge every layer and validate the result.

        Raises:
            ConfigurationError: on any invalid value, before any project
                file other than configuration is read.
        """
        overrides = copy.deepcopy(overrides or {})
        config_path = self.find_config_file()
        file_data = _load_yaml(config_path) if config_path else {}
        sources = [str(config_path)] if config_path else []

        # A --model value naming a preset selects the preset instead
        preset_layer: dict[str, Any] = {}
        requested_model = (overrides.get("options") or {}).get("model")
        presets = file_data.get("presets") or {}
        if requested_model and requested_model in presets:
            preset = dict(presets[requested_model])
            preset_context = preset.pop("context", None)
            preset_layer = {"options": preset}
            if preset_context:
                preset_layer["context"] = preset_context
            del overrides["options"]["model"]
            logger.debug("Using preset %s", requested_model)

        merged = deep_merge(self.settings_layer(), file_data)
        merged = deep_merge(merged, preset_layer)
        merged = deep_merge(merged, overrides)
        merged["cwd"] = str(self.cwd)

        self._validate_choices(merged)

        if isinstance(overrides.get("i18n"), dict):
            i18n = I18nConfig.model_validate(overrides["i18n"])
            i18n_sources = ["arguments"]
        else:
            i18n, i18n_sources = resolve_i18n(self.cwd, file_data, self.settings)
        merged["i18n"] = i18n.model_dump(by_alias=True)

        requested = merged.pop("adapter", None) or "all"
        try:
            config = LinConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid configuration",
                [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
            ) from e

        config.adapter = self._select_adapters(requested, config)
        if config.options.provider != Provider.AZURE:
            config.options.resource_name = None
            config.options.api_version = None

        return ResolvedConfig(config=config, sources=sources, i18n_sources=i18n_sources)

    @staticmethod
    def _validate_choices(merged: dict[str, Any]) -> None:
        options = merged.get("options") or {}
        _check_choice(options.get("provider"), [p.value for p in Provider], "provider")
        _check_choice(options.get("mode"), [m.value for m in OutputMode], "mode")
        sort = ((merged.get("adapters") or {}).get("json") or {}).get("sort")
        _check_choice(sort, [s.value for s in SortOrder], "sort")
        if not options.get("provider") or not options.get("model"):
            raise ConfigurationError(
                "Provider or model not configured.",
                "Please configure them in your lin.config.yaml or via CLI arguments.",
            )

    @staticmethod
    def _select_adapters(requested: str | list[str], config: LinConfig) -> list[AdapterKind]:
        names = requested if isinstance(requested, list) else [requested]
        names = [ADAPTER_ALIASES.get(str(n), str(n)) for n in names] or ["all"]
        configured = config.adapters.configured

        if "all" in names:
            if not configured:
                raise ConfigurationError(
                    "No adapters are configured.",
                    "Please configure at least one adapter in your lin.config.yaml.",
                )
            return configured

        selected: list[AdapterKind] = []
        for name in names:
            try:
                kind = AdapterKind(name)
            except ValueError:
                raise ConfigurationError(
                    f'Invalid adapter: "{name}"',
                    f"Valid adapters are: {', '.join(k.value for k in AdapterKind)}.",
                ) from None
            if kind not in configured:
                hint = (
                    "Please add a 'directory' for it in your lin.config.yaml."
                    if kind == AdapterKind.JSON
                    else "Please add a 'files' list for it in your lin.config.yaml."
                )
                raise ConfigurationError(f"The '{kind.value}' adapter is not configured.", hint)
            if kind not in selected:
                selected.append(kind)
        return selected


def resolve_config(overrides: dict[str, Any] | None = None, cwd: Path | str | None = None) -> ResolvedConfig:
    """Convenience function: resolve config for ``cwd`` (or the override's cwd)."""
    overrides = overrides or {}
    return ConfigLoader(cwd or overrides.get("cwd") or ".").resolve(overrides)
