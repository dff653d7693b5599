"""
Tests for configuration loading and validation.
"""

import json

import pytest
import yaml

from linsync.config import LinConfig, Settings
from linsync.config_loader import ConfigLoader, deep_merge
from linsync.core.errors import ConfigurationError
from linsync.core.models import AdapterKind, I18nConfig, Provider


@pytest.fixture
def settings():
    return Settings(_env_file=None, provider="openai", model="gpt-4o")


def write_config(path, data):
    (path / "lin.config.yaml").write_text(yaml.safe_dump(data))


@pytest.fixture
def project(tmp_path):
    write_config(tmp_path, {
        "i18n": {"locales": ["en", "fr"], "defaultLocale": "en"},
        "context": "A recipe app",
        "presets": {"fast": {"provider": "anthropic", "model": "claude-haiku", "context": "Short"}},
        "adapters": {"markdown": {"files": ["docs/**/*.md"]}},
    })
    return tmp_path


# =============================================================================
# Layering
# =============================================================================


class TestLayering:
    def test_deep_merge(self):
        merged = deep_merge({"a": {"b": 1, "c": 2}, "l": [1]}, {"a": {"b": 3, "d": None}, "l": [2]})
        assert merged == {"a": {"b": 3, "c": 2}, "l": [2]}

    def test_file_values(self, project, settings):
        resolved = ConfigLoader(project, settings).resolve()
        config = resolved.config
        assert config.i18n.locales == ["en", "fr"]
        assert config.context == "A recipe app"
        assert config.options.provider == Provider.OPENAI
        assert resolved.sources[0].endswith("lin.config.yaml")
        assert resolved.i18n_sources == ["lin config"]

    def test_cli_overrides_file(self, project, settings):
        config = ConfigLoader(project, settings).resolve({
            "context": "CLI",
            "options": {"model": "gpt-4o-mini", "temperature": "0.5"},
            "limits": {"key": "5"},
        }).config
        assert config.context == "CLI"
        assert config.options.model == "gpt-4o-mini"
        assert config.options.temperature == 0.5
        assert config.limits.key == 5
        assert config.limits.char == 4000

    def test_preset(self, project, settings):
        config = ConfigLoader(project, settings).resolve({"options": {"model": "fast"}}).config
        assert config.options.provider == Provider.ANTHROPIC
        assert config.options.model == "claude-haiku"
        assert config.context == "Short"

    def test_environment_settings(self, tmp_path):
        write_config(tmp_path, {"i18n": {"locales": ["en"], "defaultLocale": "en"}})
        settings = Settings(_env_file=None, provider="groq", model="llama", undo=False)
        config = ConfigLoader(tmp_path, settings).resolve().config
        assert config.options.provider == Provider.GROQ
        assert config.undo is False


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    @pytest.mark.parametrize("overrides", [
        {"options": {"provider": "nope"}},
        {"options": {"mode": "xml"}},
        {"limits": {"key": "abc"}},
        {"limits": {"char": "0"}},
        {"adapters": {"json": {"sort": "zyx"}}},
        {"adapter": ["yaml"]},
    ])
    def test_invalid_values(self, project, settings, overrides):
        with pytest.raises(ConfigurationError):
            ConfigLoader(project, settings).resolve(overrides)

    def test_missing_model(self, project):
        settings = Settings(_env_file=None, provider="openai", model="")
        with pytest.raises(ConfigurationError) as exc:
            ConfigLoader(project, settings).resolve()
        assert "Provider or model" in exc.value.message

    def test_invalid_yaml(self, tmp_path, settings):
        (tmp_path / "lin.config.yaml").write_text("a: [unclosed")
        with pytest.raises(ConfigurationError):
            ConfigLoader(tmp_path, settings).resolve()


class TestAdapterSelection:
    def test_all_expands_to_configured(self, project, settings):
        config = ConfigLoader(project, settings).resolve().config
        assert config.adapter == [AdapterKind.JSON, AdapterKind.MARKDOWN]

    def test_alias(self, project, settings):
        config = ConfigLoader(project, settings).resolve({"adapter": ["md"]}).config
        assert config.adapter == [AdapterKind.MARKDOWN]

    def test_unconfigured_adapter(self, tmp_path, settings):
        write_config(tmp_path, {"i18n": {"locales": ["en"], "defaultLocale": "en"}})
        with pytest.raises(ConfigurationError) as exc:
            ConfigLoader(tmp_path, settings).resolve({"adapter": ["markdown"]})
        assert "not configured" in exc.value.message


# =============================================================================
# I18n resolution
# =============================================================================


class TestI18nResolution:
    def test_locale_directory_scan(self, tmp_path):
        (tmp_path / "locales").mkdir()
        for name in ("en-US", "fr-FR"):
            (tmp_path / "locales" / f"{name}.json").write_text("{}")
        settings = Settings(_env_file=None, default_locale="en")
        config = ConfigLoader(tmp_path, settings).resolve().config
        assert config.i18n.locales == ["en-US", "fr-FR"]
        assert config.i18n.default_locale == "en-US"

    def test_i18next_parser(self, tmp_path, settings):
        (tmp_path / "i18next-parser.config.json").write_text(json.dumps({"locales": ["de", "en"]}))
        config = ConfigLoader(tmp_path, settings).resolve().config
        assert config.i18n.locales == ["de", "en"]
        assert config.i18n.default_locale == "de"

    def test_angular(self, tmp_path, settings):
        (tmp_path / "angular.json").write_text(json.dumps({
            "projects": {"app": {"i18n": {"sourceLocale": "en", "locales": {"fr": "x.xlf", "es": "y.xlf"}}}},
        }))
        config = ConfigLoader(tmp_path, settings).resolve().config
        assert config.i18n.locales == ["en", "fr", "es"]
        assert config.i18n.default_locale == "en"

    def test_default_locale_added(self, tmp_path, settings):
        write_config(tmp_path, {"i18n": {"locales": ["fr"], "defaultLocale": "en"}})
        config = ConfigLoader(tmp_path, settings).resolve().config
        assert config.i18n.locales == ["en", "fr"]

    def test_no_i18n(self, tmp_path, settings):
        with pytest.raises(ConfigurationError):
            ConfigLoader(tmp_path, settings).resolve()

    def test_explicit_i18n_override(self, tmp_path, settings):
        resolved = ConfigLoader(tmp_path, settings).resolve({"i18n": {"locales": ["en", "it"]}})
        assert resolved.config.i18n.locales == ["en", "it"]
        assert resolved.i18n_sources == ["arguments"]


# =============================================================================
# Resolved config
# =============================================================================


class TestLinConfig:
    def test_paths(self):
        config = LinConfig(i18n=I18nConfig(locales=["en"], default_locale="en"))
        assert config.locale_path("fr") == "locales/fr.json"
        assert config.snapshot_path("fr") == ".lin/markdown/fr.json"

    def test_with_alias(self):
        assert LinConfig.model_validate({"with": "def"}).with_ == "def"
