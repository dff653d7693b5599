"""
Tests for locale selection and code key-usage scanning.
"""

import pytest

from linsync.core.errors import ConfigurationError
from linsync.core.models import I18nConfig
from linsync.i18n import (
    collect_used_keys,
    find_key_usages,
    get_language_name,
    match_locale,
    normalize_locales,
    resolve_context_locales,
)


@pytest.fixture
def config():
    return I18nConfig(locales=["en-US", "fr-FR", "de", "pt-BR"], default_locale="en-US")


# =============================================================================
# Locale selection
# =============================================================================


class TestLocaleSelection:
    def test_exact_and_case_insensitive(self, config):
        assert match_locale("fr-FR", config) == "fr-FR"
        assert match_locale("fr-fr", config) == "fr-FR"
        assert match_locale("pt_br", config) == "pt-BR"

    def test_language_prefix(self, config):
        assert match_locale("en", config) == "en-US"

    def test_def_alias(self, config):
        assert match_locale("def", config) == "en-US"

    def test_unknown_locale(self, config):
        with pytest.raises(ConfigurationError) as exc:
            match_locale("ja", config)
        assert "fr-FR" in exc.value.hint

    def test_normalize(self, config):
        assert normalize_locales(None, config) == []
        assert normalize_locales(["fr", "fr-FR", "de"], config) == ["fr-FR", "de"]
        assert normalize_locales(["all"], config) == config.locales

    def test_target_locales(self, config):
        assert config.target_locales == ["fr-FR", "de", "pt-BR"]

    def test_language_names(self):
        assert get_language_name("fr-CA") == "French"
        assert get_language_name("xx-YY") == "xx-YY"


class TestContextLocales:
    def test_profiles(self, config):
        batch = ["fr-FR", "de"]
        assert resolve_context_locales("none", config, batch) == []
        assert resolve_context_locales("def", config, batch) == ["en-US"]
        assert resolve_context_locales("tgt", config, batch) == batch
        assert resolve_context_locales("both", config, batch) == ["en-US", "fr-FR", "de"]
        assert resolve_context_locales("all", config, batch) == config.locales

    def test_explicit_locales(self, config):
        assert resolve_context_locales(["de", "fr"], config, ["pt-BR"]) == ["de", "fr-FR"]
        assert resolve_context_locales("de", config, ["pt-BR"]) == ["de"]

    def test_unknown_profile_is_a_config_error(self, config):
        with pytest.raises(ConfigurationError):
            resolve_context_locales("everything", config, [])


# =============================================================================
# Key usage
# =============================================================================


class TestKeyUsage:
    def test_finds_calls(self):
        source = (
            "const a = t('ui.title')\n"
            'const b = $t("ui.save", "Save")\n'
            "i18n.t(`ui.cancel`)\n"
        )
        usages = find_key_usages(source, "src/app.ts")
        assert [(u.key, u.default_value, u.line) for u in usages] == [
            ("ui.title", None, 1),
            ("ui.save", "Save", 2),
            ("ui.cancel", None, 3),
        ]
        assert usages[0].path == "src/app.ts"

    def test_ignores_dynamic_and_lookalikes(self):
        source = "t(`ui.${name}`)\nformat('x')\nobj.t('nope')\nt(key)\nt('ui.')\n"
        assert find_key_usages(source) == []

    def test_escaped_quotes(self):
        usages = find_key_usages("t('a.b', 'It\\'s here')")
        assert usages[0].default_value == "It's here"

    def test_custom_functions(self):
        usages = find_key_usages("translate('a.b'); t('c')", functions=("translate",))
        assert [u.key for u in usages] == ["a.b"]

    def test_collect_first_non_empty_default(self):
        usages = find_key_usages("t('a')\nt('a', 'A')\nt('a', 'Other')\nt('b')")
        assert collect_used_keys(usages) == {"a": "A", "b": None}
