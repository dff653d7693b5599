"""
Tests for the command line entry point.
"""

import json

import pytest

from linsync.main import build_parser, config_overrides, main


@pytest.fixture
def project(tmp_path):
    (tmp_path / "locales").mkdir()
    (tmp_path / "locales" / "en-US.json").write_text(json.dumps({"a": "A"}))
    (tmp_path / "locales" / "fr-FR.json").write_text(json.dumps({"a": "Á"}))
    return tmp_path


class TestArguments:
    def test_overrides(self):
        args = build_parser().parse_args([
            "sync", "-l", "fr", "-l", "de", "--model", "fast", "--limit-key", "5", "--no-undo",
        ])
        overrides = config_overrides(args)
        assert args.locale == ["fr", "de"]
        assert overrides["options"]["model"] == "fast"
        assert overrides["limits"]["key"] == "5"
        assert overrides["undo"] is False
        assert overrides["debug"] is None

    def test_add_text_is_joined_later(self):
        args = build_parser().parse_args(["add", "ui.title", "Hello", "world"])
        assert args.text == ["Hello", "world"]

    def test_check_has_no_llm_args(self):
        args = build_parser().parse_args(["check", "--keys"])
        overrides = config_overrides(args)
        assert overrides["options"]["provider"] is None


class TestMain:
    def test_check_keys_in_sync(self, project, capsys):
        assert main(["check", "--keys", "--cwd", str(project)]) == 0
        assert "All locales are up to date." in capsys.readouterr().out

    def test_configuration_error_exits_1(self, project, capsys):
        assert main(["sync", "--cwd", str(project), "--provider", "nope"]) == 1
        out = capsys.readouterr().out
        assert 'Invalid provider "nope"' in out
        assert "openai" in out
