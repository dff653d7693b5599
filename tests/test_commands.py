"""
Tests for the CLI commands, run against an in-memory project.

Fixture project: ``en`` (default) has ``ui.title`` and ``ui.save``,
``fr`` has only ``ui.title``, ``de`` has no file yet.
"""

import json

import pytest
from conftest import locale_file, output

from linsync.commands import key_suggestions, run_add, run_check, run_del, run_edit, run_sync, run_undo
from linsync.core.errors import ConfigurationError
from linsync.core.models import AdapterKind


def read(storage, path):
    return json.loads(storage.files[path])


def undo_snapshots(storage):
    return [p for p in storage.files if p.startswith(".lin/undo/")]


MARKDOWN = {
    "adapter": [AdapterKind.MARKDOWN],
    "adapters": {"markdown": {"files": ["docs/**/*.md"]}},
}


# =============================================================================
# sync
# =============================================================================


class TestSyncJson:
    @pytest.mark.asyncio
    async def test_translates_missing_keys(self, make_ctx, storage, provider):
        ctx = make_ctx()

        assert await run_sync(ctx) == 0

        assert read(storage, "locales/fr.json") == {"ui": {"title": "Accueil", "save": "Save [fr]"}}
        assert read(storage, "locales/de.json") == {"ui": {"title": "Home [de]", "save": "Save [de]"}}
        assert len(provider.requests) == 2
        assert provider.opened == 1 and provider.closed == 1
        assert len(undo_snapshots(storage)) == 1
        assert "fr (+1), de (+2)" in output(ctx.console)

    @pytest.mark.asyncio
    async def test_second_run_is_a_no_op(self, make_ctx, storage, provider):
        await run_sync(make_ctx())
        requests = len(provider.requests)

        ctx = make_ctx()
        await run_sync(ctx)

        assert len(provider.requests) == requests
        assert "All locales are up to date." in output(ctx.console)

    @pytest.mark.asyncio
    async def test_single_locale(self, make_ctx, storage):
        await run_sync(make_ctx(), locales=["fr"])
        assert "locales/de.json" not in storage.files

    @pytest.mark.asyncio
    async def test_context_profile_sends_reference(self, make_ctx, provider):
        await run_sync(make_ctx(), locales=["fr"], with_="def")
        assert '"title": "Home"' in provider.requests[0].system_prompt

    @pytest.mark.asyncio
    async def test_force_with_removals_needs_confirmation(self, make_ctx, storage, provider):
        await storage.write_text(
            "locales/fr.json",
            locale_file({"ui": {"title": "Accueil", "save": "Sauver", "old": "Vieux"}}),
        )

        declined = make_ctx(answers=["n"])
        await run_sync(declined, locales=["fr"], force=True)
        assert read(storage, "locales/fr.json")["ui"]["old"] == "Vieux"
        assert "remove 1 keys from fr" in declined.console.prompts[0]

        await run_sync(make_ctx(answers=["y"]), locales=["fr"], force=True)
        assert read(storage, "locales/fr.json") == {"ui": {"title": "Home [fr]", "save": "Save [fr]"}}

    @pytest.mark.asyncio
    async def test_missing_default_locale(self, make_ctx, storage):
        await storage.delete("locales/en.json")
        with pytest.raises(ConfigurationError):
            await run_sync(make_ctx())


class TestSyncMarkdown:
    @pytest.mark.asyncio
    async def test_renders_translated_copies(self, make_ctx, storage):
        await storage.write_text("docs/a.md", "# Title\n\nSome paragraph.\n")

        await run_sync(make_ctx(**MARKDOWN))

        assert storage.files["docs/fr/a.md"] == "# Title \\[fr\\]\n\nSome paragraph. \\[fr\\]\n"
        assert "docs/de/a.md" in storage.files
        assert read(storage, ".lin/markdown/en.json") == {
            "docs/a.md::heading[0]": "Title",
            "docs/a.md::paragraph[0]": "Some paragraph.",
        }
        assert read(storage, ".lin/markdown/fr.json")["docs/a.md::heading[0]"] == "Title [fr]"

    @pytest.mark.asyncio
    async def test_only_new_units_are_translated(self, make_ctx, storage, provider):
        await storage.write_text("docs/a.md", "# Title\n\nSome paragraph.\n")
        await run_sync(make_ctx(**MARKDOWN), locales=["fr"])

        await storage.write_text("docs/a.md", "# Title\n\nSome paragraph.\n\nMore.\n")
        provider.requests.clear()
        await run_sync(make_ctx(**MARKDOWN), locales=["fr"])

        assert json.loads(provider.requests[0].user_prompt) == {"fr": {"docs/a.md::paragraph[1]": "More."}}
        assert storage.files["docs/fr/a.md"].endswith("More. \\[fr\\]\n")

    @pytest.mark.asyncio
    async def test_up_to_date(self, make_ctx, storage, provider):
        await storage.write_text("docs/a.md", "Hello\n")
        await run_sync(make_ctx(**MARKDOWN))
        provider.requests.clear()

        ctx = make_ctx(**MARKDOWN)
        await run_sync(ctx)

        assert provider.requests == []
        assert "Markdown for fr is up to date." in output(ctx.console)


# =============================================================================
# check
# =============================================================================


class TestCheck:
    @pytest.mark.asyncio
    async def test_keys_reports_missing(self, make_ctx):
        ctx = make_ctx()
        assert await run_check(ctx, keys=True) == 1
        assert "Locale fr is missing 1 keys" in output(ctx.console)

    @pytest.mark.asyncio
    async def test_keys_fix_adds_empty_values(self, make_ctx, storage):
        assert await run_check(make_ctx(), keys=True, fix=True) == 0
        assert read(storage, "locales/fr.json") == {"ui": {"title": "Accueil", "save": ""}}
        assert read(storage, "locales/de.json") == {"ui": {"title": "", "save": ""}}

    @pytest.mark.asyncio
    async def test_code_usage(self, make_ctx, storage):
        await storage.write_text("src/app.ts", "t('ui.title')\nt('ui.new', 'New')\n")
        ctx = make_ctx()

        assert await run_check(ctx) == 1
        text = output(ctx.console)
        assert "Found 1 missing keys" in text
        assert "Found 1 unused keys" in text

    @pytest.mark.asyncio
    async def test_code_usage_fix_and_prune(self, make_ctx, storage):
        await storage.write_text("src/app.ts", "t('ui.title')\nt('ui.new', 'New')\n")

        assert await run_check(make_ctx(answers=["y"]), fix=True, prune=True) == 0

        assert read(storage, "locales/en.json") == {"ui": {"title": "Home", "new": "New"}}
        assert read(storage, "locales/fr.json") == {"ui": {"title": "Accueil"}}

    @pytest.mark.asyncio
    async def test_code_usage_fix_with_conflicting_keys(self, make_ctx, storage):
        await storage.write_text("src/app.ts", "t('ui.title')\nt('ui.save')\nt('menu')\nt('menu.open')\n")

        with pytest.raises(ConfigurationError) as exc:
            await run_check(make_ctx(), fix=True)

        assert "menu.open" in exc.value.message
        assert "'menu'" in exc.value.message
        assert "menu" not in read(storage, "locales/en.json")

    @pytest.mark.asyncio
    async def test_sort(self, make_ctx, storage):
        await storage.write_text("locales/en.json", locale_file({"b": "B", "a": "A"}))
        await storage.write_text("locales/fr.json", locale_file({"a": "A", "b": "B"}))

        await run_check(make_ctx(), sort="def")
        assert list(read(storage, "locales/fr.json")) == ["b", "a"]

        await run_check(make_ctx(), sort="abc")
        assert list(read(storage, "locales/en.json")) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_invalid_sort(self, make_ctx):
        with pytest.raises(ConfigurationError):
            await run_check(make_ctx(), sort="zyx")

    @pytest.mark.asyncio
    async def test_info(self, make_ctx):
        ctx = make_ctx()
        assert await run_check(ctx, info=True) == 0
        assert "Keys: 2" in output(ctx.console)

    @pytest.mark.asyncio
    async def test_markdown_snapshots(self, make_ctx, storage):
        await storage.write_text("docs/a.md", "Hello\n")
        ctx = make_ctx(**MARKDOWN)
        assert await run_check(ctx) == 1

        assert await run_check(make_ctx(**MARKDOWN), fix=True) == 0
        assert read(storage, ".lin/markdown/en.json") == {"docs/a.md::paragraph[0]": "Hello"}
        assert read(storage, ".lin/markdown/fr.json") == {"docs/a.md::paragraph[0]": ""}


# =============================================================================
# add / edit / del / undo
# =============================================================================


class TestAdd:
    @pytest.mark.asyncio
    async def test_adds_and_translates(self, make_ctx, storage, provider):
        await run_add(make_ctx(), "ui.cancel", "Cancel")

        assert read(storage, "locales/en.json")["ui"]["cancel"] == "Cancel"
        assert read(storage, "locales/fr.json")["ui"]["cancel"] == "Cancel [fr]"
        assert read(storage, "locales/de.json") == {"ui": {"cancel": "Cancel [de]"}}
        assert "en" not in json.loads(provider.requests[0].user_prompt)

    @pytest.mark.asyncio
    async def test_empty_text_skips_model(self, make_ctx, storage, provider):
        await run_add(make_ctx(), "ui.blank", "")

        assert provider.requests == []
        assert read(storage, "locales/fr.json")["ui"]["blank"] == ""

    @pytest.mark.asyncio
    async def test_existing_key_skipped_without_force(self, make_ctx, storage):
        ctx = make_ctx()
        await run_add(ctx, "ui.title", "Start", locales=["en", "fr"])

        assert read(storage, "locales/en.json")["ui"]["title"] == "Home"
        assert "All locales are up to date." in output(ctx.console)

    @pytest.mark.asyncio
    async def test_force_overwrites(self, make_ctx, storage):
        await run_add(make_ctx(), "ui.title", "Start", locales=["en", "fr"], force=True)

        assert read(storage, "locales/en.json")["ui"]["title"] == "Start"
        assert read(storage, "locales/fr.json")["ui"]["title"] == "Start [fr]"

    @pytest.mark.asyncio
    async def test_prefix_lists_suggestions(self, make_ctx, storage, provider):
        ctx = make_ctx()
        await run_add(ctx, "ui.", "x")

        assert "ui.title" in output(ctx.console)
        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_prompts_for_text(self, make_ctx, storage):
        await run_add(make_ctx(answers=["Later"]), "ui.later", locales=["en"])
        assert read(storage, "locales/en.json")["ui"]["later"] == "Later"

    def test_key_suggestions(self):
        tree = {"ui": {"title": "Home", "save": "Save"}}
        assert key_suggestions(tree, "ui.") == ["ui.title", "ui.save"]
        assert key_suggestions(tree, "ui") == ["ui.title", "ui.save"]
        assert key_suggestions(tree, "nope.") == []
        assert key_suggestions(tree, "ui.title") is None
        assert key_suggestions(tree, "ui.title", suggest_on_exact=True) == ["ui.title"]


class TestEdit:
    @pytest.mark.asyncio
    async def test_edits_existing_leaf(self, make_ctx, storage):
        ctx = make_ctx()
        await run_edit(ctx, "ui.title", "Start")

        assert read(storage, "locales/en.json")["ui"]["title"] == "Start"
        assert read(storage, "locales/fr.json")["ui"]["title"] == "Start"
        assert "Skipped: de (file not found)" in output(ctx.console)

    @pytest.mark.asyncio
    async def test_missing_key_skipped(self, make_ctx, storage):
        ctx = make_ctx()
        await run_edit(ctx, "ui.save", "Keep", locales=["fr"])

        assert read(storage, "locales/fr.json") == {"ui": {"title": "Accueil"}}
        assert "key ui.save not found" in output(ctx.console)


class TestDelAndUndo:
    @pytest.mark.asyncio
    async def test_deletes_and_prunes(self, make_ctx, storage):
        ctx = make_ctx()
        await run_del(ctx, ["ui.title"])

        assert read(storage, "locales/en.json") == {"ui": {"save": "Save"}}
        assert read(storage, "locales/fr.json") == {}
        assert "Deleted key ui.title from en, fr" in output(ctx.console)

    @pytest.mark.asyncio
    async def test_branch_lists_suggestions(self, make_ctx, storage):
        ctx = make_ctx()
        await run_del(ctx, ["ui"])

        assert read(storage, "locales/en.json") == {"ui": {"title": "Home", "save": "Save"}}
        assert "ui.save" in output(ctx.console)

    @pytest.mark.asyncio
    async def test_undo_restores(self, make_ctx, storage):
        before = dict(storage.files)
        await run_del(make_ctx(), ["ui.title", "ui.save"])

        ctx = make_ctx()
        assert await run_undo(ctx) == 0
        assert storage.files == before

    @pytest.mark.asyncio
    async def test_nothing_to_undo(self, make_ctx):
        ctx = make_ctx()
        await run_undo(ctx)
        assert "Nothing to undo." in output(ctx.console)
