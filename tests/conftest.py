"""
Shared fixtures: an in-memory project, a recording model provider and a
console with scripted answers.
"""

from __future__ import annotations

import io
import json
from typing import Any

import pytest

from linsync.commands import CommandContext
from linsync.config import LinConfig
from linsync.console import Console
from linsync.core.models import I18nConfig
from linsync.services.ai import GenerationRequest, ModelProvider
from linsync.storage import InMemoryFileStorage


class FakeProvider(ModelProvider):
    """Answers every request with ``"<value> [<locale>]"`` and records it."""

    def __init__(self, response: Any = None):
        self.requests: list[GenerationRequest] = []
        self.response = response
        self.opened = 0
        self.closed = 0

    async def generate(self, request: GenerationRequest) -> dict[str, Any]:
        self.requests.append(request)
        if self.response is not None:
            return self.response
        payload = json.loads(request.user_prompt)
        return {
            locale: {key: f"{value} [{locale}]" for key, value in keys.items()}
            for locale, keys in payload.items()
        }

    async def open(self) -> None:
        self.opened += 1

    async def close(self) -> None:
        self.closed += 1


def make_console(answers: list[str] | None = None) -> Console:
    """Console writing to a buffer; ``answers`` feed prompts in order."""
    pending = list(answers or [])
    prompts: list[str] = []

    def answer(prompt: str) -> str:
        prompts.append(prompt)
        if not pending:
            raise EOFError
        return pending.pop(0)

    console = Console(stream=io.StringIO(), input_fn=answer)
    console.prompts = prompts
    return console


def output(console: Console) -> str:
    return console.stream.getvalue()


def locale_file(tree: dict) -> str:
    return json.dumps(tree, indent=2, ensure_ascii=False) + "\n"


@pytest.fixture
def i18n():
    return I18nConfig(locales=["en", "fr", "de"], default_locale="en")


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def storage():
    return InMemoryFileStorage({
        "locales/en.json": locale_file({"ui": {"title": "Home", "save": "Save"}}),
        "locales/fr.json": locale_file({"ui": {"title": "Accueil"}}),
    })


@pytest.fixture
def make_ctx(i18n, storage, provider):
    """Build a ``CommandContext`` over the in-memory project."""

    def factory(answers: list[str] | None = None, **config: Any) -> CommandContext:
        lin_config = LinConfig(i18n=i18n, **config)
        return CommandContext.create(
            lin_config,
            storage=storage,
            console=make_console(answers),
            provider_factory=lambda options: provider,
        )

    return factory
