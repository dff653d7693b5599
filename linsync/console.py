"""
User-facing console output.

Commands talk to the user through a ``Console`` rather than ``print`` so
tests can capture output and script confirmation answers. Messages may
use ``**bold**``, ``*italic*`` and ```code``` markers; they are stripped
for plain terminals.
"""

from __future__ import annotations

import re
import sys
from contextlib import contextmanager
from typing import Callable, Iterator, TextIO


class ICONS:
    SUCCESS = "✔"
    ERROR = "✖"
    WARNING = "⚠"
    INFO = "ℹ"
    NOTE = "●"
    RESULT = ">.. "

    ALL = (SUCCESS, ERROR, WARNING, INFO, NOTE, RESULT)


_MARKERS = [
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"__([^_]+)__"), r"\1"),
]


def format_log(message: object) -> str:
    """Strip inline emphasis markers from a message."""
    text = str(message)
    for pattern, replacement in _MARKERS:
        text = pattern.sub(replacement, text)
    return text


class Console:
    """
    Line-oriented output with icon prefixes and yes/no prompts.

    Usage:
        console = Console()
        with console.section("JSON"):
            console.log(ICONS.SUCCESS, "All locales are up to date.")
        if console.confirm("Continue?"):
            ...
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        input_fn: Callable[[str], str] = input,
    ):
        self.stream = stream or sys.stdout
        self.input_fn = input_fn
        self._in_section = False

    def _prefix(self) -> str:
        return "│ " if self._in_section else ""

    def _format(self, messages: tuple[object, ...]) -> str:
        message = " ".join(format_log(m) for m in messages)
        for icon in ICONS.ALL:
            if message.startswith(icon):
                message = f"{icon}  {message[len(icon):].lstrip()}"
                break
        return message

    def write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()

    def log(self, *messages: object) -> None:
        """Write one line."""
        self.write(f"{self._prefix()}{self._format(messages)}\n")

    @contextmanager
    def section(self, title: str) -> Iterator[None]:
        """Group the output of one adapter run under a header."""
        self.write(f"┌─ {title}\n")
        self._in_section = True
        try:
            yield
        finally:
            self._in_section = False
            self.write("└─\n")

    def confirm(self, message: str, default: bool = False) -> bool:
        """
        Ask a yes/no question.

        Empty input or end of input answers with ``default``.
        """
        suffix = " [Y/n] " if default else " [y/N] "
        try:
            answer = self.input_fn(f"{self._prefix()}{self._format((message,))}{suffix}")
        except EOFError:
            return default
        answer = answer.strip().lower()
        if not answer:
            return default
        return answer in ("y", "yes")

    def prompt(self, message: str) -> str:
        """Ask for a line of text; end of input answers with an empty string."""
        try:
            return self.input_fn(f"{self._prefix()}{self._format((message,))} ").strip()
        except EOFError:
            return ""
