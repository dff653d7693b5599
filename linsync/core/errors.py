"""
Error taxonomy for linsync.

Configuration problems are fatal and raised before any network or write
I/O. Parse errors surface to the caller. Provider errors wrap whatever the
model backend raised and keep the original message.
"""

from __future__ import annotations


class LinError(Exception):
    """Base class for all linsync errors."""

    def __init__(self, message: str, hint: str | list[str] | None = None):
        super().__init__(message)
        self.message = message
        if isinstance(hint, list):
            hint = "\n".join(hint)
        self.hint = hint or ""


class ConfigurationError(LinError):
    """Invalid or missing configuration (provider, model, limits, locales)."""
    pass


class ParseError(LinError):
    """A source file could not be parsed."""

    def __init__(self, message: str, path: str = "", hint: str | list[str] | None = None):
        super().__init__(message, hint)
        self.path = path


class LocaleParseError(ParseError):
    """Malformed locale JSON."""
    pass


class MarkdownParseError(ParseError):
    """Unparseable Markdown document or front matter."""
    pass


class ProviderError(LinError):
    """The model provider failed while handling a request."""
    pass
