"""
Format adapters - one uniform extract/render contract per content format.

Usage:
    from linsync.engine import get_adapter
    
    adapter = get_adapter("markdown")
    if adapter.supports("sync"):
        units = adapter.extract("docs/index.md", source)
"""

from linsync.core.errors import ConfigurationError
from linsync.core.models import AdapterKind
from linsync.engine.base import FormatAdapter, RenderResult
from linsync.engine.json_adapter import json_adapter
from linsync.engine.markdown_adapter import markdown_adapter


ADAPTERS: dict[AdapterKind, FormatAdapter] = {
    AdapterKind.JSON: json_adapter,
    AdapterKind.MARKDOWN: markdown_adapter,
}


def get_adapter(kind: AdapterKind | str) -> FormatAdapter:
    """Look up an adapter by kind."""
    try:
        return ADAPTERS[AdapterKind(kind)]
    except ValueError:
        raise ConfigurationError(
            f"Unknown adapter '{kind}'",
            f"Available adapters: {', '.join(k.value for k in AdapterKind)}",
        ) from None


__all__ = [
    "ADAPTERS",
    "FormatAdapter",
    "RenderResult",
    "get_adapter",
    "json_adapter",
    "markdown_adapter",
]
