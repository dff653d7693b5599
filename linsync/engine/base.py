"""
The format adapter contract.

Every content format linsync handles is described by one ``FormatAdapter``
record: the commands it supports plus an ``extract`` and a ``render``
function. The set of formats is closed (``AdapterKind``) and callers
dispatch through the record, so adding a format means adding a record,
not subclassing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from linsync.core.models import AdapterKind, Command, FlatKeyMap, LocaleTree


@dataclass(frozen=True)
class RenderResult:
    """Output of ``render``: the full new file text and whether anything matched."""
    
    text: str
    changed: bool


ExtractFn = Callable[[str, str], FlatKeyMap]
RenderFn = Callable[[str, str, LocaleTree], RenderResult]


@dataclass(frozen=True)
class FormatAdapter:
    """
    Capability descriptor for one content format.
    
    Attributes:
        kind: Which format this is
        supported_commands: Verbs allowed to run against this format
        extract: ``(file_path, source) -> {unit_key: text}``
        render: ``(file_path, source, translations) -> RenderResult``
    """
    
    kind: AdapterKind
    supported_commands: frozenset[Command]
    extract: ExtractFn
    render: RenderFn
    
    def supports(self, command: Command | str) -> bool:
        """Whether ``command`` may run against this adapter."""
        return Command(command) in self.supported_commands
