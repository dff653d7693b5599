"""
Markdown / MDX documents.

Translatable prose is pulled out of a document as positional units keyed
``<relativePath>::<kind>[<index>]``, where ``kind`` is ``paragraph``,
``heading`` or ``listItem`` and ``index`` counts nodes of that kind in
document order. Front matter string fields become
``<relativePath>::frontmatter.<field>``.

Code blocks, inline code, raw HTML and MDX import/export blocks are never
visited: they contribute no text and do not advance any counter.

Rendering re-parses the same source, re-assigns the same keys, and splices
translated text back into the original source using the parser's line
maps. Lines that hold no translated node are left byte-identical.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterator

import yaml
from markdown_it import MarkdownIt
from markdown_it.rules_block import StateBlock
from markdown_it.tree import SyntaxTreeNode

from linsync.core.errors import MarkdownParseError
from linsync.core.models import AdapterKind, Command, FlatKeyMap, LocaleTree
from linsync.core.utils import relative_file_path
from linsync.engine.base import FormatAdapter, RenderResult
from linsync.locale.tree import flatten_tree

logger = logging.getLogger(__name__)


# Parser node type -> unit kind
TRACKED_KINDS = {
    "paragraph": "paragraph",
    "heading": "heading",
    "list_item": "listItem",
}

SKIPPED_TYPES = frozenset({
    "fence",
    "code_block",
    "code_inline",
    "html_block",
    "html_inline",
    "mdx_esm",
})

FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)
_ESM_RE = re.compile(r"^(?:import|export)\b")
_LIST_MARKER_RE = re.compile(r"(?:[-*+]|\d{1,9}[.)])(?=\s)")
# Quote markers, list markers and indentation that open a line of a block
_BLOCK_PREFIX_RE = re.compile(r"(?:[ \t]*(?:>[ \t]?|(?:[-*+]|\d{1,9}[.)])(?:[ \t]+|(?=\r?\n)|\Z)))*[ \t]*")
# Line breaks as the parser counts them
_LINE_END_RE = re.compile(r"(?<=\n)|(?<=\r)(?!\n)")

_INLINE_META_RE = re.compile(r"([\\`*_\[\]])")
_LINE_START_RE = re.compile(r"^(?:([#>+=-])|(\d{1,9})([.)]))", re.MULTILINE)
_CLOSING_HASHES_RE = re.compile(r"(?<=[ \t])#(?=#*[ \t]*$)", re.MULTILINE)


def make_key(rel_path: str, kind: str, index: int) -> str:
    return f"{rel_path}::{kind}[{index}]"


def front_matter_key(rel_path: str, field: str) -> str:
    return f"{rel_path}::frontmatter.{field}"


# =============================================================================
# Parsing
# =============================================================================


def _mdx_esm_block(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
    """Top-level ``import``/``export`` blocks in MDX, up to the next blank line."""
    if state.parentType != "root" or state.sCount[startLine] != 0:
        return False

    start = state.bMarks[startLine] + state.tShift[startLine]
    line = state.src[start:state.eMarks[startLine]]
    if not _ESM_RE.match(line):
        return False
    if silent:
        return True

    nextLine = startLine + 1
    while nextLine < endLine and not state.isEmpty(nextLine):
        nextLine += 1

    token = state.push("mdx_esm", "", 0)
    token.map = [startLine, nextLine]
    token.content = state.getLines(startLine, nextLine, 0, True)
    state.line = nextLine
    return True


def _build_parser(mdx: bool) -> MarkdownIt:
    md = MarkdownIt("commonmark")
    if mdx:
        md.block.ruler.before("paragraph", "mdx_esm", _mdx_esm_block)
    return md


def parse_document(file_path: str, body: str) -> SyntaxTreeNode:
    """
    Parse a document body (front matter already removed) into a syntax tree.

    Raises:
        MarkdownParseError: if the parser rejects the document.
    """
    parser = _build_parser(mdx=file_path.lower().endswith(".mdx"))
    try:
        tokens = parser.parse(body)
    except Exception as e:
        raise MarkdownParseError(f"Could not parse {file_path}: {e}", path=file_path) from e
    return SyntaxTreeNode(tokens)


def split_front_matter(file_path: str, source: str) -> tuple[dict[str, Any], str, str]:
    """
    Split ``source`` into (front matter data, raw front matter block, body).

    Documents without front matter return ``({}, "", source)``.

    Raises:
        MarkdownParseError: if the front matter is not a YAML mapping.
    """
    match = FRONT_MATTER_RE.match(source)
    if not match:
        return {}, "", source

    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        raise MarkdownParseError(
            f"Invalid front matter in {file_path}: {e}",
            path=file_path,
        ) from e

    if not isinstance(data, dict):
        raise MarkdownParseError(
            f"Front matter in {file_path} must be a mapping",
            path=file_path,
        )
    return data, match.group(0), source[match.end():]


def dump_front_matter(data: dict[str, Any]) -> str:
    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return f"---\n{dumped}---\n"


# =============================================================================
# Traversal
# =============================================================================


def _is_atomic(node: SyntaxTreeNode) -> bool:
    """Inline nodes kept whole: images and autolinks carry no prose."""
    return node.type == "image" or (node.type == "link" and node.markup == "autolink")


def walk_units(root: SyntaxTreeNode) -> Iterator[tuple[str, int, SyntaxTreeNode]]:
    """
    Yield ``(kind, index, node)`` for every tracked node in document order.

    Skipped subtrees are not entered, so their contents never advance a
    counter.
    """
    counters = {kind: 0 for kind in TRACKED_KINDS.values()}

    def visit(node: SyntaxTreeNode) -> Iterator[tuple[str, int, SyntaxTreeNode]]:
        if node.type in SKIPPED_TYPES:
            return
        kind = TRACKED_KINDS.get(node.type)
        if kind is not None:
            index = counters[kind]
            counters[kind] += 1
            yield kind, index, node
        for child in node.children:
            if child.type != "inline":
                yield from visit(child)

    yield from visit(root)


def literal_text(node: SyntaxTreeNode) -> str:
    """All text leaves under ``node`` concatenated, skipping code and HTML."""
    parts: list[str] = []
    for child in node.children:
        if child.type in SKIPPED_TYPES or _is_atomic(child):
            continue
        if child.type == "text":
            parts.append(child.content)
        elif child.type == "softbreak":
            parts.append("\n")
        elif child.children:
            parts.append(literal_text(child))
    return "".join(parts)


def _has_text_leaf(node: SyntaxTreeNode) -> bool:
    for child in node.children:
        if child.type in SKIPPED_TYPES or _is_atomic(child):
            continue
        if child.type == "text" and child.content.strip():
            return True
        if child.children and _has_text_leaf(child):
            return True
    return False


def _first_text_block(node: SyntaxTreeNode) -> tuple[SyntaxTreeNode, SyntaxTreeNode] | None:
    """The (block, inline) pair holding the first text leaf under ``node``."""
    for child in node.children:
        if child.type in SKIPPED_TYPES:
            continue
        if child.type == "inline":
            if _has_text_leaf(child):
                return node, child
            continue
        found = _first_text_block(child)
        if found is not None:
            return found
    return None


# =============================================================================
# Inline re-serialization
# =============================================================================


class _Placement:
    def __init__(self, text: str):
        self.text = text
        self.placed = False


def escape_text(text: str) -> str:
    """
    Markdown source that renders ``text`` as literal inline text.

    Line breaks become soft breaks and blank lines are dropped, so the
    result never opens a new block. Inline markup, HTML, entities and
    block markers at the start of a line are escaped.
    """
    lines = [line.strip() for line in re.split(r"\r\n?|\n", text)]
    escaped = "\n".join(line for line in lines if line)
    escaped = _INLINE_META_RE.sub(r"\\\1", escaped)
    escaped = escaped.replace("&", "&amp;").replace("<", "&lt;")
    escaped = _LINE_START_RE.sub(
        lambda m: f"\\{m.group(1)}" if m.group(1) else f"{m.group(2)}\\{m.group(3)}",
        escaped,
    )
    return _CLOSING_HASHES_RE.sub(r"\\#", escaped)


def _destination(node: SyntaxTreeNode, attr: str) -> str:
    url = str(node.attrs.get(attr, ""))
    title = node.attrs.get("title")
    if title:
        escaped = str(title).replace('"', '\\"')
        return f'{url} "{escaped}"'
    return url


def _code_span(node: SyntaxTreeNode) -> str:
    content = node.content
    if content.startswith("`") or content.endswith("`") or (
        content.startswith(" ") and content.endswith(" ") and content.strip()
    ):
        content = f" {content} "
    return f"{node.markup}{content}{node.markup}"


def _render_children(node: SyntaxTreeNode, placement: _Placement) -> str:
    return "".join(_render_inline_node(child, placement) for child in node.children)


def _render_inline_node(node: SyntaxTreeNode, placement: _Placement) -> str:
    kind = node.type

    if kind == "text":
        if node.content.strip() and not placement.placed:
            placement.placed = True
            return escape_text(placement.text)
        return ""
    if kind in ("softbreak", "hardbreak"):
        return ""
    if kind == "code_inline":
        return _code_span(node)
    if kind == "html_inline":
        return node.content
    if kind == "image":
        return f"![{node.content}]({_destination(node, 'src')})"
    if kind == "link" and node.markup == "autolink":
        label = "".join(child.content for child in node.children if child.type == "text")
        return f"<{label}>"

    inner = _render_children(node, placement)
    if not inner:
        return ""
    if kind == "link":
        return f"[{inner}]({_destination(node, 'href')})"
    if kind in ("em", "strong"):
        return f"{node.markup}{inner}{node.markup}"
    return inner


def render_inline(inline: SyntaxTreeNode, translation: str) -> str:
    """
    Inline source for ``inline`` with its first text leaf set to ``translation``.

    The translation is escaped, so it stays plain text in the same block.

    Other text leaves are dropped, along with emphasis and links left
    empty by that. Code spans, inline HTML, images and autolinks stay.
    """
    return _render_children(inline, _Placement(translation))


# =============================================================================
# Source splicing
# =============================================================================


@dataclass
class _Edit:
    block: SyntaxTreeNode
    inline: SyntaxTreeNode
    translation: str


def _continuation_prefix(prefix: str) -> str:
    """Prefix for extra lines: list markers become spaces, quote markers stay."""
    return _LIST_MARKER_RE.sub(lambda m: " " * len(m.group(0)), prefix)


def _apply_edit(lines: list[str], edit: _Edit) -> None:
    start_line, end_line = edit.block.map
    if edit.block.type == "heading" and edit.block.markup in ("=", "-"):
        end_line -= 1  # Setext underline stays as is
    last_line = max(end_line - 1, start_line)

    content_lines = edit.inline.content.split("\n")
    first, last = content_lines[0], content_lines[-1]

    first_src = lines[start_line]
    skip = _BLOCK_PREFIX_RE.match(first_src).end()
    col = first_src.find(first, skip) if first else -1
    if col < 0:
        col = skip

    last_src = lines[last_line]
    if last_line == start_line:
        end_col = col + len(first)
    else:
        pos = last_src.rfind(last) if last else -1
        end_col = pos + len(last) if pos >= 0 else len(last_src.rstrip("\r\n"))

    new_source = render_inline(edit.inline, edit.translation)
    if edit.block.type == "heading":
        new_source = " ".join(new_source.split("\n"))

    prefix = first_src[:col]
    eol = "\r\n" if first_src.endswith("\r\n") else "\n"
    continuation = _continuation_prefix(prefix)
    new_lines = new_source.split("\n")
    replacement = prefix + new_lines[0]
    for extra in new_lines[1:]:
        replacement += eol + continuation + extra
    replacement += last_src[end_col:]

    lines[start_line:last_line + 1] = [replacement]


# =============================================================================
# Adapter functions
# =============================================================================


def extract(file_path: str, source: str) -> FlatKeyMap:
    """
    Extract the translation units of one document.

    Pure: the result depends only on ``file_path`` and ``source``.
    """
    rel_path = relative_file_path(file_path)
    front_matter, _, body = split_front_matter(file_path, source)

    units: FlatKeyMap = {}
    for field, value in front_matter.items():
        if isinstance(value, str):
            units[front_matter_key(rel_path, field)] = value

    root = parse_document(file_path, body)
    for kind, index, node in walk_units(root):
        text = literal_text(node)
        if text.strip():
            units[make_key(rel_path, kind, index)] = text

    return units


def render(file_path: str, source: str, translations: LocaleTree) -> RenderResult:
    """
    Apply ``translations`` (flat or nested unit keys) to one document.

    Each translated node gets the translation in its first text leaf; the
    node's other text leaves are discarded. Changed front matter fields
    force the front matter block to be rewritten.
    """
    rel_path = relative_file_path(file_path)
    flat = flatten_tree(translations)
    changed = False

    front_matter, raw_front_matter, body = split_front_matter(file_path, source)
    new_front_matter = dict(front_matter)
    front_matter_changed = False
    for field, value in front_matter.items():
        translated = flat.get(front_matter_key(rel_path, field))
        if translated and translated != value:
            new_front_matter[field] = translated
            front_matter_changed = True

    root = parse_document(file_path, body)
    edits: dict[int, _Edit] = {}
    for kind, index, node in walk_units(root):
        translated = flat.get(make_key(rel_path, kind, index))
        if not translated:
            continue
        changed = True
        target = _first_text_block(node)
        if target is None:
            logger.debug("No text leaf for %s", make_key(rel_path, kind, index))
            continue
        block, inline = target
        # A later (inner) node targeting the same text wins
        edits[id(inline)] = _Edit(block=block, inline=inline, translation=str(translated))

    lines = [line for line in _LINE_END_RE.split(body) if line]
    for edit in sorted(edits.values(), key=lambda e: e.block.map[0], reverse=True):
        _apply_edit(lines, edit)
    new_body = "".join(lines)

    if front_matter_changed:
        changed = True
        return RenderResult(text=dump_front_matter(new_front_matter) + new_body, changed=changed)

    return RenderResult(text=raw_front_matter + new_body, changed=changed)


markdown_adapter = FormatAdapter(
    kind=AdapterKind.MARKDOWN,
    supported_commands=frozenset({Command.CHECK, Command.SYNC}),
    extract=extract,
    render=render,
)
