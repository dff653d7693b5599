"""
Structural operations on locale trees.

A locale tree is a nested dict whose leaves are strings. Dotted keys
(``ui.home.title``) address leaves. Every function here is pure except
``NestedKey.delete`` and ``cleanup_empty_objects``, which mutate the tree
they were given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from linsync.core.models import FlatKeyMap, LocaleTree


# =============================================================================
# Flattening
# =============================================================================


def flatten_tree(tree: LocaleTree, prefix: str = "") -> FlatKeyMap:
    """
    Flatten a nested tree into dotted keys.
    
    ``{"a": {"b": "x"}}`` becomes ``{"a.b": "x"}``. Empty objects have no
    leaves and disappear.
    """
    flat: FlatKeyMap = {}
    for key, value in tree.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            flat.update(flatten_tree(value, full_key))
        else:
            flat[full_key] = value
    return flat


def unflatten_tree(flat: FlatKeyMap) -> LocaleTree:
    """
    Rebuild a nested tree from dotted keys. Inverse of ``flatten_tree``.
    
    Raises:
        ValueError: if one key is a prefix of another (``a`` and ``a.b``),
            which no valid tree can hold.
    """
    tree: LocaleTree = {}
    for dotted, value in flat.items():
        *parents, leaf = dotted.split(".")
        node = tree
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ValueError(f"Key '{dotted}' conflicts with leaf '{segment}'")
            node = child
        if isinstance(node.get(leaf), dict):
            raise ValueError(f"Key '{dotted}' conflicts with nested keys below it")
        node[leaf] = value
    return tree


def get_all_keys(tree: LocaleTree) -> list[str]:
    """All dotted leaf paths, in tree order."""
    return list(flatten_tree(tree).keys())


def count_keys(tree: LocaleTree) -> int:
    """Number of leaf entries."""
    count = 0
    for value in tree.values():
        if isinstance(value, dict):
            count += count_keys(value)
        else:
            count += 1
    return count


# =============================================================================
# Diffing
# =============================================================================


def find_missing_keys(source: LocaleTree, target: LocaleTree) -> LocaleTree:
    """
    Leaves present in ``source`` at paths absent from ``target``.
    
    Values come from ``source``. Swap the arguments to get the keys that
    ``target`` has in excess. A path counts as present only when ``target``
    holds a leaf there; an object where ``source`` has a leaf (or a leaf
    where ``source`` has an object) does not.
    """
    missing: LocaleTree = {}
    for key, value in source.items():
        other = target.get(key) if isinstance(target, dict) else None
        if isinstance(value, dict):
            nested = find_missing_keys(value, other if isinstance(other, dict) else {})
            if nested:
                missing[key] = nested
        elif other is None or isinstance(other, dict):
            missing[key] = value
    return missing


def shape_matches(a: LocaleTree, b: LocaleTree) -> bool:
    """True iff both trees hold leaves at exactly the same paths."""
    return set(get_all_keys(a)) == set(get_all_keys(b))


# =============================================================================
# Lookup and removal
# =============================================================================


@dataclass
class NestedKey:
    """Result of resolving a dotted path. ``value`` is None when not found."""
    
    value: str | LocaleTree | None = None
    _delete: Callable[[], None] | None = field(default=None, repr=False)
    
    @property
    def found(self) -> bool:
        return self.value is not None
    
    def delete(self) -> None:
        """Remove the leaf and prune ancestors it leaves empty."""
        if self._delete is not None:
            self._delete()


def _resolve(node: dict[str, Any], path: str) -> list[tuple[dict[str, Any], str]] | None:
    """
    Walk ``path`` through ``node``, returning the chain of (parent, key).
    
    A literal key containing dots wins over splitting, so flat maps with
    dotted file names resolve too.
    """
    if path in node:
        return [(node, path)]
    
    index = path.find(".")
    while index != -1:
        head, rest = path[:index], path[index + 1:]
        child = node.get(head)
        if isinstance(child, dict):
            chain = _resolve(child, rest)
            if chain is not None:
                return [(node, head)] + chain
        index = path.find(".", index + 1)
    return None


def find_nested_key(tree: LocaleTree, dotted_path: str) -> NestedKey:
    """
    Resolve ``dotted_path`` to its value and a ``delete()`` handle.
    
    A path that runs through a string leaf does not resolve.
    """
    chain = _resolve(tree, dotted_path) if dotted_path else None
    if chain is None:
        return NestedKey()
    
    parent, key = chain[-1]
    
    def delete() -> None:
        parent.pop(key, None)
        # Prune emptied ancestors, never the root itself
        for ancestor, ancestor_key in reversed(chain[:-1]):
            child = ancestor.get(ancestor_key)
            if isinstance(child, dict) and not child:
                del ancestor[ancestor_key]
            else:
                break
    
    return NestedKey(value=parent[key], _delete=delete)


def cleanup_empty_objects(tree: LocaleTree) -> LocaleTree:
    """Remove empty nested objects in place (the root is kept). Returns the tree."""
    for key in list(tree.keys()):
        value = tree[key]
        if isinstance(value, dict):
            cleanup_empty_objects(value)
            if not value:
                del tree[key]
    return tree
