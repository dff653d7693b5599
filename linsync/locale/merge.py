"""
Combining locale trees.

The one rule that matters here: a non-empty value already in a locale
file is never overwritten by a merge. Human-reviewed translations survive
every sync.
"""

from __future__ import annotations

import copy

from linsync.core.models import LocaleTree


def mergeable(value: object) -> bool:
    """Whether an existing leaf may be filled in by a merge."""
    return value is None or value == ""


def merge_missing_translations(existing: LocaleTree, incoming: LocaleTree) -> LocaleTree:
    """
    Return ``existing`` with the gaps filled from ``incoming``.
    
    A leaf from ``incoming`` is written when ``existing`` has nothing at
    that path or has an empty string there. Non-empty leaves in
    ``existing`` win, and so does existing structure: an incoming leaf
    never replaces an object and an incoming object never replaces a
    non-empty leaf.
    
    Keys are merged structurally and are not split on dots. Callers holding
    dotted keys for a nested file should ``unflatten_tree`` them first.
    """
    result = copy.deepcopy(existing)
    _merge_into(result, incoming)
    return result


def _merge_into(target: LocaleTree, incoming: LocaleTree) -> None:
    for key, value in incoming.items():
        current = target.get(key)
        if isinstance(value, dict):
            if isinstance(current, dict):
                _merge_into(current, value)
            elif mergeable(current):
                target[key] = copy.deepcopy(value)
        elif mergeable(current):
            target[key] = value


def sort_keys(tree: LocaleTree, reference: LocaleTree | None = None) -> LocaleTree:
    """
    Return a copy of ``tree`` with keys reordered at every level.
    
    Without a reference, keys sort alphabetically. With one, keys follow
    the reference order; keys the reference lacks keep their relative
    order and go after the referenced ones.
    """
    if reference is None:
        ordered = sorted(tree.keys())
    else:
        known = [key for key in reference.keys() if key in tree]
        ordered = known + [key for key in tree.keys() if key not in reference]
    
    result: LocaleTree = {}
    for key in ordered:
        value = tree[key]
        if isinstance(value, dict):
            sub_reference = None
            if reference is not None:
                candidate = reference.get(key)
                sub_reference = candidate if isinstance(candidate, dict) else {}
            result[key] = sort_keys(value, sub_reference)
        else:
            result[key] = value
    return result
