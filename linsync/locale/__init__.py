"""
Locale trees - diffing, merging, and sorting nested key-value trees.
"""

from linsync.locale.tree import (
    NestedKey,
    cleanup_empty_objects,
    count_keys,
    find_missing_keys,
    find_nested_key,
    flatten_tree,
    get_all_keys,
    shape_matches,
    unflatten_tree,
)
from linsync.locale.merge import (
    merge_missing_translations,
    sort_keys,
)

__all__ = [
    "NestedKey",
    "cleanup_empty_objects",
    "count_keys",
    "find_missing_keys",
    "find_nested_key",
    "flatten_tree",
    "get_all_keys",
    "shape_matches",
    "unflatten_tree",
    "merge_missing_translations",
    "sort_keys",
]
