"""
Tests for locale tree diffing and merging.

Core principle: a non-empty translation already on disk is never
overwritten.
"""

import pytest

from linsync.locale import (
    cleanup_empty_objects,
    count_keys,
    find_missing_keys,
    find_nested_key,
    flatten_tree,
    get_all_keys,
    merge_missing_translations,
    shape_matches,
    sort_keys,
    unflatten_tree,
)


@pytest.fixture
def tree():
    return {
        "ui": {"home": {"title": "Home", "intro": "Welcome"}, "save": "Save"},
        "errors": {"404": "Not found"},
    }


# =============================================================================
# Flattening
# =============================================================================


class TestFlatten:
    def test_flatten(self, tree):
        assert flatten_tree(tree) == {
            "ui.home.title": "Home",
            "ui.home.intro": "Welcome",
            "ui.save": "Save",
            "errors.404": "Not found",
        }

    def test_round_trip(self, tree):
        assert unflatten_tree(flatten_tree(tree)) == tree

    def test_empty_objects_vanish(self):
        assert flatten_tree({"a": {}, "b": "x"}) == {"b": "x"}

    def test_unflatten_conflict(self):
        with pytest.raises(ValueError):
            unflatten_tree({"a": "x", "a.b": "y"})

    def test_count_and_keys(self, tree):
        assert count_keys(tree) == 4
        assert get_all_keys(tree)[0] == "ui.home.title"
        assert count_keys({}) == 0


# =============================================================================
# Diffing
# =============================================================================


class TestFindMissingKeys:
    def test_missing_nested(self, tree):
        target = {"ui": {"home": {"title": "Accueil"}}}
        assert find_missing_keys(tree, target) == {
            "ui": {"home": {"intro": "Welcome"}, "save": "Save"},
            "errors": {"404": "Not found"},
        }

    def test_nothing_missing(self, tree):
        assert find_missing_keys(tree, tree) == {}

    def test_swapped_gives_extra_keys(self, tree):
        target = {"ui": {"save": "Enregistrer", "old": "Ancien"}}
        assert find_missing_keys(target, tree) == {"ui": {"old": "Ancien"}}

    def test_type_mismatch_counts_as_missing(self):
        assert find_missing_keys({"a": "x"}, {"a": {"b": "y"}}) == {"a": "x"}
        assert find_missing_keys({"a": {"b": "x"}}, {"a": "y"}) == {"a": {"b": "x"}}

    def test_empty_string_counts_as_present(self):
        assert find_missing_keys({"a": "x"}, {"a": ""}) == {}

    def test_shape_matches_ignores_values_and_order(self):
        assert shape_matches({"a": "1", "b": {"c": "2"}}, {"b": {"c": "x"}, "a": "y"})
        assert not shape_matches({"a": "1"}, {"a": "1", "b": "2"})


# =============================================================================
# Merging
# =============================================================================


class TestMergeMissingTranslations:
    def test_fills_gaps(self):
        assert merge_missing_translations({"a": {"b": "x"}}, {"a": {"c": "y"}}) == {
            "a": {"b": "x", "c": "y"},
        }

    def test_never_clobbers_non_empty(self):
        merged = merge_missing_translations({"a": {"b": "x"}}, {"a": {"b": "OTHER"}})
        assert merged == {"a": {"b": "x"}}

    def test_fills_empty_strings(self):
        assert merge_missing_translations({"a": ""}, {"a": "y"}) == {"a": "y"}

    def test_existing_structure_wins(self):
        assert merge_missing_translations({"a": {"b": "x"}}, {"a": "y"}) == {"a": {"b": "x"}}
        assert merge_missing_translations({"a": "x"}, {"a": {"b": "y"}}) == {"a": "x"}

    def test_does_not_mutate_inputs(self):
        existing = {"a": {"b": "x"}}
        merge_missing_translations(existing, {"a": {"c": "y"}})
        assert existing == {"a": {"b": "x"}}

    def test_dotted_keys_are_not_split(self):
        merged = merge_missing_translations({}, {"a.b": "x"})
        assert merged == {"a.b": "x"}


class TestSortKeys:
    def test_alphabetical(self):
        result = sort_keys({"b": "1", "a": {"d": "2", "c": "3"}})
        assert list(result) == ["a", "b"]
        assert list(result["a"]) == ["c", "d"]

    def test_reference_order_with_extras_last(self):
        result = sort_keys({"x": "1", "b": "2", "a": "3"}, {"a": "", "b": ""})
        assert list(result) == ["a", "b", "x"]


# =============================================================================
# Lookup and removal
# =============================================================================


class TestFindNestedKey:
    def test_find_and_delete_prunes_ancestors(self):
        tree = {"a": {"b": {"c": "x"}}, "d": "y"}
        nested = find_nested_key(tree, "a.b.c")
        assert nested.value == "x"
        nested.delete()
        assert tree == {"d": "y"}

    def test_delete_keeps_siblings(self):
        tree = {"a": {"b": "x", "c": "y"}}
        find_nested_key(tree, "a.b").delete()
        assert tree == {"a": {"c": "y"}}

    def test_literal_dotted_key(self):
        tree = {"a.b": "flat", "a": {"c": "x"}}
        assert find_nested_key(tree, "a.b").value == "flat"

    def test_not_found(self):
        nested = find_nested_key({"a": "x"}, "a.b")
        assert not nested.found
        nested.delete()  # No-op

    def test_branch_value(self):
        assert find_nested_key({"a": {"b": "x"}}, "a").value == {"b": "x"}

    def test_cleanup_empty_objects(self):
        tree = {"a": {"b": {}}, "c": "x", "d": {}}
        assert cleanup_empty_objects(tree) == {"c": "x"}
