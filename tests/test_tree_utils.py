"""
Tests for the tree snapshot utilities and the TreeNode value type.

Snapshots are immutable; these tests pin down copy-on-write updates and
structural sharing of the parts of the tree an update does not touch.
"""

import pytest

from lazytreelib.core.node import TreeNode, as_nodes
from lazytreelib.tree import (
    count_nodes,
    find_by_id,
    flatten_tree,
    get_parent_ids,
    iter_nodes,
    replace_children,
)


def build_tree():
    """
    root-a
      a-1
        a-1-x
      a-2            (not loaded)
    root-b           (loaded, empty)
    """
    return as_nodes([
        {"id": "root-a", "label": "A", "children": [
            {"id": "a-1", "label": "A1", "children": [
                {"id": "a-1-x", "label": "A1X"},
            ]},
            {"id": "a-2", "label": "A2", "childrenCount": 3},
        ]},
        {"id": "root-b", "label": "B", "children": []},
    ])


class TestTreeNode:
    """Test the TreeNode value type."""

    def test_from_dict_maps_known_keys(self):
        node = TreeNode.from_dict({"id": "n", "label": "N", "childrenCount": 2, "icon": "folder"})
        assert node.id == "n"
        assert node.label == "N"
        assert node.children is None
        assert node.children_count == 2
        assert node.extra == {"icon": "folder"}

    def test_from_dict_accepts_snake_case_count(self):
        assert TreeNode.from_dict({"id": "n", "children_count": 4}).children_count == 4

    def test_from_dict_requires_id(self):
        with pytest.raises(ValueError):
            TreeNode.from_dict({"label": "no id"})

    def test_children_are_frozen_to_tuple(self):
        node = TreeNode("p", children=[{"id": "c"}])
        assert isinstance(node.children, tuple)
        assert node.children[0].id == "c"

    def test_absent_versus_empty_children(self):
        assert not TreeNode("x").is_loaded
        assert TreeNode("x", children=()).is_loaded

    def test_nodes_are_immutable(self):
        node = TreeNode("x")
        with pytest.raises(AttributeError):
            node.label = "changed"

    def test_to_dict_round_trips_extra(self):
        data = {"id": "n", "label": "N", "childrenCount": 1, "icon": "file",
                "children": [{"id": "c", "label": "C"}]}
        assert TreeNode.from_dict(data).to_dict() == data

    def test_as_nodes_rejects_garbage(self):
        with pytest.raises(TypeError):
            as_nodes([42])


class TestFindById:
    """Test depth-first lookup."""

    def test_finds_root_level(self):
        assert find_by_id(build_tree(), "root-b").label == "B"

    def test_finds_nested(self):
        assert find_by_id(build_tree(), "a-1-x").label == "A1X"

    def test_missing_returns_none(self):
        assert find_by_id(build_tree(), "ghost") is None

    def test_empty_tree(self):
        assert find_by_id((), "anything") is None


class TestReplaceChildren:
    """Test copy-on-write child replacement."""

    def test_replaced_children_are_found(self):
        tree = build_tree()
        new_children = as_nodes([{"id": "a-2-1", "label": "new"}])

        updated = replace_children(tree, "a-2", new_children)

        assert find_by_id(updated, "a-2").children == new_children
        assert find_by_id(updated, "a-2-1").label == "new"

    def test_original_snapshot_untouched(self):
        tree = build_tree()
        replace_children(tree, "a-2", [{"id": "a-2-1"}])
        assert find_by_id(tree, "a-2").children is None
        assert find_by_id(tree, "a-2-1") is None

    def test_ancestors_are_new_objects(self):
        tree = build_tree()
        updated = replace_children(tree, "a-1-x", [{"id": "deep"}])

        assert updated is not tree
        assert updated[0] is not tree[0]
        assert find_by_id(updated, "a-1") is not find_by_id(tree, "a-1")

    def test_untouched_subtrees_are_shared(self):
        tree = build_tree()
        updated = replace_children(tree, "a-2", [{"id": "a-2-1"}])

        assert updated[1] is tree[1]
        assert find_by_id(updated, "a-1") is find_by_id(tree, "a-1")

    def test_missing_parent_returns_same_snapshot(self):
        tree = build_tree()
        assert replace_children(tree, "ghost", [{"id": "x"}]) is tree

    def test_replace_with_empty_children(self):
        updated = replace_children(build_tree(), "root-a", [])
        assert find_by_id(updated, "root-a").children == ()
        assert find_by_id(updated, "a-1") is None

    def test_list_input_is_accepted(self):
        tree = list(build_tree())
        updated = replace_children(tree, "ghost", [])
        assert updated == tuple(tree)


class TestFlattenAndPaths:
    """Test flattening and ancestor paths."""

    def test_flatten_is_preorder(self):
        ids = [node.id for node in flatten_tree(build_tree())]
        assert ids == ["root-a", "a-1", "a-1-x", "a-2", "root-b"]

    def test_iter_nodes_matches_flatten(self):
        tree = build_tree()
        assert list(iter_nodes(tree)) == flatten_tree(tree)

    def test_count_nodes(self):
        assert count_nodes(build_tree()) == 5
        assert count_nodes(()) == 0

    def test_parent_ids_root_to_parent(self):
        assert get_parent_ids(build_tree(), "a-1-x") == ["root-a", "a-1"]

    def test_parent_ids_of_root_level_node(self):
        assert get_parent_ids(build_tree(), "root-b") == []

    def test_parent_ids_of_missing_node(self):
        assert get_parent_ids(build_tree(), "ghost") == []
