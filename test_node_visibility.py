"""
Unit tests for node paths and expand/collapse state.
"""

import pytest

from schema_studio.field_model import FieldType, new_field
from schema_studio.node_visibility import (
    ROOT_PATH,
    NodeVisibilityState,
    collapsible_paths,
    item_path,
    iter_node_paths,
    node_path,
)


@pytest.fixture
def tree():
    return [
        new_field("id"),
        new_field("address", FieldType.OBJECT, children=[new_field("street"), new_field("")]),
        new_field("orders", FieldType.ARRAY, item_type=FieldType.OBJECT, item_fields=[
            new_field("sku"),
        ]),
    ]


class TestNodePath:
    """Test cases for node_path."""

    def test_named_field(self):
        assert node_path(ROOT_PATH, new_field("email"), 0) == "root.email"

    def test_unnamed_field_uses_index(self):
        assert node_path("root.address", new_field(""), 3) == "root.address.3"

    def test_missing_field_uses_index(self):
        assert node_path(ROOT_PATH, None, 1) == "root.1"

    def test_duplicate_names_share_a_path(self):
        first = node_path(ROOT_PATH, new_field("a"), 0)
        second = node_path(ROOT_PATH, new_field("a"), 1)
        assert first == second == "root.a"

    def test_item_path(self):
        assert item_path("root.orders") == "root.orders.item"

    def test_iter_node_paths(self, tree):
        paths = [path for path, _ in iter_node_paths(tree)]

        assert paths == [
            "root.id",
            "root.address",
            "root.address.street",
            "root.address.1",
            "root.orders",
            "root.orders.item.sku",
        ]

    def test_collapsible_paths(self, tree):
        assert collapsible_paths(tree) == {"root.address", "root.orders"}


class TestNodeVisibilityState:
    """Test cases for NodeVisibilityState."""

    def test_nodes_start_expanded(self):
        state = NodeVisibilityState()

        assert state.is_expanded("root.address") is True
        assert "root.address" in state
        assert len(state) == 1

    def test_toggle(self):
        state = NodeVisibilityState()

        assert state.toggle("root.address") is False
        assert state.is_expanded("root.address") is False
        assert state.toggle("root.address") is True

    def test_set_expanded(self):
        state = NodeVisibilityState()
        state.set_expanded("root.orders", False)
        assert state.collapsed_paths() == {"root.orders"}

    def test_collapse_and_expand_all(self, tree):
        state = NodeVisibilityState()

        state.collapse_all(tree)
        assert state.collapsed_paths() == {"root.address", "root.orders"}

        state.expand_all()
        assert state.collapsed_paths() == set()

    def test_prune_forgets_removed_nodes(self, tree):
        state = NodeVisibilityState()
        state.set_expanded("root.address", False)
        state.set_expanded("root.gone", False)

        removed = state.prune(tree)

        assert removed == 1
        assert "root.gone" not in state
        assert state.collapsed_paths() == {"root.address"}

    def test_reset(self):
        state = NodeVisibilityState()
        state.toggle("root.a")

        state.reset()

        assert len(state) == 0
        assert state.is_expanded("root.a") is True
