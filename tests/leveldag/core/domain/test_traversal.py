"""Tests for item map helpers and dependency walks."""

from leveldag.core.domain.traversal import (
    ancestors_of,
    descendants_of,
    make_item,
    reachable_from,
    to_map,
)


class TestMakeItemAndToMap:
    """Test cases for make_item and to_map."""

    def test_make_item_defaults(self):
        """An item built from an id alone has no dependencies, level or data."""
        item = make_item("a")

        assert item.id == "a"
        assert item.dependencies == ()
        assert item.level is None
        assert item.data is None

    def test_make_item_with_data(self):
        """Dependencies and data are passed through."""
        item = make_item("b", ["a"], data={"command": "echo"})

        assert item.dependencies == ("a",)
        assert item.data == {"command": "echo"}

    def test_make_item_bare_string_dependency(self):
        """A single string dependency is kept whole."""
        assert make_item("b", "fetch").dependencies == ("fetch",)

    def test_to_map_keys_by_id(self):
        """to_map keys items by id in input order."""
        items = to_map([make_item("x"), make_item("y")])
        assert list(items) == ["x", "y"]

    def test_to_map_last_duplicate_wins(self):
        """A repeated id keeps the last item."""
        items = to_map([make_item("x", data=1), make_item("x", data=2)])

        assert len(items) == 1
        assert items["x"].data == 2


class TestReachableFrom:
    """Test cases for reachable_from."""

    def test_includes_root_and_transitive_dependencies(self, diamond_items):
        """The subgraph contains the root and everything it needs."""
        assert set(reachable_from(diamond_items, "d")) == {"a", "b", "c", "d"}
        assert set(reachable_from(diamond_items, "b")) == {"a", "b"}

    def test_depth_first_pre_order(self, diamond_items):
        """Entries come out root first, dependencies in declaration order."""
        assert list(reachable_from(diamond_items, "d")) == ["d", "b", "a", "c"]

    def test_unknown_root_is_empty(self, diamond_items):
        """An id that is not in the map yields nothing."""
        assert reachable_from(diamond_items, "missing") == {}

    def test_skips_unknown_dependencies(self):
        """Dependencies outside the map are not followed."""
        items = to_map([make_item("a", ["external"])])
        assert list(reachable_from(items, "a")) == ["a"]

    def test_terminates_on_cycle(self):
        """Cycles are walked once."""
        items = to_map([make_item("a", ["b"]), make_item("b", ["a"])])
        assert set(reachable_from(items, "a")) == {"a", "b"}

    def test_long_chain_does_not_recurse(self):
        """A chain longer than the recursion limit is handled."""
        items = to_map(
            [make_item("n0")] + [make_item(f"n{i}", [f"n{i - 1}"]) for i in range(1, 5000)]
        )
        assert len(reachable_from(items, "n4999")) == 5000


class TestAncestorsAndDescendants:
    """Test cases for ancestors_of and descendants_of."""

    def test_ancestors(self, diamond_items):
        """Ancestors are the transitive dependencies."""
        assert ancestors_of(diamond_items, "d") == {"a", "b", "c"}
        assert ancestors_of(diamond_items, "b") == {"a"}
        assert ancestors_of(diamond_items, "a") == set()

    def test_descendants(self, diamond_items):
        """Descendants are the transitive dependents."""
        assert descendants_of(diamond_items, "a") == {"b", "c", "d"}
        assert descendants_of(diamond_items, "c") == {"d"}
        assert descendants_of(diamond_items, "d") == set()

    def test_ancestors_ignore_unknown_dependencies(self):
        """Ids outside the map never show up as ancestors."""
        items = to_map([make_item("a", ["ghost"]), make_item("b", ["a"])])
        assert ancestors_of(items, "b") == {"a"}

    def test_self_is_excluded_on_cycle(self):
        """An item on a cycle is not its own ancestor or descendant."""
        items = to_map([
            make_item("a", ["c"]),
            make_item("b", ["a"]),
            make_item("c", ["b"]),
        ])

        assert ancestors_of(items, "a") == {"b", "c"}
        assert descendants_of(items, "a") == {"b", "c"}

    def test_unknown_id(self, diamond_items):
        """Unknown ids have no relatives."""
        assert ancestors_of(diamond_items, "missing") == set()
        assert descendants_of(diamond_items, "missing") == set()
