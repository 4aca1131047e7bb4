"""Helpers for building item maps and walking dependency relations.

These operate on plain ``Mapping[str, Item]`` collections and never require
the graph to be leveled or acyclic. Walks use explicit stacks so long
dependency chains do not hit the recursion limit.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Any

from leveldag.core.domain.dag import Item


def make_item(item_id: str, dependencies: Iterable[str] = (), data: Any = None) -> Item:
    """Create an item from minimal input.

    >>> make_item("build", ["fetch"])
    Item('build', deps=['fetch'])
    """
    deps = (dependencies,) if isinstance(dependencies, str) else tuple(dependencies)
    return Item(id=item_id, dependencies=deps, data=data)


def to_map(items: Iterable[Item]) -> dict[str, Item]:
    """Key items by identifier. The last occurrence of a duplicate identifier wins."""
    return {item.id: item for item in items}


def reachable_from(items: Mapping[str, Item], root_id: str) -> dict[str, Item]:
    """Return the subgraph reachable from ``root_id`` through declared dependencies.

    The root itself is included. Dependencies that are not in ``items`` are
    skipped, and an unknown root yields an empty mapping. Entries come out in
    depth-first pre-order.

    >>> items = to_map([make_item("a"), make_item("b", ["a"]), make_item("c")])
    >>> list(reachable_from(items, "b"))
    ['b', 'a']
    """
    filtered: dict[str, Item] = {}
    stack = [root_id]

    while stack:
        item_id = stack.pop()
        if item_id in filtered:
            continue
        item = items.get(item_id)
        if item is None:
            continue
        filtered[item_id] = item
        stack.extend(reversed(item.dependencies))

    return filtered


def ancestors_of(items: Mapping[str, Item], item_id: str) -> set[str]:
    """Return every in-graph item ``item_id`` depends on, directly or transitively.

    ``item_id`` itself is never part of the result, even when it sits on a
    cycle.
    """
    ancestors: set[str] = set()
    visited = {item_id}
    stack = [item_id]

    while stack:
        item = items.get(stack.pop())
        if item is None:
            continue
        for dep in item.dependencies:
            if dep not in items:
                continue
            ancestors.add(dep)
            if dep not in visited:
                visited.add(dep)
                stack.append(dep)

    ancestors.discard(item_id)
    return ancestors


def descendants_of(items: Mapping[str, Item], item_id: str) -> set[str]:
    """Return every item that depends on ``item_id``, directly or transitively.

    ``item_id`` itself is never part of the result.
    """
    dependents: defaultdict[str, set[str]] = defaultdict(set)
    for node_id, item in items.items():
        for dep in item.dependencies:
            dependents[dep].add(node_id)

    descendants: set[str] = set()
    stack = [item_id]

    while stack:
        for dependent in dependents.get(stack.pop(), ()):
            if dependent not in descendants:
                descendants.add(dependent)
                stack.append(dependent)

    descendants.discard(item_id)
    return descendants


__all__ = ["ancestors_of", "descendants_of", "make_item", "reachable_from", "to_map"]
