"""Domain layer: items, leveled graphs and graph helpers."""

from leveldag.core.domain.dag import Item, LeveledGraph, assign_levels, flatten, render
from leveldag.core.domain.traversal import (
    ancestors_of,
    descendants_of,
    make_item,
    reachable_from,
    to_map,
)

__all__ = [
    "Item",
    "LeveledGraph",
    "ancestors_of",
    "assign_levels",
    "descendants_of",
    "flatten",
    "make_item",
    "reachable_from",
    "render",
    "to_map",
]
