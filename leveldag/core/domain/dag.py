"""DAG primitives: Item, LeveledGraph and level assignment.

Level assignment is Kahn's algorithm adapted to emit levels instead of a flat
order. Level 0 holds items without in-graph dependencies; level ``k`` holds
items whose in-graph dependencies all sit in levels ``0..k-1``. Items in the
same level are independent of each other and can run concurrently.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from leveldag.core.exceptions import CycleDetectedError
from leveldag.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Item:
    """Immutable node of a dependency graph.

    Attributes
    ----------
    id : str
        Unique identifier within a graph
    dependencies : tuple[str, ...]
        Identifiers this item depends on. Identifiers that are not part of the
        graph are ignored during leveling.
    level : int | None
        Level computed by :func:`assign_levels`, ``None`` until leveled
    data : Any
        Caller-defined payload
    """

    id: str
    dependencies: tuple[str, ...] = ()
    level: int | None = None
    data: Any = None

    def __post_init__(self) -> None:
        # Accept any iterable of identifiers, store a tuple. A bare string is one identifier.
        if isinstance(self.dependencies, str):
            object.__setattr__(self, "dependencies", (self.dependencies,))
        elif not isinstance(self.dependencies, tuple):
            object.__setattr__(self, "dependencies", tuple(self.dependencies))

    def in_graph_dependencies(self, items: Mapping[str, "Item"]) -> tuple[str, ...]:
        """Return the distinct declared dependencies present in ``items``."""
        return tuple(dep for dep in dict.fromkeys(self.dependencies) if dep in items)

    def __repr__(self) -> str:
        deps_str = f", deps={list(self.dependencies)}" if self.dependencies else ""
        level_str = f", level={self.level}" if self.level is not None else ""
        return f"Item('{self.id}'{deps_str}{level_str})"


@dataclass(frozen=True, slots=True)
class LeveledGraph:
    """Result of level assignment.

    ``items`` maps identifiers to leveled copies of the input items. ``levels``
    concatenated yields every item exactly once, and every in-graph dependency
    of an item lives in a strictly lower level. ``roots`` are identifiers that
    nothing in the graph depends on; ``leaves`` are identifiers without
    in-graph dependencies (always the identifiers of level 0).
    """

    items: Mapping[str, Item] = field(default_factory=lambda: MappingProxyType({}))
    levels: tuple[tuple[Item, ...], ...] = ()
    roots: tuple[str, ...] = ()
    leaves: tuple[str, ...] = ()

    def level_of(self, item_id: str) -> int:
        """Return the level assigned to ``item_id``.

        Raises
        ------
        KeyError
            If the identifier is not part of the graph
        """
        try:
            level = self.items[item_id].level
        except KeyError:
            raise KeyError(f"Item '{item_id}' not found in graph") from None
        assert level is not None
        return level

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.items

    def __iter__(self) -> Iterator[tuple[Item, ...]]:
        return iter(self.levels)

    def __str__(self) -> str:
        return f"LeveledGraph({len(self.items)} items in {len(self.levels)} levels)"


def assign_levels(items: Mapping[str, Item]) -> LeveledGraph:
    """Partition ``items`` into execution levels.

    The caller's mapping and items are left untouched; the returned graph holds
    new ``Item`` values carrying their level.

    Parameters
    ----------
    items : Mapping[str, Item]
        Items keyed by identifier

    Returns
    -------
    LeveledGraph
        Levels plus root and leaf identifiers

    Raises
    ------
    CycleDetectedError
        If some items can never reach zero in-degree. The error lists them in
        the iteration order of ``items``.

    Examples
    --------
    >>> from leveldag.core.domain.traversal import make_item, to_map
    >>> graph = assign_levels(to_map([
    ...     make_item("a"),
    ...     make_item("b", ["a"]),
    ...     make_item("c", ["a"]),
    ...     make_item("d", ["b", "c"]),
    ... ]))
    >>> [[item.id for item in level] for level in graph.levels]
    [['a'], ['b', 'c'], ['d']]
    >>> graph.roots, graph.leaves
    (('d',), ('a',))
    """
    in_degree: dict[str, int] = {}
    dependents: dict[str, list[str]] = {item_id: [] for item_id in items}

    for item_id, item in items.items():
        deps_in_graph = item.in_graph_dependencies(items)
        in_degree[item_id] = len(deps_in_graph)
        for dep in deps_in_graph:
            dependents[dep].append(item_id)

    frontier = [item_id for item_id, degree in in_degree.items() if degree == 0]
    leveled: dict[str, Item] = {}
    levels: list[tuple[Item, ...]] = []

    while frontier:
        current_level = len(levels)
        next_frontier: list[str] = []

        for item_id in frontier:
            leveled[item_id] = replace(items[item_id], level=current_level)
            for dependent in dependents[item_id]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    next_frontier.append(dependent)

        levels.append(tuple(leveled[item_id] for item_id in frontier))
        frontier = next_frontier

    if len(leveled) != len(items):
        blocked = [item_id for item_id in items if item_id not in leveled]
        logger.warning("Cycle detected, unresolved items: {blocked}", blocked=blocked)
        raise CycleDetectedError(blocked)

    roots = tuple(item_id for item_id in items if not dependents[item_id])
    leaves = tuple(item.id for item in levels[0]) if levels else ()

    logger.debug(
        "Assigned {count} items to {depth} levels", count=len(items), depth=len(levels)
    )
    return LeveledGraph(
        items=MappingProxyType({item_id: leveled[item_id] for item_id in items}),
        levels=tuple(levels),
        roots=roots,
        leaves=leaves,
    )


def flatten(graph: LeveledGraph) -> list[Item]:
    """Return the items in topological order (levels concatenated)."""
    return [item for level in graph.levels for item in level]


def render(graph: LeveledGraph) -> str:
    """Render a human-readable, multi-line dump of the graph levels.

    Examples
    --------
    >>> from leveldag.core.domain.traversal import make_item, to_map
    >>> print(render(assign_levels(to_map([make_item("a"), make_item("b", ["a"])]))))
    DAG Structure:
      Level 0:
        - a (leaf)
      Level 1:
        - b -> [a]
    """
    lines = ["DAG Structure:"]
    for index, level in enumerate(graph.levels):
        lines.append(f"  Level {index}:")
        for item in level:
            deps = item.in_graph_dependencies(graph.items)
            suffix = f" -> [{', '.join(deps)}]" if deps else " (leaf)"
            lines.append(f"    - {item.id}{suffix}")
    return "\n".join(lines)


__all__ = ["Item", "LeveledGraph", "assign_levels", "flatten", "render"]
