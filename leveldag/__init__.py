"""leveldag - level-by-level execution of dependency graphs.

Items declare the ids they depend on. ``assign_levels`` groups them into
levels where every dependency sits in an earlier level, and ``execute`` runs
each level's items concurrently before moving to the next.
"""

# Version is defined in pyproject.toml and read dynamically
try:
    from importlib.metadata import version

    __version__ = version("leveldag")
except Exception:
    __version__ = "0.0.0.dev0"  # Fallback for development installs

from leveldag.core.domain import (
    Item,
    LeveledGraph,
    ancestors_of,
    assign_levels,
    descendants_of,
    flatten,
    make_item,
    reachable_from,
    render,
    to_map,
)
from leveldag.core.domain.loader import load_items, parse_items
from leveldag.core.exceptions import (
    ConfigurationError,
    CycleDetectedError,
    ItemFileError,
    LevelDAGError,
    SkippedError,
    ValidationError,
)
from leveldag.core.orchestration import (
    DAGResult,
    ExecutionOptions,
    LevelExecutor,
    NodeResult,
    execute,
    execute_sequential,
    wrap_simple_work,
)

__all__ = [
    "ConfigurationError",
    "CycleDetectedError",
    "DAGResult",
    "ExecutionOptions",
    "Item",
    "ItemFileError",
    "LevelDAGError",
    "LevelExecutor",
    "LeveledGraph",
    "NodeResult",
    "SkippedError",
    "ValidationError",
    "__version__",
    "ancestors_of",
    "assign_levels",
    "descendants_of",
    "execute",
    "execute_sequential",
    "flatten",
    "load_items",
    "make_item",
    "parse_items",
    "reachable_from",
    "render",
    "to_map",
    "wrap_simple_work",
]
