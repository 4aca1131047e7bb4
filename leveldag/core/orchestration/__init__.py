"""Orchestration layer for level execution.

The orchestration layer is responsible for:
- Executing LeveledGraphs level by level
- Bounding concurrent work inside a level
- Applying fail-fast or continue-on-error semantics
- Aggregating per-item results

Examples
--------
Example usage::

    from leveldag.core.orchestration import ExecutionOptions, LevelExecutor
    executor = LevelExecutor(ExecutionOptions(concurrency=5))
    result = await executor.execute(graph, work)
"""

from leveldag.core.orchestration.components import (
    LevelExecutor,
    execute,
    execute_sequential,
    run_bounded,
    wrap_simple_work,
)
from leveldag.core.orchestration.models import (
    SKIPPED_MESSAGE,
    DAGResult,
    ExecutionOptions,
    NodeResult,
    WorkFn,
)

__all__ = [
    "SKIPPED_MESSAGE",
    "DAGResult",
    "ExecutionOptions",
    "LevelExecutor",
    "NodeResult",
    "WorkFn",
    "execute",
    "execute_sequential",
    "run_bounded",
    "wrap_simple_work",
]
