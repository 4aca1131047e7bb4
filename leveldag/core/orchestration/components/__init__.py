"""Components used by the level executor.

- LevelExecutor: Runs levels sequentially with bounded per-level concurrency
- run_bounded: Semaphore-bounded concurrent map used for each level
- wrap_simple_work: Adapts plain per-item functions into work functions
"""

from leveldag.core.orchestration.components.level_executor import (
    LevelExecutor,
    execute,
    execute_sequential,
    run_bounded,
)
from leveldag.core.orchestration.components.processor import wrap_simple_work

__all__ = [
    "LevelExecutor",
    "execute",
    "execute_sequential",
    "run_bounded",
    "wrap_simple_work",
]
