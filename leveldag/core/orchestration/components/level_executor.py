"""LevelExecutor - runs work over a leveled graph, one level at a time.

Levels execute strictly in order. Inside a level every item gets its own task
and a semaphore bounds how many work invocations are in flight at once.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, TypeVar

from leveldag.core.domain.dag import Item, LeveledGraph
from leveldag.core.logging import get_logger
from leveldag.core.orchestration.models import (
    CompleteCallback,
    DAGResult,
    ExecutionOptions,
    NodeResult,
    StartCallback,
    WorkFn,
)

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_bounded(
    items: Iterable[T],
    fn: Callable[[T], Awaitable[R]],
    limit: int,
) -> list[R]:
    """Run ``fn`` over ``items`` with at most ``limit`` calls in flight.

    Calls start in the order of ``items``; a finishing call frees its slot for
    the next waiting one. Results are returned in completion order.

    Raises
    ------
    Exception
        The exception raised by ``fn`` once every call has settled. When
        several calls raise, they are raised together as an ExceptionGroup.
    """
    semaphore = asyncio.Semaphore(limit)
    completed: list[R] = []

    async def run_with_semaphore(item: T) -> None:
        async with semaphore:
            result = await fn(item)
        completed.append(result)

    outputs = await asyncio.gather(
        *(run_with_semaphore(item) for item in items), return_exceptions=True
    )

    exceptions: list[Exception] | None = None
    for output in outputs:
        if isinstance(output, Exception):
            if exceptions is None:
                exceptions = []
            exceptions.append(output)
        elif isinstance(output, BaseException):
            # KeyboardInterrupt, SystemExit, CancelledError
            raise output

    if exceptions:
        if len(exceptions) == 1:
            raise exceptions[0]
        raise ExceptionGroup(f"{len(exceptions)} work invocations raised", exceptions)

    return completed


@dataclass(slots=True)
class _ExecutionState:
    """Mutable bookkeeping for a single execute() call."""

    stop: bool = False
    results: dict[str, NodeResult] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)


class LevelExecutor:
    """Executes the levels of a LeveledGraph with bounded concurrency.

    Responsibilities:
    - Run levels sequentially, items of one level concurrently
    - Bound in-flight work per level via a semaphore
    - Apply fail-fast or continue-on-error semantics
    - Invoke start/complete callbacks around each work invocation

    The executor holds only its options; every call to :meth:`execute` starts
    from fresh state.

    Parameters
    ----------
    options : ExecutionOptions | None
        Execution settings. Defaults to ``ExecutionOptions()``.

    Examples
    --------
    Example usage::

        executor = LevelExecutor(ExecutionOptions(concurrency=2))
        result = await executor.execute(graph, work)
        if not result.success:
            print(result.failed_nodes)
    """

    def __init__(self, options: ExecutionOptions | None = None) -> None:
        self.options = options or ExecutionOptions()

    async def execute(self, graph: LeveledGraph, work: WorkFn) -> DAGResult:
        """Execute ``work`` for every item of ``graph``, level by level.

        Parameters
        ----------
        graph : LeveledGraph
            Output of ``assign_levels``
        work : Callable[[Item], Awaitable[NodeResult]]
            Per-item work. Exceptions it raises propagate out of this call;
            wrap plain functions with ``wrap_simple_work`` to turn them into
            failed results instead.

        Returns
        -------
        DAGResult
            Aggregated results. On a fail-fast halt, items of levels that
            never started have no entry.
        """
        options = self.options
        state = _ExecutionState()
        start_time = time.perf_counter()

        logger.info(
            "Executing {count} items in {depth} levels (concurrency={concurrency}, "
            "fail_fast={fail_fast})",
            count=len(graph),
            depth=len(graph.levels),
            concurrency=options.concurrency,
            fail_fast=options.fail_fast,
        )

        for level_index, level in enumerate(graph.levels):
            if state.stop:
                logger.warning(
                    "Fail-fast halt before level {level}, {remaining} levels not started",
                    level=level_index,
                    remaining=len(graph.levels) - level_index,
                )
                break

            logger.debug(
                "Starting level {level} with {count} items", level=level_index, count=len(level)
            )
            level_results = await self._execute_level(level, work, state)

            for result in level_results:
                state.results[result.item.id] = result
                if not result.success:
                    state.failed.append(result.item.id)
                    if options.fail_fast:
                        state.stop = True

        total_duration = _elapsed_ms(start_time)
        result = DAGResult(
            success=not state.failed,
            results=MappingProxyType(state.results),
            failed_nodes=tuple(state.failed),
            total_duration=total_duration,
        )

        log = logger.info if result.success else logger.warning
        log(
            "Execution finished: success={success}, {processed} results, "
            "{failed} failed, {duration:.1f}ms",
            success=result.success,
            processed=len(state.results),
            failed=len(state.failed),
            duration=total_duration,
        )
        return result

    async def execute_sequential(self, graph: LeveledGraph, work: WorkFn) -> DAGResult:
        """Execute with concurrency pinned to 1; every other option is kept."""
        executor = LevelExecutor(replace(self.options, concurrency=1))
        return await executor.execute(graph, work)

    async def _execute_level(
        self, level: tuple[Item, ...], work: WorkFn, state: _ExecutionState
    ) -> list[NodeResult]:
        """Run one level; results come back in completion order."""
        options = self.options
        on_start = options.on_node_start
        on_complete = options.on_node_complete

        async def run_item(item: Item) -> NodeResult:
            if state.stop:
                return NodeResult.skipped(item)

            if on_start is not None:
                on_start(item)
            result = await work(item)
            if on_complete is not None:
                on_complete(result)
            return result

        return await run_bounded(level, run_item, options.concurrency)


def _resolve_options(
    options: ExecutionOptions | None, overrides: dict[str, Any]
) -> ExecutionOptions:
    base = options or ExecutionOptions()
    return replace(base, **overrides) if overrides else base


async def execute(
    graph: LeveledGraph,
    work: WorkFn,
    options: ExecutionOptions | None = None,
    **overrides: Any,
) -> DAGResult:
    """Execute ``work`` over ``graph``.

    Keyword ``overrides`` (``concurrency``, ``fail_fast``, ``on_node_start``,
    ``on_node_complete``) replace the matching fields of ``options``.

    Examples
    --------
    Example usage::

        graph = assign_levels(items)
        result = await execute(graph, wrap_simple_work(build), concurrency=8)
    """
    return await LevelExecutor(_resolve_options(options, overrides)).execute(graph, work)


async def execute_sequential(
    graph: LeveledGraph,
    work: WorkFn,
    options: ExecutionOptions | None = None,
    *,
    fail_fast: bool | None = None,
    on_node_start: StartCallback | None = None,
    on_node_complete: CompleteCallback | None = None,
) -> DAGResult:
    """Execute ``work`` over ``graph`` one item at a time.

    Same semantics as :func:`execute` with concurrency forced to 1. Keyword
    arguments left as ``None`` keep the value from ``options``.
    """
    overrides: dict[str, Any] = {}
    if fail_fast is not None:
        overrides["fail_fast"] = fail_fast
    if on_node_start is not None:
        overrides["on_node_start"] = on_node_start
    if on_node_complete is not None:
        overrides["on_node_complete"] = on_node_complete
    executor = LevelExecutor(_resolve_options(options, overrides))
    return await executor.execute_sequential(graph, work)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


__all__ = ["LevelExecutor", "execute", "execute_sequential", "run_bounded"]
