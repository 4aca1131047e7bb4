"""Adapter turning plain per-item functions into executor work functions."""

import inspect
import time
from collections.abc import Awaitable, Callable
from typing import Any

from leveldag.core.domain.dag import Item
from leveldag.core.logging import get_logger
from leveldag.core.orchestration.models import NodeResult, WorkFn

logger = get_logger(__name__)


def wrap_simple_work(fn: Callable[[Item], Awaitable[Any] | Any]) -> WorkFn:
    """Wrap ``fn`` so it produces a NodeResult instead of raising.

    The wrapper times the call and records ``Starting <id>`` followed by
    ``Completed <id>`` or ``Failed <id>: <message>`` in the result logs. Any
    ``Exception`` raised by ``fn`` becomes a failed result carrying that
    exception; a returned value becomes the result's ``output``. ``fn`` may be
    a coroutine function or a plain callable.

    Examples
    --------
    Example usage::

        async def build(item: Item) -> None:
            await compile_package(item.data)

        result = await execute(graph, wrap_simple_work(build))
    """

    async def work(item: Item) -> NodeResult:
        start_time = time.perf_counter()
        logs = [f"Starting {item.id}"]

        try:
            output = fn(item)
            if inspect.isawaitable(output):
                output = await output
        except Exception as e:
            logs.append(f"Failed {item.id}: {e}")
            logger.debug("Item {item_id} failed: {error}", item_id=item.id, error=e)
            return NodeResult(
                item=item,
                success=False,
                error=e,
                duration=(time.perf_counter() - start_time) * 1000,
                logs=logs,
            )

        logs.append(f"Completed {item.id}")
        return NodeResult(
            item=item,
            success=True,
            duration=(time.perf_counter() - start_time) * 1000,
            logs=logs,
            output=output,
        )

    return work


__all__ = ["wrap_simple_work"]
