"""Models for level execution options and results."""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from leveldag.core.domain.dag import Item
from leveldag.core.exceptions import SkippedError, ValidationError

SKIPPED_MESSAGE = "Skipped due to earlier failure"


@dataclass(slots=True)
class NodeResult:
    """Outcome of processing one item.

    Attributes
    ----------
    item : Item
        The item that was processed
    success : bool
        Whether processing succeeded
    error : BaseException | None
        Error if processing failed
    duration : float
        Elapsed time in milliseconds
    logs : list[str]
        Log lines collected while processing
    output : Any
        Optional value produced by the work function
    """

    item: Item
    success: bool
    error: BaseException | None = None
    duration: float = 0.0
    logs: list[str] = field(default_factory=list)
    output: Any = None

    @classmethod
    def skipped(cls, item: Item) -> "NodeResult":
        """Build the failed result recorded for an item that was never started."""
        return cls(
            item=item,
            success=False,
            error=SkippedError(SKIPPED_MESSAGE),
            duration=0.0,
            logs=[SKIPPED_MESSAGE],
        )

    @property
    def is_skipped(self) -> bool:
        return isinstance(self.error, SkippedError)


WorkFn = Callable[[Item], Awaitable[NodeResult]]
StartCallback = Callable[[Item], None]
CompleteCallback = Callable[[NodeResult], None]


@dataclass(frozen=True, slots=True)
class ExecutionOptions:
    """Configuration for a level execution.

    Attributes
    ----------
    concurrency : int, default=4
        Maximum number of work invocations in flight within one level.
        Levels themselves always run one after another.
    fail_fast : bool, default=True
        Do not start further levels once a level has a failed result
    on_node_start : Callable[[Item], None] | None
        Called synchronously right before the work function starts for an item
    on_node_complete : Callable[[NodeResult], None] | None
        Called synchronously with each result produced by the work function

    Examples
    --------
    Example usage::

        options = ExecutionOptions(concurrency=8, fail_fast=False)
        result = await execute(graph, work, options)
    """

    concurrency: int = 4
    fail_fast: bool = True
    on_node_start: StartCallback | None = None
    on_node_complete: CompleteCallback | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int):
            raise ValidationError("concurrency", "must be an integer", self.concurrency)
        if self.concurrency <= 0:
            raise ValidationError("concurrency", "must be positive", self.concurrency)


@dataclass(frozen=True, slots=True)
class DAGResult:
    """Aggregate outcome of one execution.

    Attributes
    ----------
    success : bool
        True iff no item failed
    results : Mapping[str, NodeResult]
        Result per processed item. Items in levels that never started are absent.
    failed_nodes : tuple[str, ...]
        Identifiers of failed items, level by level in completion order
    total_duration : float
        Wall-clock duration of the execution in milliseconds
    """

    success: bool
    results: Mapping[str, NodeResult] = field(default_factory=lambda: MappingProxyType({}))
    failed_nodes: tuple[str, ...] = ()
    total_duration: float = 0.0

    @property
    def skipped_nodes(self) -> tuple[str, ...]:
        """Identifiers whose result is the synthetic skip."""
        return tuple(item_id for item_id, result in self.results.items() if result.is_skipped)


__all__ = [
    "SKIPPED_MESSAGE",
    "CompleteCallback",
    "DAGResult",
    "ExecutionOptions",
    "NodeResult",
    "StartCallback",
    "WorkFn",
]
