"""Core exception hierarchy for leveldag.

All leveldag exceptions inherit from LevelDAGError so callers can catch
every library failure with a single except clause. Graph-shape problems
derive from DirectedGraphError.
"""

from __future__ import annotations

from collections.abc import Iterable

# ============================================================================
# Base Exception
# ============================================================================


class LevelDAGError(Exception):
    """Base exception for all leveldag errors.

    Catch this to handle all leveldag-specific failures.
    """

    pass


# ============================================================================
# Configuration & Validation Errors
# ============================================================================


class ConfigurationError(LevelDAGError):
    """Raised when configuration is invalid or missing.

    Examples
    --------
    Example usage::

        raise ConfigurationError("execution", "concurrency must be an integer")
    """

    def __init__(self, component: str, reason: str) -> None:
        """Initialize configuration error.

        Args
        ----
            component: Name of the configuration section or component
            reason: Explanation of what's wrong
        """
        super().__init__(f"Configuration error in '{component}': {reason}")
        self.component = component
        self.reason = reason


class ValidationError(LevelDAGError):
    """Raised when a value fails validation.

    Examples
    --------
    Example usage::

        raise ValidationError("concurrency", "must be positive", value=0)
    """

    def __init__(self, field: str, constraint: str, value: object = None) -> None:
        """Initialize validation error.

        Args
        ----
            field: Name of the field that failed validation
            constraint: Description of the validation constraint
            value: The invalid value (optional)
        """
        if value is not None:
            msg = f"Validation failed for '{field}': {constraint} (got {value!r})"
        else:
            msg = f"Validation failed for '{field}': {constraint}"
        super().__init__(msg)
        self.field = field
        self.constraint = constraint
        self.value = value


class ItemFileError(LevelDAGError):
    """Raised when an item definition file cannot be read or parsed."""

    pass


class SkippedError(LevelDAGError):
    """Error attached to the synthetic result of an item that was not run.

    Never raised by the executor; it only marks the synthetic result.
    """

    pass


# ============================================================================
# Graph Errors
# ============================================================================


class DirectedGraphError(LevelDAGError):
    """Base exception for dependency graph errors."""

    pass


class CycleDetectedError(DirectedGraphError):
    """Raised when items cannot be leveled because they form a cycle.

    The ``nodes`` attribute holds the identifiers that never reached zero
    in-degree, in the order of the input mapping.
    """

    def __init__(self, nodes: Iterable[str]) -> None:
        self.nodes = tuple(nodes)
        super().__init__("Circular dependency detected involving: " + ", ".join(self.nodes))


__all__ = [
    "LevelDAGError",
    "ConfigurationError",
    "ValidationError",
    "ItemFileError",
    "SkippedError",
    "DirectedGraphError",
    "CycleDetectedError",
]
