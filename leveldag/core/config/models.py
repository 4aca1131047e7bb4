"""Configuration data models for leveldag."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from leveldag.core.exceptions import ValidationError

_LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_LOG_FORMATS = frozenset({"console", "json", "structured", "rich"})


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging configuration.

    Attributes
    ----------
    level : str, default="INFO"
        Log level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
    format : str, default="structured"
        Output format (console, json, structured, rich)
    output_file : str | None, default=None
        Optional file path to write logs to
    use_color : bool, default=True
        Use ANSI color codes (auto-disabled for non-TTY)

    Examples
    --------
    TOML configuration:

    ```toml
    [tool.leveldag.logging]
    level = "DEBUG"
    format = "rich"
    ```

    Environment variable overrides:

    ```bash
    export LEVELDAG_LOG_LEVEL=DEBUG
    export LEVELDAG_LOG_FORMAT=json
    export LEVELDAG_LOG_FILE=/var/log/leveldag.log
    ```
    """

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "structured", "rich"] = "structured"
    output_file: str | None = None
    use_color: bool = True

    def __post_init__(self) -> None:
        if self.level not in _LOG_LEVELS:
            raise ValidationError(
                "logging.level", f"must be one of {sorted(_LOG_LEVELS)}", self.level
            )
        if self.format not in _LOG_FORMATS:
            raise ValidationError(
                "logging.format", f"must be one of {sorted(_LOG_FORMATS)}", self.format
            )


@dataclass(frozen=True, slots=True)
class ExecutionConfig:
    """Default execution settings applied by the CLI.

    Attributes
    ----------
    concurrency : int, default=4
        Maximum in-flight work invocations per level
    fail_fast : bool, default=True
        Halt after the first failed item
    """

    concurrency: int = 4
    fail_fast: bool = True

    def __post_init__(self) -> None:
        if self.concurrency <= 0:
            raise ValidationError("execution.concurrency", "must be positive", self.concurrency)


@dataclass(frozen=True, slots=True)
class LevelDAGConfig:
    """Root configuration object."""

    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


__all__ = ["ExecutionConfig", "LevelDAGConfig", "LoggingConfig"]
