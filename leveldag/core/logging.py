"""Loguru setup shared by the library and the CLI.

Library modules obtain a logger with :func:`get_logger`. The CLI calls
:func:`configure_logging` once the configuration file has been read::

    from leveldag.core.logging import configure_logging, get_logger

    configure_logging(level="DEBUG", format="rich")
    get_logger(__name__).info("Level {index} started", index=0)
"""

import os
import sys
from contextlib import suppress
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, NamedTuple

from loguru import logger
from rich.logging import RichHandler

if TYPE_CHECKING:
    from loguru import Logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["console", "json", "structured", "rich"]

_PLAIN_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} {level: <8} | {name} | {message}"
_STRUCTURED_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> [<level>{level: <8}</level>]"
    "<cyan>{name}:{function}:{line}</cyan> | <level>{message}</level>"
)


class _Settings(NamedTuple):
    level: str
    format: str
    output_file: str | None
    use_color: bool


_active: _Settings | None = None
_handler_ids: list[int] = []


def configure_logging(
    level: LogLevel = "INFO",
    format: LogFormat = "structured",
    output_file: str | Path | None = None,
    use_color: bool = True,
    force_reconfigure: bool = False,
) -> None:
    """Install the leveldag stderr sink and, optionally, a JSON file sink.

    Repeating a call with unchanged settings is a no-op. Reconfiguring only
    removes sinks this function added earlier, so handlers registered by a
    host application or a test harness keep receiving records.

    Parameters
    ----------
    level : LogLevel, default="INFO"
        Minimum level for every installed sink
    format : LogFormat, default="structured"
        ``console`` for plain lines, ``json`` for serialized records,
        ``structured`` for lines with module, function and line number,
        ``rich`` for rich's console handler
    output_file : str | Path | None, default=None
        File that additionally receives serialized records, rotated at 10 MB
    use_color : bool, default=True
        Colorize the structured format when stderr is a terminal
    force_reconfigure : bool, default=False
        Reinstall sinks even when the settings are unchanged
    """
    global _active

    settings = _Settings(level, format, str(output_file) if output_file else None, use_color)
    if settings == _active and not force_reconfigure:
        return

    while _handler_ids:
        handler_id = _handler_ids.pop()
        # Already gone if someone called logger.remove() without arguments
        with suppress(ValueError):
            logger.remove(handler_id)

    _handler_ids.append(logger.add(level=level, **_stderr_sink_options(format, use_color)))

    if settings.output_file:
        path = Path(settings.output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        _handler_ids.append(
            logger.add(path, level=level, serialize=True, rotation="10 MB", retention="1 week")
        )

    _active = settings


def _stderr_sink_options(format: LogFormat, use_color: bool) -> dict[str, Any]:
    """Keyword arguments for ``logger.add`` rendering ``format`` on stderr."""
    if format == "rich":
        return {
            "sink": RichHandler(rich_tracebacks=True, markup=False, show_path=True),
            "format": "{message}",
        }
    if format == "json":
        return {"sink": sys.stderr, "serialize": True}
    if format == "structured":
        # Color tags are stripped when colorize is off
        colorize = use_color and sys.stderr.isatty()
        return {"sink": sys.stderr, "format": _STRUCTURED_FORMAT, "colorize": colorize}
    return {"sink": sys.stderr, "format": _PLAIN_FORMAT, "colorize": False}


@lru_cache(maxsize=256)
def get_logger(name: str) -> "Logger":
    """Return the shared loguru logger bound to ``name`` under ``extra["module"]``.

    The first call sets up logging from ``LEVELDAG_LOG_LEVEL`` and
    ``LEVELDAG_LOG_FORMAT`` unless :func:`configure_logging` already ran.
    """
    if _active is None:
        configure_logging(
            level=os.getenv("LEVELDAG_LOG_LEVEL", "INFO").upper(),  # type: ignore[arg-type]
            format=os.getenv("LEVELDAG_LOG_FORMAT", "structured").lower(),  # type: ignore[arg-type]
        )
    return logger.bind(module=name)


__all__ = ["LogFormat", "LogLevel", "configure_logging", "get_logger"]
