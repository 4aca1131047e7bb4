"""TOML configuration loader for leveldag."""

from __future__ import annotations

import os
import re
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from leveldag.core.config.models import ExecutionConfig, LevelDAGConfig, LoggingConfig
from leveldag.core.exceptions import ConfigurationError, ValidationError
from leveldag.core.logging import get_logger

# Constants for boolean environment variable parsing
_TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
_FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})

_SEARCH_PATHS = ("leveldag.toml", "pyproject.toml", ".leveldag.toml")

logger = get_logger(__name__)


def _parse_bool_env(name: str, value: str) -> bool:
    """Parse a boolean environment variable value.

    Raises
    ------
    ConfigurationError
        If value is not a recognized boolean string
    """
    normalized = value.lower().strip()
    if normalized in _TRUTHY_VALUES:
        return True
    if normalized in _FALSY_VALUES:
        return False
    raise ConfigurationError(name, f"invalid boolean value {value!r}")


def _parse_int_env(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ConfigurationError(name, f"invalid integer value {value!r}") from None


class ConfigLoader:
    """Loads leveldag configuration from TOML files."""

    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    def load_from_toml(self, path: str | Path | None = None) -> LevelDAGConfig:
        """Load configuration from a TOML file.

        Parameters
        ----------
        path : str | Path | None
            Path to TOML file. If None, searches for leveldag.toml or pyproject.toml

        Returns
        -------
        LevelDAGConfig
            Parsed configuration with environment overrides applied

        Raises
        ------
        FileNotFoundError
            If no configuration file is found
        ConfigurationError
            If the file cannot be parsed or holds invalid values
        """
        config_path = self._find_config_file(path)
        return self._apply_env_overrides(_load_and_parse_cached(str(config_path.absolute())))

    def _load_and_parse(self, config_path: Path) -> LevelDAGConfig:
        """Load and parse configuration file."""
        logger.debug("Loading configuration from {path}", path=config_path)

        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(str(config_path), f"invalid TOML: {e}") from e

        tool = data.get("tool")
        if isinstance(tool, dict) and "leveldag" in tool:
            section = data["tool"]["leveldag"]
        elif config_path.name == "pyproject.toml":
            logger.debug("No [tool.leveldag] section in {path}, using defaults", path=config_path)
            return LevelDAGConfig()
        else:
            # Flat format (top-level keys)
            section = data

        return self._parse_config(self._substitute_env_vars(section))

    def _find_config_file(self, path: str | Path | None) -> Path:
        """Find configuration file.

        Raises
        ------
        FileNotFoundError
            If no configuration file is found
        """
        if path:
            config_path = Path(path)
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return config_path

        if env_path := os.getenv("LEVELDAG_CONFIG_PATH"):
            config_path = Path(env_path)
            if config_path.exists():
                logger.debug("Using config from LEVELDAG_CONFIG_PATH: {path}", path=config_path)
                return config_path
            logger.warning("LEVELDAG_CONFIG_PATH set but file not found: {path}", path=config_path)

        for search_path in _SEARCH_PATHS:
            candidate = Path(search_path)
            if candidate.exists():
                return candidate

        # Parent directories only count when they carry a [tool.leveldag] section
        current = Path.cwd()
        while current != current.parent:
            current = current.parent
            pyproject = current / "pyproject.toml"
            if pyproject.exists():
                try:
                    with pyproject.open("rb") as f:
                        data = tomllib.load(f)
                except (OSError, tomllib.TOMLDecodeError) as e:
                    logger.warning(
                        "Skipping unreadable {path} during config search: {error}",
                        path=pyproject,
                        error=e,
                    )
                    continue
                tool = data.get("tool")
                if isinstance(tool, dict) and "leveldag" in tool:
                    return pyproject

        raise FileNotFoundError(
            "No configuration file found. Searched for: " + ", ".join(_SEARCH_PATHS)
        )

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively replace ``${VAR}`` placeholders with environment values.

        Unknown variables keep their placeholder.
        """
        if isinstance(data, str):

            def replacer(match: re.Match[str]) -> str:
                value = os.environ.get(match.group(1))
                return match.group(0) if value is None else value

            return self.ENV_VAR_PATTERN.sub(replacer, data)

        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}

        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]

        return data

    def _parse_config(self, data: dict[str, Any]) -> LevelDAGConfig:
        """Parse raw TOML data into LevelDAGConfig."""
        if not isinstance(data, dict):
            raise ConfigurationError("leveldag", f"expected a table, got {data!r}")
        execution_data = _section(data, "execution")
        logging_data = _section(data, "logging")

        try:
            execution = ExecutionConfig(
                concurrency=_coerce_int(
                    "execution.concurrency", execution_data.get("concurrency", 4)
                ),
                fail_fast=_coerce_bool(
                    "execution.fail_fast", execution_data.get("fail_fast", True)
                ),
            )
            level = str(logging_data.get("level", "INFO")).upper()
            format_type = str(logging_data.get("format", "structured")).lower()
            logging_config = LoggingConfig(
                level=level,  # type: ignore[arg-type]
                format=format_type,  # type: ignore[arg-type]
                output_file=logging_data.get("output_file"),
                use_color=_coerce_bool("logging.use_color", logging_data.get("use_color", True)),
            )
        except ValidationError as e:
            raise ConfigurationError(e.field, e.constraint) from e

        return LevelDAGConfig(execution=execution, logging=logging_config)

    def _apply_env_overrides(self, config: LevelDAGConfig) -> LevelDAGConfig:
        """Apply LEVELDAG_* environment variables on top of file values.

        Environment variables take precedence over TOML configuration:
        - LEVELDAG_CONCURRENCY: Max in-flight work per level
        - LEVELDAG_FAIL_FAST: Halt on first failure (true/false)
        - LEVELDAG_LOG_LEVEL: Log level
        - LEVELDAG_LOG_FORMAT: Output format (console, json, structured, rich)
        - LEVELDAG_LOG_FILE: Optional file path for log output
        """
        execution = config.execution
        concurrency = execution.concurrency
        fail_fast = execution.fail_fast
        if env_concurrency := os.getenv("LEVELDAG_CONCURRENCY"):
            concurrency = _parse_int_env("LEVELDAG_CONCURRENCY", env_concurrency)
        if env_fail_fast := os.getenv("LEVELDAG_FAIL_FAST"):
            fail_fast = _parse_bool_env("LEVELDAG_FAIL_FAST", env_fail_fast)

        logging_config = config.logging
        level = logging_config.level
        format_type = logging_config.format
        output_file = logging_config.output_file
        if env_level := os.getenv("LEVELDAG_LOG_LEVEL"):
            level = env_level.upper()  # type: ignore[assignment]
        if env_format := os.getenv("LEVELDAG_LOG_FORMAT"):
            format_type = env_format.lower()  # type: ignore[assignment]
        if env_file := os.getenv("LEVELDAG_LOG_FILE"):
            output_file = env_file

        try:
            return LevelDAGConfig(
                execution=ExecutionConfig(concurrency=concurrency, fail_fast=fail_fast),
                logging=LoggingConfig(
                    level=level,
                    format=format_type,
                    output_file=output_file,
                    use_color=logging_config.use_color,
                ),
            )
        except ValidationError as e:
            raise ConfigurationError(e.field, e.constraint) from e


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigurationError(name, f"expected a table, got {section!r}")
    return section


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int | str):
        raise ConfigurationError(name, f"expected an integer, got {value!r}")
    if isinstance(value, str):
        return _parse_int_env(name, value)
    return value


def _coerce_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _parse_bool_env(name, value)
    raise ConfigurationError(name, f"expected a boolean, got {value!r}")


@lru_cache(maxsize=32)
def _load_and_parse_cached(path_str: str) -> LevelDAGConfig:
    """Cached file parse; environment overrides are applied on every load."""
    return ConfigLoader()._load_and_parse(Path(path_str))


def load_config(path: str | Path | None = None) -> LevelDAGConfig:
    """Load configuration from a TOML file, or defaults when none exists.

    Environment overrides apply in both cases.

    Parameters
    ----------
    path : str | Path | None
        Path to configuration file or None to search

    Raises
    ------
    FileNotFoundError
        If an explicit ``path`` does not exist
    ConfigurationError
        If the file or an environment override holds an invalid value
    """
    loader = ConfigLoader()
    try:
        return loader.load_from_toml(path)
    except FileNotFoundError:
        if path:
            raise
        logger.debug("No configuration file found, using defaults")
        return loader._apply_env_overrides(LevelDAGConfig())


def clear_config_cache() -> None:
    """Clear the parsed-file cache.

    Useful for testing or when configuration files have been modified.
    """
    _load_and_parse_cached.cache_clear()


__all__ = ["ConfigLoader", "clear_config_cache", "load_config"]
