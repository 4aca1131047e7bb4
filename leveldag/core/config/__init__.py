"""Configuration loading for leveldag."""

from leveldag.core.config.loader import ConfigLoader, clear_config_cache, load_config
from leveldag.core.config.models import ExecutionConfig, LevelDAGConfig, LoggingConfig

__all__ = [
    "ConfigLoader",
    "ExecutionConfig",
    "LevelDAGConfig",
    "LoggingConfig",
    "clear_config_cache",
    "load_config",
]
