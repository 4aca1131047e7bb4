"""Configuration file for pytest containing fixtures and configuration.

This module provides fixtures that can be used across multiple test files:
- diamond_items: the classic a -> (b, c) -> d item map
- isolated_config_env: a cwd and environment without leveldag configuration
"""

import pytest

from leveldag.core.config import clear_config_cache
from leveldag.core.domain import make_item, to_map

_CONFIG_ENV_VARS = (
    "LEVELDAG_CONFIG_PATH",
    "LEVELDAG_CONCURRENCY",
    "LEVELDAG_FAIL_FAST",
    "LEVELDAG_LOG_LEVEL",
    "LEVELDAG_LOG_FORMAT",
    "LEVELDAG_LOG_FILE",
)


@pytest.fixture
def diamond_items():
    """Fixture providing items a <- b, a <- c, (b, c) <- d."""
    return to_map([
        make_item("a"),
        make_item("b", ["a"]),
        make_item("c", ["a"]),
        make_item("d", ["b", "c"]),
    ])


@pytest.fixture
def isolated_config_env(tmp_path, monkeypatch):
    """Fixture running a test from an empty directory with no LEVELDAG_* variables."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_config_cache()
    yield tmp_path
    clear_config_cache()
