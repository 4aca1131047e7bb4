"""Tests for centralized logging configuration using Loguru."""

import json

from loguru import logger

import leveldag.core.logging as logging_module
from leveldag.core.logging import configure_logging, get_logger


class TestGetLogger:
    """Test get_logger function."""

    def test_get_logger_caches_results(self):
        """Test that get_logger caches logger instances."""
        assert get_logger("test.cache") is get_logger("test.cache")

    def test_get_logger_binds_module(self):
        """Records carry the module name in their extra context."""
        records = []
        handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:
            get_logger("test.bound").info("hello")
        finally:
            logger.remove(handler_id)

        assert records[-1]["extra"]["module"] == "test.bound"
        assert records[-1]["message"] == "hello"


class TestConfigureLogging:
    """Test configure_logging function."""

    def setup_method(self):
        """Reset logging configuration before each test."""
        configure_logging(force_reconfigure=True)
        logging_module._active = None

    def teardown_method(self):
        """Restore the default configuration."""
        configure_logging(force_reconfigure=True)

    def test_idempotent(self):
        """Calling twice with the same settings keeps the same handlers."""
        configure_logging(level="DEBUG", format="console")
        handlers = list(logging_module._handler_ids)

        configure_logging(level="DEBUG", format="console")

        assert logging_module._handler_ids == handlers

    def test_reconfigure_replaces_handlers(self):
        """Different settings swap out previously added handlers."""
        configure_logging(level="DEBUG", format="console")
        first = list(logging_module._handler_ids)

        configure_logging(level="INFO", format="json")

        assert logging_module._handler_ids
        assert not set(first) & set(logging_module._handler_ids)
        assert logging_module._active.format == "json"

    def test_external_handlers_survive(self):
        """Sinks added outside configure_logging are left alone."""
        messages = []
        handler_id = logger.add(messages.append, level="INFO", format="{message}")
        try:
            configure_logging(level="WARNING", format="structured")
            configure_logging(level="ERROR", format="console")
            logger.info("still captured")
        finally:
            logger.remove(handler_id)

        assert any("still captured" in m for m in messages)

    def test_rich_format(self):
        """The rich format installs a handler."""
        configure_logging(level="INFO", format="rich")
        assert len(logging_module._handler_ids) == 1

    def test_output_file_receives_json(self, tmp_path):
        """An output file gets serialized records."""
        log_file = tmp_path / "logs" / "leveldag.log"
        configure_logging(level="INFO", format="console", output_file=log_file)

        get_logger("test.file").info("written to file")
        logger.complete()
        configure_logging(force_reconfigure=True)

        lines = [line for line in log_file.read_text().splitlines() if line.strip()]
        record = json.loads(lines[-1])
        assert record["record"]["message"] == "written to file"

    def test_lazy_configuration_from_environment(self, monkeypatch):
        """get_logger configures logging from LEVELDAG_* variables when unset."""
        monkeypatch.setenv("LEVELDAG_LOG_LEVEL", "error")
        monkeypatch.setenv("LEVELDAG_LOG_FORMAT", "console")
        get_logger.cache_clear()

        get_logger("test.lazy")

        assert logging_module._active.level == "ERROR"
        assert logging_module._active.format == "console"

    def test_console_format_writes_plain_lines(self, capsys):
        """The console format writes level and message without color codes."""
        configure_logging(level="INFO", format="console")

        get_logger("test.console").info("plain line")
        err = capsys.readouterr().err

        assert "INFO" in err
        assert "plain line" in err
        assert "\x1b[" not in err

    def test_structured_format_without_color(self, capsys):
        """Color markup is stripped from structured output when color is off."""
        configure_logging(level="INFO", format="structured", use_color=False)

        get_logger("test.structured").warning("no markup")
        err = capsys.readouterr().err

        assert "no markup" in err
        assert "WARNING" in err
        assert "<level>" not in err
        assert "\x1b[" not in err
