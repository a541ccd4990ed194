"""Tests for process logging configuration."""

import logging

import pytest
import structlog
from dining.utils.logging import configure_logging, get_log_level


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestLogLevel:
    def test_level_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert get_log_level() == "INFO"
        monkeypatch.setenv("ENVIRONMENT", "development")
        assert get_log_level() == "DEBUG"

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level() == "ERROR"


@pytest.mark.fast
class TestConfigureLogging:
    def test_writes_rotating_log_files(self, tmp_path, monkeypatch, restore_logging):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "INFO")
        configure_logging(tmp_path)

        structlog.get_logger("dining.test").error("Cart sweep failed", deleted=0)
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "Cart sweep failed" in (tmp_path / "feastflow.log").read_text()
        assert "Cart sweep failed" in (tmp_path / "feastflow_error.log").read_text()
        assert logging.getLogger("protean").level == logging.WARNING
