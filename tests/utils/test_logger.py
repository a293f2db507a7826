"""Tests for logger utility."""

import logging

import pytest

from workspace_client.config import Settings
from workspace_client.utils import logger as logger_module
from workspace_client.utils.logger import APP_LOGGER_NAME, setup_logger, get_app_logger, init_app_logger


class TestSetupLogger:
    """SUT: setup_logger"""

    def test_returns_logger(self):
        """Should return a Logger instance."""
        logger = setup_logger("test_logger_returns")
        assert isinstance(logger, logging.Logger)

    def test_with_level(self):
        """Setting DEBUG level should take effect."""
        logger = setup_logger("test_logger_level", log_level="DEBUG")
        assert logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        """Unknown level names fall back to INFO."""
        logger = setup_logger("test_logger_bad_level", log_level="chatty")
        assert logger.level == logging.INFO

    def test_no_duplicate_handlers(self):
        """Calling multiple times should not add duplicate handlers."""
        name = "test_logger_dup"
        logger1 = setup_logger(name)
        handler_count = len(logger1.handlers)
        logger2 = setup_logger(name)
        assert len(logger2.handlers) == handler_count
        assert logger1 is logger2

    def test_file_handler_creates_directory(self, tmp_path):
        """The log file's directory is created when missing."""
        log_file = tmp_path / "logs" / "workspace.log"
        logger = setup_logger("test_logger_file", log_file=str(log_file))
        assert log_file.parent.is_dir()
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)


@pytest.fixture
def fresh_app_logger(monkeypatch):
    """Package logger with no handlers and no initialized app logger."""
    logger = logging.getLogger(APP_LOGGER_NAME)
    saved = list(logger.handlers)
    for handler in saved:
        logger.removeHandler(handler)
    monkeypatch.setattr(logger_module, "app_logger", None)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in saved:
        logger.addHandler(handler)


class TestAppLogger:
    """SUT: init_app_logger / get_app_logger"""

    def test_default(self, fresh_app_logger):
        """Should return the package logger even when not explicitly initialized."""
        logger = get_app_logger()
        assert logger is fresh_app_logger
        assert logger.name == "workspace_client"

    def test_default_only_attaches_null_handler(self, fresh_app_logger):
        """Without init, the library must not write to the console on its own."""
        get_app_logger()
        get_app_logger()
        assert len(fresh_app_logger.handlers) == 1
        assert isinstance(fresh_app_logger.handlers[0], logging.NullHandler)

    def test_init_installs_console_handler(self, fresh_app_logger):
        """init_app_logger attaches a console handler at the configured level."""
        get_app_logger()
        logger = init_app_logger(Settings(log_level="WARNING"))

        assert logger is get_app_logger()
        assert logger.level == logging.WARNING
        stream_handlers = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        assert len(stream_handlers) == 1

    def test_init_with_log_file(self, fresh_app_logger, tmp_path):
        """A configured log file gets its own file handler."""
        log_file = tmp_path / "client.log"
        logger = init_app_logger(Settings(log_file=str(log_file)))
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
