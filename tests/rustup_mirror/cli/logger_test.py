"""Tests for the rustup_mirror.cli.logger module."""

import logging

import colorlog
import pytest

from rustup_mirror.cli.logger import configure_logging


@pytest.fixture
def root_logger():
    """Restore the root logger handlers and level after the test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Level and formatter selection."""

    def test_verbose_selects_debug(self, root_logger, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        configure_logging(True)
        assert root_logger.level == logging.DEBUG

    def test_default_is_info(self, root_logger, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        configure_logging(False)
        assert root_logger.level == logging.INFO

    def test_no_color_uses_plain_formatter(self, root_logger, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        configure_logging(False)
        [handler] = root_logger.handlers
        assert not isinstance(handler.formatter, colorlog.ColoredFormatter)

    def test_repeated_calls_keep_one_handler(self, root_logger, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        configure_logging(False)
        configure_logging(True)
        assert len(root_logger.handlers) == 1
