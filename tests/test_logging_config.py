"""
Tests for the root logging setup.

These tests verify:
  - Repeated setup installs exactly one named handler
  - The requested level is applied to the root logger
"""

import logging

import pytest

from budgeteer.logging_config import HANDLER_NAME, configure_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


class TestConfigureLogging:

    def test_handler_installed_once(self, root_logger):
        configure_logging("INFO")
        configure_logging("INFO")

        named = [h for h in root_logger.handlers if h.get_name() == HANDLER_NAME]
        assert len(named) == 1

    def test_level_applied(self, root_logger):
        configure_logging("debug")
        assert root_logger.level == logging.DEBUG

        configure_logging(logging.WARNING)
        assert root_logger.level == logging.WARNING
