"""Tests for logging setup."""

import logging

import pytest

from schemagraph.core.logging import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_debug_level(self, restore_root_logger):
        setup_logging(debug=True)
        assert restore_root_logger.level == logging.DEBUG

    def test_info_level(self, restore_root_logger):
        setup_logging()
        assert restore_root_logger.level == logging.INFO
        assert len(restore_root_logger.handlers) == 1
