# src/tests/test_log.py
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from otpvault.common.log import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_uses_given_console(restore_root_logger):
    console = Console(stderr=True)
    setup_logging(True, console)

    (handler,) = restore_root_logger.handlers
    assert isinstance(handler, RichHandler)
    assert handler.console is console
    assert restore_root_logger.level == logging.DEBUG


def test_setup_logging_defaults_to_stderr_console(restore_root_logger):
    setup_logging()

    (handler,) = restore_root_logger.handlers
    assert handler.console.stderr
    assert restore_root_logger.level == logging.WARNING
