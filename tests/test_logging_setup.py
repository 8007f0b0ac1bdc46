"""Tests for logging initialisation."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from sweech.logging_setup import setup_logging


@pytest.fixture
def clean_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    setup_logging._configured = False
    yield root
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    setup_logging._configured = False


def test_file_handler_and_idempotence(tmp_path, clean_root_logger):
    setup_logging(root=tmp_path)
    setup_logging(root=tmp_path)

    added = [h for h in clean_root_logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(added) == 1
    assert (tmp_path / "logs").is_dir()

    logging.getLogger("sweech.test").info("hello")
    added[0].flush()
    assert "hello" in (tmp_path / "logs" / "sweech.log").read_text()


def test_verbose_logs_debug(tmp_path, clean_root_logger):
    setup_logging(root=tmp_path, verbose=True)
    assert clean_root_logger.level == logging.DEBUG
    assert logging.getLogger("werkzeug").level == logging.ERROR
