"""Tests for the application logger utility."""

from __future__ import annotations

import logging
from unittest.mock import patch

from devban_board.utils import logger as logger_mod


def test_get_logger_creates_log_file(tmp_path):
    """Logger creates the log file inside user_log_dir."""
    with patch("devban_board.utils.logger.user_log_dir", return_value=str(tmp_path)):
        logger = logger_mod.get_logger()

    assert (tmp_path / "devban.log").exists()
    assert isinstance(logger, logging.Logger)
    assert logger.name == "devban_board"


def test_get_logger_returns_singleton():
    assert logger_mod.get_logger() is logger_mod.get_logger()


def test_get_logger_writes_message(tmp_path):
    with patch("devban_board.utils.logger.user_log_dir", return_value=str(tmp_path)):
        logger = logger_mod.get_logger()
        logger.info("hello from test")

    for handler in logger.handlers:
        handler.flush()
    assert "hello from test" in (tmp_path / "devban.log").read_text()


def test_does_not_propagate_to_root():
    assert logger_mod.get_logger().propagate is False


def test_creates_parent_dirs(tmp_path):
    nested = tmp_path / "a" / "b"
    with patch("devban_board.utils.logger.user_log_dir", return_value=str(nested)):
        logger_mod.get_logger()
    assert nested.is_dir()


def test_file_handler_added_next_to_foreign_handlers(tmp_path):
    """Handlers attached by someone else do not stop the file handler."""
    foreign = logging.NullHandler()
    logging.getLogger("devban_board").addHandler(foreign)

    with patch("devban_board.utils.logger.user_log_dir", return_value=str(tmp_path)):
        logger = logger_mod.get_logger()
        logger.warning("still written")

    assert foreign in logger.handlers
    for handler in logger.handlers:
        handler.flush()
    assert "still written" in (tmp_path / "devban.log").read_text()


def test_module_loggers_write_to_the_same_file(tmp_path):
    with patch("devban_board.utils.logger.user_log_dir", return_value=str(tmp_path)):
        child = logger_mod.get_logger("devban_board.services.task_feed")
        child.info("from the feed")

    assert child.name == "devban_board.services.task_feed"
    for handler in logger_mod.get_logger().handlers:
        handler.flush()
    assert "[devban_board.services.task_feed] from the feed" in (
        tmp_path / "devban.log"
    ).read_text()


def test_foreign_names_are_nested():
    assert logger_mod.get_logger("worker").name == "devban_board.worker"


def test_log_file_path(tmp_path):
    with patch("devban_board.utils.logger.user_log_dir", return_value=str(tmp_path)):
        assert logger_mod.log_file_path() == tmp_path / "devban.log"
