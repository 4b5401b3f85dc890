"""Application logging.

Every module logs through a child of the ``devban_board`` logger, which owns a
single rotating file under platformdirs' user_log_dir. Nothing reaches the
terminal: commands print through Rich and log to the file.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "devban_board"
_LOG_FILE = "devban.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3
_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

_logger: logging.Logger | None = None


def log_file_path() -> Path:
    """Location of the active log file."""
    return Path(user_log_dir(_APP_NAME)) / _LOG_FILE


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    return handler


def _configure() -> logging.Logger:
    logger = logging.getLogger(_APP_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    path = log_file_path()
    # Other handlers (e.g. pytest's capture handlers) may already be attached
    for handler in list(logger.handlers):
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            if Path(handler.baseFilename) == path.absolute():
                return logger
            logger.removeHandler(handler)
            handler.close()
    logger.addHandler(_file_handler(path))
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the application logger, or the child logger for ``name``.

    Args:
        name: Module name such as ``__name__``; names outside the package
            are nested under it

    The file handler is attached on first use.
    """
    global _logger
    if _logger is None:
        _logger = _configure()
    if name is None or name == _APP_NAME:
        return _logger
    if name.startswith(_APP_NAME + "."):
        return logging.getLogger(name)
    return _logger.getChild(name)
