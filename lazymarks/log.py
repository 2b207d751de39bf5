"""Process-wide logging setup with an explicit lifecycle.

``setup_logging`` installs handlers on the ``lazymarks`` logger once;
further calls only adjust the level. ``shutdown_logging`` closes and removes
them again. Library modules only ever call ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "lazymarks"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 5
DEFAULT_LOG_FILE = Path(user_log_dir(APP_NAME, appauthor=False)) / f"{APP_NAME}.log"

_handlers: list[logging.Handler] = []


def is_configured() -> bool:
    return bool(_handlers)


def setup_logging(
    level: int = logging.WARNING,
    log_file: Path | None = DEFAULT_LOG_FILE,
    console: bool = True,
) -> logging.Logger:
    """Configure the package logger once and return it.

    The file handler rotates at 5 MB keeping five backups and always records
    DEBUG; ``level`` applies to the console. Pass ``log_file=None`` to log to
    the console only.
    """
    logger = logging.getLogger(APP_NAME)
    if _handlers:
        for handler in _handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, RotatingFileHandler):
                handler.setLevel(level)
        return logger

    formatter = logging.Formatter(LOG_FORMAT)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as exc:
            logger.warning("file logging disabled: %s", exc)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            _handlers.append(file_handler)

    if console or not _handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        _handlers.append(console_handler)

    for handler in _handlers:
        logger.addHandler(handler)
    logger.debug("logging configured")
    return logger


def shutdown_logging() -> None:
    """Detach and close every handler installed by ``setup_logging``."""
    logger = logging.getLogger(APP_NAME)
    while _handlers:
        handler = _handlers.pop()
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
