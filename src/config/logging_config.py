# src/config/logging_config.py

"""Per-session logging configuration for catalog_admin.

Every launch (TUI or headless command) writes to its own file inside
``logs/``, named after the launch time, e.g.
``logs/run_20261017_091500.log``.  All ``catalog_admin.*`` loggers
(client, cache, queries, mutations, search, ui, cli) share that file
so a session can be replayed from one place.

Headless commands also echo records at ``Settings.CONSOLE_LOG_LEVEL``
and above to stderr, leaving stdout to the JSON output.  The TUI gets
no stream handler because stderr output would draw over the Textual
screen; it reports problems through notifications instead.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

ROOT_LOGGER_NAME = "catalog_admin"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(funcName)s:%(lineno)d | %(message)s"
)

_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _session_file_handler(log_file: Path) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def _stderr_handler() -> logging.Handler:
    level = logging.getLevelName(Settings.CONSOLE_LOG_LEVEL.upper())
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level if isinstance(level, int) else logging.WARNING)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def setup_logging(
    logs_dir: Path | None = None,
    console: bool = True,
) -> Path:
    """Attach the session handlers to the ``catalog_admin`` logger.

    Args:
        logs_dir: Directory for the log file.  Defaults to
            ``Settings.LOGS_DIR``.
        console: Also log to stderr.  ``False`` for the TUI.

    Returns:
        The :class:`~pathlib.Path` of this session's log file.  When
        the logger is already configured, the existing file is returned.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)
    # catalog_admin records never reach the root logger's handlers
    root_logger.propagate = False

    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)

    target_dir = logs_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = target_dir / f"run_{timestamp}.log"

    root_logger.addHandler(_session_file_handler(log_file))
    if console:
        root_logger.addHandler(_stderr_handler())

    root_logger.info(
        "Logging initialised (console=%s), log file: %s", console, log_file
    )
    return log_file
