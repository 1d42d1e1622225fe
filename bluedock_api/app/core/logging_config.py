"""
Logging setup for the BlueDock API.

Modules log through ``logging.getLogger(__name__)``; this module only
decides where those records go.  ``setup_logging`` is called by every
``create_app`` and applies ``LOG_LEVEL`` and ``LOG_FILE`` each time:
the console handler is installed once per process, while a file
handler is added for each distinct log file requested.
"""

import logging
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_HANDLER_NAME = "bluedock.console"


def _formatter() -> logging.Formatter:
    return logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)


def _has_file_handler(logger: logging.Logger, path: Path) -> bool:
    return any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == str(path)
        for handler in logger.handlers
    )


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> Optional[logging.Handler]:
    """Configure the root logger for the API.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``), case
        insensitive.  Unknown names fall back to ``INFO``.
    logfile : Optional[str]
        File to append log lines to.  Relative paths are resolved
        against the current working directory.

    Returns the file handler that was added, or ``None`` when no new
    file handler was needed.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(handler.get_name() == CONSOLE_HANDLER_NAME for handler in root.handlers):
        console_handler = logging.StreamHandler()
        console_handler.set_name(CONSOLE_HANDLER_NAME)
        console_handler.setFormatter(_formatter())
        root.addHandler(console_handler)

    if not logfile:
        return None
    log_path = Path(logfile).resolve()
    if _has_file_handler(root, log_path):
        return None
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(_formatter())
    root.addHandler(file_handler)
    logging.getLogger(__name__).info("Writing logs to %s", log_path)
    return file_handler
