"""Logging configuration for the API and the Streamlit front-end"""

import logging
import sys
from typing import Optional

from src.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Marks handlers installed here so repeated calls don't stack them
_HANDLER_TAG = "_taller_handler"

NOISY_LOGGERS = {
    "uvicorn": logging.INFO,
    "fastapi": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "PIL": logging.WARNING,
    "azure": logging.WARNING,
    "urllib3": logging.WARNING,
}


def _tagged(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG, True)
    return handler


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Install stdout (and optional file) handlers on the root logger.

    Safe to call more than once: Streamlit re-executes the app script on
    every interaction, so previously installed handlers are replaced.

    Args:
        level: Log level name (defaults to settings.LOG_LEVEL)
        log_file: Extra log file path (defaults to settings.LOG_FILE)
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    log_file = log_file or settings.LOG_FILE
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    handlers = [_tagged(logging.StreamHandler(sys.stdout))]
    if log_file:
        handlers.append(_tagged(logging.FileHandler(log_file, encoding="utf-8")))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(noisy_level)
