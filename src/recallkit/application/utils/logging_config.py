"""
Logging setup for the recallkit process.

The console handler is installed by the CLI at import time; this module sets
the package log level from ``AppConfig.verbose`` and adds a rotating log file
under ``AppConfig.log_dir``.
"""

import logging
import logging.handlers

from recallkit.application.config import AppConfig

LOG_FILE_NAME = "recallkit.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def level_for_verbosity(verbose: int) -> int:
    """0 is quiet (warnings only), 1 is the default INFO, 2 and above is DEBUG."""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(config: AppConfig) -> logging.Logger:
    """
    Configure the ``recallkit`` logger from resolved configuration.

    Safe to call more than once: the file handler from a previous call is
    replaced, not duplicated.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("recallkit")
    logger.setLevel(level_for_verbosity(config.verbose))

    for handler in list(logger.handlers):
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()

    config.log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        config.log_dir / LOG_FILE_NAME,
        maxBytes=1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)

    logger.debug(f"Logging to {config.log_dir / LOG_FILE_NAME}")
    return logger
