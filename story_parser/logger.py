"""
Logging for the story parser.

Every stage logs through a child of the "story_parser" logger. Recoverable
anomalies (missing <body>, unterminated regions, malformed lists, no title)
go through record_warning(), which both logs them and appends them to the
warnings list returned with the parse.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logger(
    name: str = "story_parser",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return the package logger.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path for a second handler

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Called again (e.g. by the CLI with --verbose): only adjust the level
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.addHandler(_handler(logging.StreamHandler(sys.stdout), level))
    if log_file:
        logger.addHandler(_handler(logging.FileHandler(log_file), level))

    return logger


logger = setup_logger()


def get_module_logger(stage: str) -> logging.Logger:
    """Child logger for one pipeline stage, e.g. "story_parser.segmenter"."""
    return logging.getLogger(f"story_parser.{stage}")


def record_warning(stage_logger: logging.Logger, warnings: Optional[list[str]], message: str) -> None:
    """Log a recovered anomaly and add it to the parse's warnings, if collected."""
    stage_logger.warning(message)
    if warnings is not None:
        warnings.append(message)
