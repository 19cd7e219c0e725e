"""Logging setup for command-line use."""

import logging
import sys


def setup_logger(name: str = "punch_tracker", level: int = logging.INFO) -> logging.Logger:
    """
    Set up a configured logger with console output.

    Library modules only call ``logging.getLogger(__name__)``; the CLI calls
    this once so their records reach the console.

    Usage:
        logger = setup_logger("punch_tracker", logging.DEBUG)
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
