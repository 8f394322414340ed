"""
Logging configuration for the gas profiler.

Provides structured logging with:
- Timestamps
- Log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- Console handler on stderr (stdout is reserved for reports)
- Optional daily-rotated file log plus a separate error log
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from ..exceptions import ConfigurationError

PROFILER_LOGGER_NAME = "gas_profiler"

# Log formats
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def resolve_log_level(level: Union[str, int, None] = None) -> int:
    """Translate a level name or number into a logging level.

    Falls back to the LOG_LEVEL environment variable, then INFO.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    if name not in LEVELS:
        raise ConfigurationError(f"Unknown log level: {level!r}. Choose from {', '.join(LEVELS)}")
    return LEVELS[name]


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    detailed: bool = False,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Setup a logger with console and file handlers.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file name; enables file logging
        console: Whether to log to the console (stderr)
        detailed: Whether to use detailed format (includes file/line)
        log_dir: Directory for log files (defaults to GAS_PROFILER_LOG_DIR or ./logs)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger("gas_profiler", level=logging.DEBUG)
        >>> logger.info("Profiling 2 contracts")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        for handler in logger.handlers:
            if not isinstance(handler, RotatingFileHandler) or handler.level != logging.ERROR:
                handler.setLevel(level)
        return logger

    log_format = DETAILED_FORMAT if detailed else SIMPLE_FORMAT
    formatter = logging.Formatter(log_format, datefmt=DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file is None and log_dir is None and not os.getenv("GAS_PROFILER_LOG_DIR"):
        return logger

    directory = Path(log_dir or os.getenv("GAS_PROFILER_LOG_DIR") or "logs")
    directory.mkdir(parents=True, exist_ok=True)
    if log_file is None:
        log_file = f"{name}.log"

    file_handler = TimedRotatingFileHandler(
        directory / log_file,
        when="midnight",
        interval=1,
        backupCount=30,  # Keep 30 days of logs
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # Separate error log
    error_handler = RotatingFileHandler(
        directory / f"{name}_errors.log",
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(error_handler)

    return logger


def get_profiler_logger(
    level: Union[str, int, None] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Get the root logger of the profiler, configured for console output."""
    resolved = resolve_log_level(level)
    return setup_logger(
        PROFILER_LOGGER_NAME,
        level=resolved,
        log_file=log_file,
        detailed=resolved <= logging.DEBUG,
    )


def component_logger(logger: Optional[logging.Logger], component: str) -> logging.Logger:
    """Return the child logger a component should write to."""
    base = logger if logger is not None else logging.getLogger(PROFILER_LOGGER_NAME)
    return base.getChild(component)
