"""
Logging configuration for the media generation library.

Provides structured logging to both console and file with proper formatting.
Logs are written to logs/ directory with rotating file handlers.
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

LIBRARY_LOGGER_NAME = "media_gen"


def setup_logger(
    name: str = LIBRARY_LOGGER_NAME,
    log_level: str = "INFO",
    log_to_file: bool = True,
    log_dir: str = "logs"
) -> logging.Logger:
    """
    Set up a logger with console and optional file handlers.

    Args:
        name: Logger name
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to write logs to file
        log_dir: Directory for log files

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Reconfigure only the level when handlers are already attached
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)
    if logger.handlers:
        for handler in logger.handlers:
            if not isinstance(handler, RotatingFileHandler):
                handler.setLevel(level)
        return logger

    console_formatter = logging.Formatter('%(message)s')
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / "media_gen.log"

        # 10MB per file, keep 5 backups
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

        logger.debug(f"Logging to: {log_file}")

    return logger


_library_logger = None


def init_library_logger(verbose: bool = False, log_to_file: bool = True) -> logging.Logger:
    """
    Initialize the library-wide logger.

    Args:
        verbose: If True, set log level to DEBUG, otherwise INFO
        log_to_file: Whether to write logs to file

    Returns:
        Configured logger
    """
    global _library_logger

    log_level = "DEBUG" if verbose else "INFO"
    _library_logger = setup_logger(
        name=LIBRARY_LOGGER_NAME,
        log_level=log_level,
        log_to_file=log_to_file
    )

    return _library_logger


def get_library_logger() -> logging.Logger:
    """
    Get the library-wide logger.

    Library code never attaches handlers on its own; until an application calls
    init_library_logger() records propagate to whatever the host configured.
    """
    if _library_logger is None:
        return logging.getLogger(LIBRARY_LOGGER_NAME)
    return _library_logger
