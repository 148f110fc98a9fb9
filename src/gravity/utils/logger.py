#!/usr/bin/env python3
"""
Logging utilities for Gravity.

This module provides a centralized logging system with rich console output
on stderr and a rotating log file under the user's configuration directory.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Dict

from rich.console import Console
from rich.logging import RichHandler

from .platform import platform_detector


LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(filename)s:%(lineno)d - %(message)s"
)
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class GravityLogger:
    """Main logger class for Gravity."""

    def __init__(self, name: str = 'gravity'):
        self.name = name
        self.logger = logging.getLogger(name)

        # Child loggers propagate to the 'gravity' logger, which owns the handlers
        if name.startswith('gravity.'):
            get_logger('gravity')
            return

        self.logger.setLevel(logging.INFO)

        # Prevent duplicate handlers
        if self.logger.handlers:
            return

        self._setup_handlers()

    def _setup_handlers(self):
        """Setup logging handlers for console and file output."""
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            rich_tracebacks=True
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        console_handler.setLevel(logging.INFO)
        self.logger.addHandler(console_handler)

        self._setup_file_handler()

    def _setup_file_handler(self):
        """Setup file logging handler."""
        try:
            log_dir = platform_detector.get_config_dir() / 'gravity' / 'logs'
            log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / 'gravity.log',
                maxBytes=5 * 1024 * 1024,  # 5MB
                backupCount=5
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            file_handler.setLevel(logging.DEBUG)
            self.logger.addHandler(file_handler)

        except OSError as e:
            # If we can't setup file logging, just continue with console
            self.logger.warning(f"Could not setup file logging: {e}")

    def set_level(self, level: str):
        """Set the logging level."""
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

        self.logger.setLevel(log_level)

        # Console handler follows the logger level, the file handler keeps DEBUG
        for handler in self.logger.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(log_level)

    def debug(self, message: str, *args, **kwargs):
        """Log debug message."""
        self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        """Log info message."""
        self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        """Log warning message."""
        self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        """Log error message."""
        self.logger.error(message, *args, **kwargs)

    def exception(self, message: str, *args, **kwargs):
        """Log exception with traceback."""
        self.logger.exception(message, *args, **kwargs)


# Global logger instances
_loggers: Dict[str, GravityLogger] = {}


def get_logger(name: str = 'gravity') -> GravityLogger:
    """Get or create a logger instance."""
    if name not in _loggers:
        _loggers[name] = GravityLogger(name)
    return _loggers[name]


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[Path] = None,
    verbose: bool = False
):
    """Setup logging configuration."""
    if verbose:
        level = 'DEBUG'

    logger = get_logger()
    logger.set_level(level)

    if log_file:
        try:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

            logger.logger.addHandler(file_handler)
            logger.info(f"Logging to file: {log_file}")

        except OSError as e:
            logger.warning(f"Could not setup custom log file {log_file}: {e}")
