"""
Logging configuration for Teacha.

Provides centralized logging setup with colored console output and a rotating
log file. Configured through the log_level, log_dir and debug settings
(LOG_LEVEL, LOG_DIR and DEBUG in the environment).
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

import colorlog

from teacha.utils.config import get_settings


class TeachaLogger:
    """Centralized logger for the Teacha application."""

    def __init__(self, name: str = "teacha"):
        """Initialize logger with the given name."""
        self.name = name
        self.logger = logging.getLogger(name)
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Setup logger with file and console handlers."""
        settings = get_settings()
        log_level = settings.log_level.upper()
        log_dir = settings.log_dir
        debug_mode = settings.debug

        self.logger.setLevel(getattr(logging, log_level, logging.INFO))

        # Handlers are rebuilt so repeated get_logger() calls don't duplicate output
        self.logger.handlers.clear()

        self._setup_console_handler(debug_mode)
        self._setup_file_handler(log_dir, debug_mode)

        self.logger.propagate = False

    def _setup_console_handler(self, debug_mode: bool) -> None:
        """Setup colored console logging."""
        console_handler = colorlog.StreamHandler(sys.stdout)

        color_format = (
            "%(log_color)s%(asctime)s [%(levelname)8s] "
            "%(name)s.%(funcName)s:%(lineno)d - %(message)s"
        )

        if not debug_mode:
            color_format = (
                "%(log_color)s%(asctime)s [%(levelname)8s] "
                "%(name)s - %(message)s"
            )

        formatter = colorlog.ColoredFormatter(
            color_format,
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )

        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

    def _setup_file_handler(self, log_dir: str, debug_mode: bool) -> None:
        """Setup file logging with rotation. Skipped when LOG_DIR is empty."""
        if not log_dir:
            return

        Path(log_dir).mkdir(parents=True, exist_ok=True)
        log_file = os.path.join(log_dir, "teacha.log")

        # 5MB per file, keep 5 files
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )

        file_format = (
            "%(asctime)s [%(levelname)8s] %(name)s.%(funcName)s:%(lineno)d - "
            "%(message)s"
        )

        if not debug_mode:
            file_format = "%(asctime)s [%(levelname)8s] %(name)s - %(message)s"

        formatter = logging.Formatter(file_format, datefmt="%Y-%m-%d %H:%M:%S")

        file_handler.setFormatter(formatter)
        self.logger.addHandler(file_handler)

    def get_logger(self) -> logging.Logger:
        """Get the configured logger instance."""
        return self.logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for the given name.

    Args:
        name: Logger name. If None, uses the caller's module name.

    Returns:
        Configured logger instance.
    """
    if name is None:
        frame = sys._getframe(1)
        name = frame.f_globals.get('__name__', 'teacha')

    return TeachaLogger(name).get_logger()


def setup_logging() -> None:
    """
    Setup application-wide logging configuration.

    Called once at application startup.
    """
    logger = TeachaLogger("teacha").get_logger()
    logger.info("Logging system initialized")
    logger.debug(f"Log level: {logger.level}")
    logger.debug(f"Handlers: {[h.__class__.__name__ for h in logger.handlers]}")
