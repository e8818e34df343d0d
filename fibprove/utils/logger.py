"""
Centralized logging configuration for fibprove.

Diagnostics (backend selection, credential advisories, request status) go
to stderr with color output; result lines are printed by the CLI on stdout.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog


class FibProveLogger:
    """Centralized logger for fibprove components"""

    _initialized = False
    _log_dir: Optional[Path] = None
    _console_handler: Optional[logging.StreamHandler] = None

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
    ):
        """
        Setup logging configuration.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_dir: Directory for log files. If None, uses ./logs
            log_to_file: Whether to also write logs to file
        """
        if cls._initialized:
            # Re-bind to the current stderr (it may have been swapped since)
            logging.getLogger("fibprove").setLevel(level)
            if cls._console_handler is not None:
                cls._console_handler.setStream(sys.stderr)
            return

        if log_to_file:
            cls._log_dir = Path(log_dir) if log_dir else Path("logs")
            cls._log_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger("fibprove")
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        # Console handler with colors, on stderr so stdout carries only results
        console_handler = colorlog.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG)
        console_formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)
        cls._console_handler = console_handler

        if log_to_file and cls._log_dir:
            file_handler = logging.FileHandler(cls._log_dir / "fibprove.log")
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(
                "%(asctime)s [%(name)s] %(levelname)-8s %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            file_handler.setFormatter(file_formatter)
            root_logger.addHandler(file_handler)

        cls._initialized = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a logger for a specific subsystem.

        Args:
            name: Subsystem name (e.g., 'selector', 'network', 'fixture')

        Returns:
            Logger instance
        """
        return logging.getLogger(f"fibprove.{name}")


# Convenience functions
def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific subsystem"""
    return FibProveLogger.get_logger(name)


def setup_logging(level: int = logging.INFO, log_dir: Optional[str] = None, log_to_file: bool = False):
    """Setup logging configuration"""
    FibProveLogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file)
