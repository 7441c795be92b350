"""Logging configuration for the BugX toolkit."""

import logging
import sys
from typing import Optional

from .config import LoggingConfig


class BugXLogger:
    """Logger configuration for the BugX toolkit."""

    def __init__(self, name: str = "bugx", level: str = "INFO"):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        # Avoid duplicate handlers
        if not self.logger.handlers:
            self._setup_handlers()

    def _setup_handlers(self, config: Optional[LoggingConfig] = None):
        """Setup logging handlers."""
        config = config or LoggingConfig()
        formatter = logging.Formatter(config.log_format)

        if config.enable_console_logging:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if config.log_file:
            file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def configure(self, config: LoggingConfig):
        """Replace handlers and level from a logging configuration."""
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        self.logger.setLevel(getattr(logging, config.log_level.upper()))
        self._setup_handlers(config)


# Global logger instance
_logger = BugXLogger()


def get_logger() -> BugXLogger:
    """Get the global logger instance."""
    return _logger


def set_log_level(level: str):
    """Set the global log level."""
    _logger.logger.setLevel(getattr(logging, level.upper()))


def configure_logging(config: LoggingConfig) -> BugXLogger:
    """Configure the package logger from a logging configuration."""
    _logger.configure(config)
    return _logger
