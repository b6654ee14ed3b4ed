"""
Logging Configuration for djay-sync

This module provides centralized logging configuration for the command-line
tool: colored console output, a rotating main log and one log per session.
"""

import os
import sys
import logging
import logging.handlers
from pathlib import Path
from typing import Optional
from datetime import datetime


DEFAULT_LOG_DIR = '~/.djay_sync/logs'


class ColoredFormatter(logging.Formatter):
    """Colored console formatter for better readability"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class SyncLogger:
    """Centralized logger configuration for djay-sync"""

    def __init__(self, log_dir: Optional[str] = None, console_level: str = "INFO",
                 file_level: str = "DEBUG", enable_console: bool = True,
                 enable_files: bool = True):
        """
        Initialize logging

        Args:
            log_dir: Directory for log files (default: ~/.djay_sync/logs)
            console_level: Console logging level
            file_level: File logging level
            enable_console: Whether to enable console logging
            enable_files: Whether to write log files
        """
        self.log_dir = os.path.expanduser(log_dir or DEFAULT_LOG_DIR)
        self.console_level = getattr(logging, console_level.upper())
        self.file_level = getattr(logging, file_level.upper())
        self.enable_console = enable_console
        self.enable_files = enable_files
        self.session_log_file: Optional[str] = None

        if self.enable_files:
            Path(self.log_dir).mkdir(parents=True, exist_ok=True)

        self._setup_package_logger()

    def _setup_package_logger(self):
        """Attach handlers to the djaysync package logger"""
        package_logger = logging.getLogger('djaysync')
        package_logger.setLevel(logging.DEBUG)
        package_logger.propagate = False

        # Clear existing handlers
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()

        if self.enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(self.console_level)
            console_handler.setFormatter(ColoredFormatter(
                '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                datefmt='%H:%M:%S'
            ))
            package_logger.addHandler(console_handler)

        if not self.enable_files:
            return

        file_formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Main log file (rotating)
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(self.log_dir, 'djay_sync.log'),
            maxBytes=10*1024*1024, backupCount=5, encoding='utf-8'
        )
        file_handler.setLevel(self.file_level)
        file_handler.setFormatter(file_formatter)
        package_logger.addHandler(file_handler)

        # Session-specific log file
        session_timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        self.session_log_file = os.path.join(self.log_dir, f'session_{session_timestamp}.log')
        session_handler = logging.FileHandler(self.session_log_file, encoding='utf-8')
        session_handler.setLevel(logging.DEBUG)
        session_handler.setFormatter(file_formatter)
        package_logger.addHandler(session_handler)

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger for a specific component"""
        return logging.getLogger(f'djaysync.{name}')


# Global logger instance
_logger_instance = None

def setup_logging(log_dir: Optional[str] = None, console_level: str = "INFO",
                  file_level: str = "DEBUG", enable_console: bool = True,
                  enable_files: bool = True) -> SyncLogger:
    """Setup global logging configuration"""
    global _logger_instance
    _logger_instance = SyncLogger(log_dir, console_level, file_level, enable_console, enable_files)
    return _logger_instance

def get_logger(name: str = 'main') -> logging.Logger:
    """Get a component logger"""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = setup_logging()
    return _logger_instance.get_logger(name)
