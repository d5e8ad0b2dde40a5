#!/usr/bin/env python3
"""
Console logging for the metamorphic test driver
"""

import sys
import logging


class Colors:
    """ANSI color codes"""
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    CYAN = '\033[36m'
    GRAY = '\033[90m'
    RESET = '\033[0m'


class Logger:
    """Colored console logger for run progress and verdicts"""

    def __init__(self, enable_colors: bool = True):
        self.enable_colors = enable_colors

    def _log(self, color: str, symbol: str, level: str, message: str, file=None):
        """Internal logging method"""
        if file is None:
            file = sys.stdout if level in ["INFO", "SUCCESS", "DEBUG"] else sys.stderr

        if self.enable_colors:
            formatted_message = f"{color}{symbol} [{level}]{Colors.RESET} {message}"
        else:
            formatted_message = f"{symbol} [{level}] {message}"

        print(formatted_message, file=file)

    def debug(self, message: str):
        self._log(Colors.GRAY, "·", "DEBUG", message)

    def info(self, message: str):
        self._log(Colors.CYAN, "ℹ️", "INFO", message)

    def success(self, message: str):
        self._log(Colors.GREEN, "✅", "SUCCESS", message)

    def warning(self, message: str):
        self._log(Colors.YELLOW, "⚠️", "WARNING", message)

    def error(self, message: str):
        self._log(Colors.RED, "❌", "ERROR", message)


class ColoredHandler(logging.Handler):
    """Routes stdlib logging records from the library packages through the colored Logger"""

    def __init__(self, console: Logger, level=logging.NOTSET):
        super().__init__(level)
        self.console = console

    def emit(self, record: logging.LogRecord):
        try:
            message = f"{record.name}: {self.format(record)}"
            if record.levelno >= logging.ERROR:
                self.console.error(message)
            elif record.levelno >= logging.WARNING:
                self.console.warning(message)
            elif record.levelno >= logging.INFO:
                self.console.info(message)
            else:
                self.console.debug(message)
        except Exception:
            self.handleError(record)


# Global console logger instance
logger = Logger()


def setup_logging(verbose: bool = False, enable_colors: bool = True) -> Logger:
    """
    Install the colored handler on the root logger

    Args:
        verbose: Show debug records from the analysis and mutation packages
        enable_colors: Emit ANSI color codes

    Returns:
        The global console logger
    """
    logger.enable_colors = enable_colors
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, ColoredHandler):
            root.removeHandler(handler)
    handler = ColoredHandler(logger)
    handler.setFormatter(logging.Formatter('%(message)s'))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger


# 4 core logging functions
def log_info(message: str):
    logger.info(message)


def log_success(message: str):
    logger.success(message)


def log_warning(message: str):
    logger.warning(message)


def log_error(message: str):
    logger.error(message)
