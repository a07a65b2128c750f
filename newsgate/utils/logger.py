"""
Logging configuration for NewsGate
Provides structured logging with color support
"""

import functools
import logging
import sys
import time
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, Optional
import colorama
from colorama import Fore, Style

# Initialize colorama for Windows support
colorama.init()

# Custom log colors
LOG_COLORS = {
    'DEBUG': Fore.CYAN,
    'INFO': Fore.GREEN,
    'WARNING': Fore.YELLOW,
    'ERROR': Fore.RED,
    'CRITICAL': Fore.MAGENTA
}

_HANDLER_MARKER = '_newsgate_handler'

class ColoredFormatter(logging.Formatter):
    """Custom formatter with color support and inline context"""

    def __init__(self, fmt=None, datefmt=None, use_colors=True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record):
        levelname = record.levelname
        name = record.name
        if self.use_colors and levelname in LOG_COLORS:
            record.levelname = f"{LOG_COLORS[levelname]}{levelname}{Style.RESET_ALL}"
            record.name = f"{Fore.BLUE}{name}{Style.RESET_ALL}"

        # Add custom fields
        record.timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        context = getattr(record, 'context', None)
        record.context_str = " " + " ".join(f"{k}={v}" for k, v in context.items()) if context else ""

        try:
            return super().format(record)
        finally:
            # Other handlers must see the plain values
            record.levelname = levelname
            record.name = name

class StructuredLogger:
    """Wrapper for structured logging with context"""

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        self.logger = logger
        self.context = dict(context or {})

    def add_context(self, **kwargs):
        """Add persistent context to all log messages"""
        self.context.update(kwargs)

    def clear_context(self):
        """Clear all context"""
        self.context = {}

    def bind(self, **kwargs) -> 'StructuredLogger':
        """Return a child logger with extra context, leaving this one untouched"""
        return StructuredLogger(self.logger, {**self.context, **kwargs})

    def _log(self, level, msg, *args, **kwargs):
        """Internal log method with context injection"""
        extra = dict(kwargs.get('extra') or {})
        context = {**self.context, **extra.pop('context', {})}
        extra['context'] = context
        kwargs['extra'] = extra
        getattr(self.logger, level)(msg, *args, **kwargs)

    def debug(self, msg, *args, **kwargs):
        self._log('debug', msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        self._log('info', msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self._log('warning', msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        self._log('error', msg, *args, **kwargs)

    def critical(self, msg, *args, **kwargs):
        self._log('critical', msg, *args, **kwargs)

    def exception(self, msg, *args, **kwargs):
        kwargs.setdefault('exc_info', True)
        self._log('error', msg, *args, **kwargs)

def setup_logger(
    name: str,
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    use_colors: bool = True
) -> StructuredLogger:
    """
    Set up a logger with console and optional file output

    Args:
        name: Logger name (usually __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging
        use_colors: Whether to use colored output

    Returns:
        StructuredLogger instance
    """
    from ..config.settings import get_config
    config = get_config()

    # Use provided level or fall back to config
    if level is None:
        level = config.system.log_level
    if log_file is None:
        log_file = config.system.log_file

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Replace only the handlers we installed ourselves
    logger.handlers = [h for h in logger.handlers if not getattr(h, _HANDLER_MARKER, False)]

    # Console handler with colors
    console_handler = logging.StreamHandler(sys.stderr)
    console_format = "%(timestamp)s [%(levelname)s] %(name)s: %(message)s%(context_str)s"
    console_handler.setFormatter(ColoredFormatter(console_format, use_colors=use_colors))
    setattr(console_handler, _HANDLER_MARKER, True)
    logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_format = "%(timestamp)s [%(levelname)s] %(name)s: %(message)s%(context_str)s"
        file_handler.setFormatter(ColoredFormatter(file_format, use_colors=False))
        setattr(file_handler, _HANDLER_MARKER, True)
        logger.addHandler(file_handler)

    # Prevent duplicate output through the root logger
    logger.propagate = False

    return StructuredLogger(logger)

def get_logger(name: str) -> StructuredLogger:
    """
    Get or create a logger instance

    Args:
        name: Logger name (usually __name__)

    Returns:
        StructuredLogger instance
    """
    return setup_logger(name)

def log_performance(logger: Optional[StructuredLogger] = None):
    """Decorator to log function performance"""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            nonlocal logger
            if logger is None:
                logger = get_logger(func.__module__)

            start_time = time.time()
            logger.debug(f"Starting {func.__name__}")

            try:
                result = func(*args, **kwargs)
                elapsed = time.time() - start_time
                logger.debug(
                    f"Completed {func.__name__}",
                    extra={'context': {'duration_ms': int(elapsed * 1000)}}
                )
                return result
            except Exception as e:
                elapsed = time.time() - start_time
                logger.error(
                    f"Failed {func.__name__}: {str(e)}",
                    extra={'context': {'duration_ms': int(elapsed * 1000)}},
                    exc_info=True
                )
                raise

        return wrapper
    return decorator
