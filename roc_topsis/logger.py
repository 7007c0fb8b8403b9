# -*- coding: utf-8 -*-
"""
Logging for the ROC-TOPSIS ranking engine.

Features:
- Plain or colored console output
- Clean file logging (no ANSI codes) with rotation
- Structured JSON logging for machine parsing
- Hierarchical module loggers under a single ``roc_topsis`` root
- Thread-local context (run ids, phases) attached to every record
- Phase timing and exception logging helpers
"""

import logging
import logging.handlers
import json
import os
import re
import sys
import threading
import time
from pathlib import Path
from datetime import datetime
from typing import Optional, Dict, Any, Union, Callable
from contextlib import contextmanager
from functools import wraps


# =============================================================================
# Constants
# =============================================================================

LOG_NAME = "roc_topsis"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_DATE_FORMAT = "%H:%M:%S"
MAX_LOG_SIZE = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 3

ANSI_PATTERN = re.compile(r'\033\[[0-9;]*m')


def strip_ansi(text: str) -> str:
    """Remove all ANSI codes from text."""
    return ANSI_PATTERN.sub('', text)


def supports_color() -> bool:
    """Check if the console supports colors."""
    if os.getenv("NO_COLOR"):
        return False
    if os.getenv("FORCE_COLOR"):
        return True
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


# =============================================================================
# Formatters
# =============================================================================

class ColoredFormatter(logging.Formatter):
    """Formatter with level-based ANSI colors for console output."""

    RESET = "\033[0m"
    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[91m\033[1m",
    }

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None,
                 use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and supports_color()

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so other handlers see the plain record
        record = logging.makeLogRecord(record.__dict__)
        if self.use_colors:
            color = self.LEVEL_COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname:8}{self.RESET}"
            record.msg = f"{color}{record.msg}{self.RESET}"
        return super().format(record)


class CleanFormatter(logging.Formatter):
    """Formatter for file output without ANSI codes."""

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)
        if isinstance(record.msg, str):
            record.msg = strip_ansi(record.msg)
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Context values set through :func:`log_context` end up as extra keys.
    """

    _DEFAULT_KEYS = {
        'name', 'msg', 'args', 'created', 'filename', 'funcName',
        'levelname', 'levelno', 'lineno', 'module', 'msecs',
        'pathname', 'process', 'processName', 'relativeCreated',
        'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
        'taskName', 'message',
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": strip_ansi(record.getMessage()),
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key in self._DEFAULT_KEYS:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=False, default=str)


# =============================================================================
# Context Management
# =============================================================================

class LogContext:
    """Thread-local key/value context copied onto every log record."""

    _local = threading.local()

    @classmethod
    def get(cls) -> Dict[str, Any]:
        if not hasattr(cls._local, 'context'):
            cls._local.context = {}
        return cls._local.context

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        cls.get()[key] = value

    @classmethod
    def remove(cls, key: str) -> None:
        cls.get().pop(key, None)

    @classmethod
    def clear(cls) -> None:
        cls._local.context = {}


class ContextFilter(logging.Filter):
    """Filter that adds context information to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in LogContext.get().items():
            setattr(record, key, value)
        return True


@contextmanager
def log_context(**kwargs):
    """
    Context manager for adding temporary context to logs.

    Example:
        with log_context(run_id="a1b2"):
            logger.info("Ranking")  # record carries run_id
    """
    for key, value in kwargs.items():
        LogContext.set(key, value)
    try:
        yield
    finally:
        for key in kwargs:
            LogContext.remove(key)


# =============================================================================
# Logger Factory
# =============================================================================

class LoggerFactory:
    """Creates the package root logger once and hands out child loggers."""

    _loggers: Dict[str, logging.Logger] = {}
    _configured: bool = False

    @classmethod
    def setup(
        cls,
        name: str = LOG_NAME,
        level: Union[int, str] = logging.INFO,
        log_file: Optional[Union[str, Path]] = None,
        json_file: Optional[Union[str, Path]] = None,
        console: bool = True,
        use_colors: bool = False,
        max_bytes: int = MAX_LOG_SIZE,
        backup_count: int = BACKUP_COUNT,
    ) -> logging.Logger:
        """
        Configure the root package logger.

        Parameters
        ----------
        name : str
            Logger name
        level : int or str
            Console and JSON level. The plain log file always records DEBUG.
        log_file : Path, optional
            Path for plain text log file
        json_file : Path, optional
            Path for JSON log file
        console : bool
            Enable console output (stderr)
        use_colors : bool
            Enable colored console output

        Returns
        -------
        logging.Logger
            Configured logger instance
        """
        if isinstance(level, str):
            level = getattr(logging, level.upper(), logging.INFO)

        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.filters.clear()
        logger.propagate = False
        # on handlers so records from child loggers get the context too
        context_filter = ContextFilter()

        if console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            if use_colors:
                console_fmt = ColoredFormatter(
                    fmt='%(asctime)s | %(levelname)s | %(message)s',
                    datefmt=CONSOLE_DATE_FORMAT,
                )
            else:
                console_fmt = CleanFormatter(
                    fmt='%(asctime)s | %(levelname)-8s | %(message)s',
                    datefmt=CONSOLE_DATE_FORMAT,
                )
            console_handler.setFormatter(console_fmt)
            console_handler.addFilter(context_filter)
            logger.addHandler(console_handler)

        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.addFilter(context_filter)
            file_handler.setFormatter(CleanFormatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | '
                    '%(funcName)s:%(lineno)d | %(message)s',
                datefmt=DEFAULT_DATE_FORMAT,
            ))
            logger.addHandler(file_handler)

        if json_file:
            json_file = Path(json_file)
            json_file.parent.mkdir(parents=True, exist_ok=True)
            json_handler = logging.handlers.RotatingFileHandler(
                json_file, maxBytes=max_bytes, backupCount=backup_count,
                encoding='utf-8'
            )
            json_handler.setLevel(level)
            json_handler.addFilter(context_filter)
            json_handler.setFormatter(JSONFormatter())
            logger.addHandler(json_handler)

        cls._loggers[name] = logger
        cls._configured = True
        return logger

    @classmethod
    def get_logger(cls, name: str = LOG_NAME) -> logging.Logger:
        """
        Get a logger; names outside the package root become its children.

        Child loggers propagate to the root, so they need no handlers of
        their own. Nothing is configured implicitly: an unconfigured
        package logs through whatever the application set up.
        """
        if name in cls._loggers:
            return cls._loggers[name]
        if name != LOG_NAME and not name.startswith(LOG_NAME + "."):
            name = f"{LOG_NAME}.{name}"
        logger = logging.getLogger(name)
        cls._loggers[name] = logger
        return logger

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured


# =============================================================================
# Convenience Functions
# =============================================================================

def setup_logger(
    name: str = LOG_NAME,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    json_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    use_colors: bool = False,
) -> logging.Logger:
    """Setup and configure the package logger (convenience function)."""
    return LoggerFactory.setup(
        name=name,
        level=level,
        log_file=log_file,
        json_file=json_file,
        console=console,
        use_colors=use_colors,
    )


def setup_from_config(logging_config) -> logging.Logger:
    """Configure logging from a :class:`~roc_topsis.config.LoggingConfig`."""
    return setup_logger(
        level=logging_config.level,
        log_file=logging_config.log_file,
        json_file=logging_config.json_file,
        console=logging_config.console,
        use_colors=logging_config.use_colors,
    )


def get_logger(name: str = LOG_NAME) -> logging.Logger:
    return LoggerFactory.get_logger(name)


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Accepts either a dotted ``__name__`` (``roc_topsis.mcdm.topsis``) or a
    short name (``mcdm.topsis``).
    """
    return LoggerFactory.get_logger(module_name)


# =============================================================================
# Decorators and Context Managers
# =============================================================================

def log_exceptions(
    logger: Optional[logging.Logger] = None,
    level: int = logging.ERROR,
) -> Callable:
    """Decorator that logs an exception escaping the function and re-raises it."""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                (logger or get_logger()).log(
                    level, f"{func.__qualname__} failed: {type(e).__name__}: {e}"
                )
                raise
        return wrapper
    return decorator


@contextmanager
def timed_operation(logger: logging.Logger, operation: str,
                    level: int = logging.DEBUG):
    """
    Context manager for timing operations.

    Example:
        with timed_operation(logger, "csv loading"):
            load()
    """
    start = time.perf_counter()
    logger.log(level, f"Starting: {operation}")
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.log(level, f"Finished: {operation} ({elapsed:.3f}s)")


class ProgressLogger:
    """
    Context manager logging the start, end and duration of a phase.

    Example:
        with ProgressLogger(logger, "TOPSIS") as progress:
            progress.log_step("normalization")
    """

    def __init__(self, logger: logging.Logger, operation: str,
                 level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = 0.0
        self.end_time: Optional[float] = None
        self.status = "pending"

    @property
    def elapsed(self) -> float:
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time

    def __enter__(self) -> 'ProgressLogger':
        self.start_time = time.perf_counter()
        self.status = "running"
        LogContext.set("phase", self.operation)
        self.logger.log(self.level, f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.end_time = time.perf_counter()
        LogContext.remove("phase")
        if exc_type is None:
            self.status = "completed"
            self.logger.log(self.level,
                            f"Completed: {self.operation} ({self.elapsed:.3f}s)")
        else:
            self.status = "failed"
            self.logger.error(
                f"Failed: {self.operation} ({self.elapsed:.3f}s) - "
                f"{exc_type.__name__}: {exc_val}"
            )
        return False

    def log_step(self, step_name: str) -> None:
        self.logger.debug(f"  - {step_name}")


__all__ = [
    'setup_logger',
    'setup_from_config',
    'get_logger',
    'get_module_logger',
    'LoggerFactory',
    'ProgressLogger',
    'LogContext',
    'ContextFilter',
    'ColoredFormatter',
    'CleanFormatter',
    'JSONFormatter',
    'log_exceptions',
    'log_context',
    'timed_operation',
    'strip_ansi',
    'LOG_NAME',
]
