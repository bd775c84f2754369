"""Rich-based logging utilities.

``init_logger`` configures the ``sql_command_checker`` logger with a pretty
console handler, an optional run log file and an optional JSONL stream of
events. ``log_call`` traces a function's arguments and timing at DEBUG level.

Example
-------
>>> from sql_command_checker.logger import init_logger, Settings, log_call
>>> log = init_logger(Settings(verbose=True))
>>> @log_call
... def add(a, b):
...     return a + b
>>> add(1, 2)
3
"""

from __future__ import annotations

import asyncio
import datetime as _dt
import json
import logging
import os
from dataclasses import dataclass
from functools import wraps
from time import perf_counter
from typing import Any, Callable, Optional

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["Settings", "init_logger", "log_call"]


@dataclass
class Settings:
    """Optional logger settings.

    Attributes:
        verbose: Show DEBUG records on the console.
        log_dir: Directory for a timestamped run log, ``None`` to disable.
        events_file: Path of a JSONL event stream, ``None`` to disable.
    """

    verbose: bool = False
    log_dir: Optional[str] = None
    events_file: Optional[str] = None


class _JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


def init_logger(settings: Settings | None = None) -> logging.Logger:
    """Configure and return the package logger.

    Console output goes to stderr so diagnostics on stdout stay parseable.
    """

    settings = settings or Settings()
    logger = logging.getLogger("sql_command_checker")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    console = RichHandler(console=Console(stderr=True), rich_tracebacks=True)
    console.setLevel(logging.DEBUG if settings.verbose else logging.WARNING)
    logger.addHandler(console)

    if settings.log_dir:
        os.makedirs(settings.log_dir, exist_ok=True)
        ts = _dt.datetime.now().strftime("%Y%m%d_%H%M%S")
        file_handler = logging.FileHandler(
            os.path.join(settings.log_dir, f"check-{ts}.log"), encoding="utf-8"
        )
        file_handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s %(name)s - %(message)s",
                "%Y-%m-%d %H:%M:%S",
            )
        )
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    if settings.events_file:
        json_handler = logging.FileHandler(settings.events_file, encoding="utf-8")
        json_handler.setFormatter(_JSONFormatter())
        json_handler.setLevel(logging.INFO)
        logger.addHandler(json_handler)

    return logger


def log_call(func: Callable) -> Callable:
    """Decorator that logs function calls and execution time."""

    def _done(log: logging.Logger, start: float) -> None:
        log.debug("%s completed in %.2fs", func.__name__, perf_counter() - start)

    def _failed(log: logging.Logger, start: float) -> None:
        log.exception("%s failed after %.2fs", func.__name__, perf_counter() - start)

    if asyncio.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            log = logging.getLogger(func.__module__)
            log.debug("%s args=%r kwargs=%r", func.__name__, args, kwargs)
            start = perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception:
                _failed(log, start)
                raise
            _done(log, start)
            return result
        return async_wrapper

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        log = logging.getLogger(func.__module__)
        log.debug("%s args=%r kwargs=%r", func.__name__, args, kwargs)
        start = perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception:
            _failed(log, start)
            raise
        _done(log, start)
        return result
    return wrapper
