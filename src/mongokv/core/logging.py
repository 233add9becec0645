"""
Simple asynchronous logging for mongokv.
"""

import os
import re
import time
import yaml
from pathlib import Path
from typing import List, Pattern, Optional
from contextlib import contextmanager
from loguru import logger as loguru_logger

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class AsyncLogger:
    """
    Asynchronous logger with a flat format.

    Format: timestamp | level | component | message
    """

    # Single handler shared by every instance
    _handler_id = None

    def __init__(self, component: str, debug_mode: bool = False):
        self.component = component
        self.debug_mode = debug_mode
        self._setup_async_handler()

    def _setup_async_handler(self):
        """
        Add the file sink once.

        - enqueue=True: the caller never blocks on disk I/O
        - Rotation at 10MB
        - DEBUG level whenever debug_mode is on
        """
        if AsyncLogger._handler_id is None:
            AsyncLogger._handler_id = loguru_logger.add(
                os.getenv("MONGOKV_LOG_FILE", "mongokv.log"),
                level="DEBUG" if self.debug_mode else _get_log_level(),
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[component]} | {message}",
                rotation="10 MB",
                compression="zip",
                enqueue=True,
            )

    def log(self, level: str, message: str, **context):
        """
        Record a message.

        Context goes to the record's extra fields. The message itself is never
        formatted, so driver errors containing braces are logged verbatim.
        """
        loguru_logger.bind(component=self.component, **context).log(level, message)

    def debug(self, message: str, **context):
        self.log("DEBUG", message, **context)

    def info(self, message: str, **context):
        self.log("INFO", message, **context)

    def warning(self, message: str, **context):
        self.log("WARNING", message, **context)

    def error(self, message: str, include_trace: Optional[bool] = None, **context):
        """
        Log at ERROR level with an optional stack trace.

        Args:
            message: Error message
            include_trace: Include stack trace (None = follow debug_mode)
            **context: Extra context
        """
        should_include_trace = include_trace if include_trace is not None else self.debug_mode

        if should_include_trace:
            import traceback

            context["stack_trace"] = traceback.format_exc()

        self.log("ERROR", message, **context)


class SensitiveDataMasker:
    """
    Masks sensitive data before it reaches the logs.

    - Credentials embedded in MongoDB URIs
    - key=value secrets
    """

    _URI_CREDENTIALS = re.compile(r'(mongodb(?:\+srv)?://)([^:@/]+):([^@/]*)@')

    def __init__(self, patterns: Optional[List[Pattern]] = None):
        self.patterns = patterns or []

    def mask_uri(self, uri: str) -> str:
        """
        Hide the password of a connection URI.

        Example:
        - "mongodb://app:s3cret@db:27017/testdb" -> "mongodb://app:***@db:27017/testdb"
        """
        return self._URI_CREDENTIALS.sub(r'\1\2:***@', uri)

    def mask(self, text: str) -> str:
        masked = self.mask_uri(text)

        masked = re.sub(
            r'(password|pwd|token|secret)=[^&\s]+',
            r'\1=***',
            masked,
            flags=re.IGNORECASE,
        )

        for pattern in self.patterns:
            masked = pattern.sub('***', masked)

        return masked


class PerformanceLogger:
    """
    Logger dedicated to round-trip timings.
    """

    def __init__(self):
        self.logger = AsyncLogger("performance")

    @contextmanager
    def measure(self, operation: str, **context):
        """
        Context manager to time an operation.

        Usage:
        ```
        with perf_logger.measure("update_one", collection=name):
            collection.update_one(...)
        ```
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start
            self.logger.debug(
                "Operation completed", operation=operation, duration_ms=duration * 1000, **context
            )


def _read_logging_section() -> dict:
    """The logging section of .mongokv, or {} when absent or unreadable."""
    try:
        config_path = Path(os.getenv("MONGOKV_CONFIG", ".mongokv"))
        if config_path.is_file():
            with open(config_path, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
                section = config.get("logging", {}) if isinstance(config, dict) else {}
                return section if isinstance(section, dict) else {}
    except (OSError, yaml.YAMLError):
        pass
    return {}


def _get_debug_mode() -> bool:
    """Read debug_mode from .mongokv or the environment."""
    if "MONGOKV_DEBUG" in os.environ:
        return os.environ["MONGOKV_DEBUG"].lower() == "true"
    return bool(_read_logging_section().get("debug_mode", False))


def _get_log_level() -> str:
    level = os.getenv("MONGOKV_LOG_LEVEL") or _read_logging_section().get("level", "INFO")
    level = str(level).upper()
    return level if level in LOG_LEVELS else "INFO"


logger = AsyncLogger("mongokv", debug_mode=_get_debug_mode())
masker = SensitiveDataMasker()
perf_logger = PerformanceLogger()
