"""
Logger module for ccmcp, which provides:
- Developer-friendly namespaced Logger with event names and structured data
- Console (rich) and JSON-lines file outputs, selected from LoggerSettings
- Timed event context manager
"""

import json
import logging
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Literal

from rich.console import Console
from rich.logging import RichHandler

from ccmcp.logging.json_serializer import JSONSerializer

if TYPE_CHECKING:
    from ccmcp.config import LoggerSettings

EventType = Literal["debug", "info", "warning", "error"]

ROOT_NAMESPACE = "ccmcp"

_LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Logger:
    """
    Developer-friendly logger that forwards events to the stdlib logging tree.
    - `etype` is a broad category (info, warning, etc.).
    - `name` can be a domain-specific event name, e.g. "SERVER_MOVED".
    """

    def __init__(self, namespace: str):
        self.namespace = namespace
        if namespace == ROOT_NAMESPACE or namespace.startswith(ROOT_NAMESPACE + "."):
            self._logger = logging.getLogger(namespace)
        else:
            self._logger = logging.getLogger(f"{ROOT_NAMESPACE}.{namespace}")

    def event(
        self,
        etype: EventType,
        ename: str | None,
        message: str,
        data: dict,
    ):
        """Create and emit an event."""
        self._logger.log(
            _LEVELS[etype],
            message,
            extra={"event_name": ename, "event_data": data},
        )

    def debug(self, message: str, name: str | None = None, **data):
        """Log a debug message."""
        self.event("debug", name, message, data)

    def info(self, message: str, name: str | None = None, **data):
        """Log an info message."""
        self.event("info", name, message, data)

    def warning(self, message: str, name: str | None = None, **data):
        """Log a warning message."""
        self.event("warning", name, message, data)

    def error(self, message: str, name: str | None = None, **data):
        """Log an error message."""
        self.event("error", name, message, data)


@contextmanager
def event_context(
    logger: Logger,
    message: str,
    event_type: EventType = "info",
    name: str | None = None,
    **data,
):
    """
    Times a block, logs an event after completion.
    """
    start_time = time.time()
    try:
        yield
    finally:
        duration = time.time() - start_time
        logger.event(
            event_type,
            name,
            f"{message} finished in {duration:.3f}s",
            {"duration": duration, **data},
        )


class JSONLinesFormatter(logging.Formatter):
    """Formats each record as one JSON object per line."""

    def __init__(self):
        super().__init__()
        self._serializer = JSONSerializer()

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "namespace": record.name,
            "name": getattr(record, "event_name", None),
            "message": record.getMessage(),
            "data": self._serializer(getattr(record, "event_data", {})),
        }
        return json.dumps(payload, ensure_ascii=False)


class EventDataFilter(logging.Filter):
    """Appends event name and data to console messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = getattr(record, "event_name", None)
        data = getattr(record, "event_data", None)
        suffix = ""
        if name:
            suffix += f" [{name}]"
        if data:
            suffix += " " + " ".join(f"{key}={value}" for key, value in data.items())
        record.console_suffix = suffix
        return True


class LoggingConfig:
    """Global configuration for the logging system."""

    _initialized = False
    _handlers: list[logging.Handler] = []

    @classmethod
    def configure(
        cls,
        type: Literal["none", "console", "file"] = "none",
        level: EventType = "warning",
        path: str | Path | None = None,
    ):
        """
        Configure the logging system.

        Args:
            type: Where events go: nowhere, the console (stderr) or a JSON-lines file
            level: Minimum level to emit
            path: Log file path when type is "file"
        """
        if cls._initialized:
            return

        root = logging.getLogger(ROOT_NAMESPACE)
        root.setLevel(_LEVELS[level])
        # Keep events out of the application's own root logger
        root.propagate = False

        if type == "console":
            handler: logging.Handler = RichHandler(
                console=Console(stderr=True), show_path=False, markup=False
            )
            handler.addFilter(EventDataFilter())
            handler.setFormatter(logging.Formatter("%(message)s%(console_suffix)s"))
        elif type == "file":
            if path is None:
                raise ValueError("A log file path is required when logger type is 'file'")
            log_path = Path(path).expanduser()
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_path, encoding="utf-8")
            handler.setFormatter(JSONLinesFormatter())
        else:
            handler = logging.NullHandler()

        root.addHandler(handler)
        cls._handlers.append(handler)
        cls._initialized = True

    @classmethod
    def configure_from_settings(cls, settings: "LoggerSettings", verbose: bool = False):
        """Configure from the `logger` section of the settings file."""
        level = "debug" if verbose else settings.level
        log_type = settings.type
        if verbose and log_type == "none":
            log_type = "console"
        cls.configure(type=log_type, level=level, path=settings.path)

    @classmethod
    def shutdown(cls):
        """Detach and close the handlers installed by configure."""
        if not cls._initialized:
            return
        root = logging.getLogger(ROOT_NAMESPACE)
        for handler in cls._handlers:
            root.removeHandler(handler)
            handler.close()
        cls._handlers = []
        root.propagate = True
        cls._initialized = False

    @classmethod
    @contextmanager
    def managed(cls, **config_kwargs):
        """Context manager for the logging system lifecycle."""
        try:
            cls.configure(**config_kwargs)
            yield
        finally:
            cls.shutdown()


_logger_lock = threading.Lock()
_loggers: Dict[str, Logger] = {}


def get_logger(namespace: str) -> Logger:
    """
    Get a logger instance for a given namespace.
    Creates a new logger if one doesn't exist for this namespace.

    Args:
        namespace: The namespace for the logger (e.g. "ccmcp.store.manager")

    Returns:
        A Logger instance for the given namespace
    """

    with _logger_lock:
        if namespace not in _loggers:
            _loggers[namespace] = Logger(namespace)
        return _loggers[namespace]
