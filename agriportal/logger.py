"""
Structured JSON Logging Module.

Provides a StructuredLogger factory that produces logging.Logger instances
configured with JSON-formatted output, shared by every manager and service.

Realtime handlers and fetches run as asyncio tasks; each entry records the
task it was emitted from so interleaved refetches can be told apart.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO, Union

from agriportal.utils.general import JsonSafeType, convert_to_json_safe


class JSONFormatter(logging.Formatter):
    """Formats log records as structured JSON objects.

    Each log entry contains:
        - timestamp  (ISO-8601, UTC)
        - level      (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        - logger_name
        - message
        - task       (asyncio task name, when emitted inside one)
        - extra      (caller context, kept as JSON values rather than strings)
        - exception  (formatted traceback, when ``exc_info`` is set)
    """

    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, JsonSafeType] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        task_name = getattr(record, "taskName", None)
        if task_name:
            entry["task"] = task_name

        extra_fields = {
            key: convert_to_json_safe(value)
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if extra_fields:
            entry["extra"] = extra_fields

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False)


def _file_handler(
    log_file: str,
    max_bytes: int,
    backup_count: int,
) -> RotatingFileHandler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(log_path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


class StructuredLogger:
    """Injectable logger factory.

    Instantiate once per component and pass it to the repositories and
    services that component builds.  Handlers are attached the first time
    a *name* is seen; later instances with the same name share them.

    Usage::

        log = StructuredLogger(name="agriportal").bind(table="products")
        log.info("Products fetched", extra={"count": 10, "page": 1})
    """

    def __init__(
        self,
        name: str = "agriportal",
        level: int = logging.INFO,
        stream: Union[TextIO, None] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Deferred so the environment is read on first logger, not on import
        from agriportal.config import get_config
        cfg = get_config()

        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._context: dict[str, object] = {}

        if self._logger.handlers:
            return

        formatter = JSONFormatter()
        console = logging.StreamHandler(stream or sys.stdout)
        console.setLevel(level)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        resolved_log_file = log_file or cfg.LOG_FILE
        try:
            rotating = _file_handler(
                resolved_log_file,
                max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
            )
        except OSError as exc:
            self._logger.warning(
                "Could not create log file '%s': %s. Continuing with console logging only.",
                resolved_log_file,
                exc,
            )
            return
        rotating.setLevel(level)
        rotating.setFormatter(formatter)
        self._logger.addHandler(rotating)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def context(self) -> dict[str, object]:
        return dict(self._context)

    def bind(self, **context: object) -> "StructuredLogger":
        """Return a logger that adds *context* to the ``extra`` of every entry.

        The bound logger shares handlers with this one; call-site ``extra``
        keys override bound keys of the same name.
        """
        bound = StructuredLogger.__new__(StructuredLogger)
        bound._logger = self._logger
        bound._context = {**self._context, **context}
        return bound

    def _log(self, level: int, msg: str, args: tuple[object, ...], kwargs: dict) -> None:
        if self._context:
            kwargs["extra"] = {**self._context, **(kwargs.get("extra") or {})}
        self._logger.log(level, msg, *args, stacklevel=3, **kwargs)

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log(logging.DEBUG, msg, args, kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log(logging.INFO, msg, args, kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log(logging.WARNING, msg, args, kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log(logging.ERROR, msg, args, kwargs)

    def exception(self, msg: str, *args: object, **kwargs: object) -> None:
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, args, kwargs)


def get_logger(name: str = "agriportal") -> StructuredLogger:
    """Create a ``StructuredLogger`` for *name* with configured defaults."""
    return StructuredLogger(name=name)
