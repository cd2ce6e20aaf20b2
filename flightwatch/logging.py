# flightwatch/logging.py
"""
JSON event logging for FlightWatch.

Every line is one JSON object carrying the event name as ``message`` plus
whatever keyword fields the caller passed. Loggers can carry bound context
(a flight id, a run id) that is merged into every event they emit:

    logger = get_logger(__name__)
    flight_log = logger.bind(flight_id=flight.id)
    flight_log.info("flight_checked", new_color="RED")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

SERVICE_NAME = "flightwatch"

# Chatty dependencies held at WARNING regardless of the app level
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn", "sqlalchemy")

PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(message)s %(structured_data)s"


def _source_of(record: logging.LogRecord) -> Dict[str, Any]:
    return {"file": record.filename, "line": record.lineno, "function": record.funcName}


class StructuredLogFormatter(logging.Formatter):
    """Render a record and its ``structured_data`` as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        event: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        event.update(getattr(record, "structured_data", None) or {})

        if record.exc_info:
            event["exception"] = self.formatException(record.exc_info)
        if record.levelno >= logging.ERROR:
            event["source"] = _source_of(record)

        return json.dumps(event, default=str)


class _PlainFormatter(logging.Formatter):
    """Human-readable lines for local runs; fields are appended as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        fields = getattr(record, "structured_data", None) or {}
        record.structured_data = json.dumps(fields, default=str) if fields else ""
        try:
            return super().format(record)
        finally:
            record.structured_data = fields


class StructuredLogger:
    """
    Thin wrapper over a stdlib logger that takes event fields as kwargs.

    Bound context from :meth:`bind` is merged under the per-call fields,
    so an explicit keyword always wins.
    """

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self._logger = logging.getLogger(name)
        self._context = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **context) -> "StructuredLogger":
        return StructuredLogger(self.name, {**self._context, **context})

    def _emit(self, level: int, event: str, fields: Dict[str, Any], exc_info=False):
        if not self._logger.isEnabledFor(level):
            return
        data = {**self._context, **fields}
        # stacklevel points "source" at the caller, not this wrapper
        self._logger.log(level, event, exc_info=exc_info, extra={"structured_data": data}, stacklevel=3)

    def debug(self, event: str, **fields):
        self._emit(logging.DEBUG, event, fields)

    def info(self, event: str, **fields):
        self._emit(logging.INFO, event, fields)

    def warning(self, event: str, **fields):
        self._emit(logging.WARNING, event, fields)

    def error(self, event: str, exc_info: bool = False, **fields):
        self._emit(logging.ERROR, event, fields, exc_info=exc_info)

    def critical(self, event: str, exc_info: bool = False, **fields):
        self._emit(logging.CRITICAL, event, fields, exc_info=exc_info)

    def exception(self, event: str, **fields):
        """ERROR with the active traceback attached."""
        self._emit(logging.ERROR, event, fields, exc_info=True)


_configured = False


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    log_file: Optional[str] = None,
    force: bool = False,
):
    """
    Install FlightWatch handlers on the root logger.

    Runs once per process unless ``force`` is set. The console handler
    writes to stdout as JSON, or as plain text when ``json_output`` is off;
    ``log_file`` adds a JSON file handler alongside it.
    """
    global _configured
    if _configured and not force:
        return

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    for existing in list(root.handlers):
        root.removeHandler(existing)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(StructuredLogFormatter() if json_output else _PlainFormatter(PLAIN_FORMAT))
    root.addHandler(console)

    if log_file:
        to_file = logging.FileHandler(log_file)
        to_file.setFormatter(StructuredLogFormatter())
        root.addHandler(to_file)

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str, **context) -> StructuredLogger:
    """Return a structured logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    return StructuredLogger(name, context)
