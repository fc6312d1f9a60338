"""Structured logging helpers for compact-schema.

Library modules obtain loggers through :func:`get_logger`, which attaches a
``NullHandler`` and wraps the logger in a :class:`LoggerAdapter` that injects
``operation`` and ``status`` fields. Handlers are only configured at the
application boundary via :func:`setup_logging`.

Examples
--------
>>> from compact_schema.logging import get_logger, with_fields
>>> logger = get_logger(__name__)
>>> logger.debug("Schema generated", extra={"operation": "schema", "status": "success"})
>>> adapter = with_fields(logger, declaration="TestUser")
>>> adapter.debug("Fields extracted", extra={"field_count": 6})
"""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping, MutableMapping

__all__ = [
    "JsonFormatter",
    "LoggerAdapter",
    "get_logger",
    "setup_logging",
    "with_fields",
]

# Standard LogRecord attributes never copied into JSON payloads.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    The payload carries ``ts``, ``level``, ``name`` and ``message`` plus every
    JSON-compatible extra field attached to the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Return ``record`` encoded as JSON.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format.

        Returns
        -------
        str
            JSON-encoded log entry.
        """
        data: dict[str, object] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S") + "Z",
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if (
                key not in _RESERVED_ATTRS
                and key not in data
                and not key.startswith("_")
                and value is not None
                and isinstance(value, (str, int, float, bool, list, dict))
            ):
                data[key] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class LoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that merges bound fields into every record.

    Fields bound at construction (see :func:`with_fields`) are merged into the
    ``extra`` mapping of each call without overriding per-call values. The
    ``operation`` and ``status`` fields are always present; ``status`` is
    inferred from the level when omitted. The level helpers inherited from
    ``logging.LoggerAdapter`` all delegate to :meth:`log`.
    """

    def process(
        self, msg: object, kwargs: MutableMapping[str, Any]
    ) -> tuple[object, MutableMapping[str, Any]]:
        """Inject bound and default structured fields into ``kwargs``.

        Parameters
        ----------
        msg : object
            Log message.
        kwargs : MutableMapping[str, Any]
            Keyword arguments of the logging call.

        Returns
        -------
        tuple[object, MutableMapping[str, Any]]
            The message and the updated keyword arguments.
        """
        extra = dict(kwargs.get("extra") or {})
        for key, value in (self.extra or {}).items():
            extra.setdefault(key, value)
        extra.setdefault("operation", "unknown")
        kwargs["extra"] = extra
        return msg, kwargs

    def log(self, level: int, msg: object, *args: object, **kwargs: Any) -> None:
        """Log ``msg`` at ``level`` with an inferred ``status`` field."""
        if self.isEnabledFor(level):
            extra = dict(kwargs.get("extra") or {})
            extra.setdefault("status", _status_for_level(level))
            kwargs["extra"] = extra
            msg, kwargs = self.process(msg, kwargs)
            self.logger.log(level, msg, *args, **kwargs)


def _status_for_level(level: int) -> str:
    if level >= logging.ERROR:
        return "error"
    if level >= logging.WARNING:
        return "warning"
    return "success"


def get_logger(name: str) -> LoggerAdapter:
    """Return a structured logger adapter for ``name``.

    Parameters
    ----------
    name : str
        Logger name, typically ``__name__``.

    Returns
    -------
    LoggerAdapter
        Adapter injecting structured fields into each record.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return LoggerAdapter(logger, {})


def with_fields(logger: logging.Logger | LoggerAdapter, **fields: object) -> LoggerAdapter:
    """Return an adapter bound to ``fields``.

    Parameters
    ----------
    logger : logging.Logger | LoggerAdapter
        Base logger, possibly already wrapped.
    **fields : object
        Structured fields merged into every record.

    Returns
    -------
    LoggerAdapter
        Adapter carrying the union of existing and new bound fields.
    """
    if isinstance(logger, LoggerAdapter):
        merged: dict[str, object] = dict(_bound_fields(logger))
        merged.update(fields)
        return LoggerAdapter(logger.logger, merged)
    return LoggerAdapter(logger, dict(fields))


def _bound_fields(adapter: LoggerAdapter) -> Mapping[str, object]:
    return adapter.extra or {}


def setup_logging(level: int | str = logging.INFO, *, json_output: bool = False) -> None:
    """Configure the root logger for command-line use.

    Parameters
    ----------
    level : int | str, optional
        Threshold level or level name. Defaults to ``logging.INFO``.
    json_output : bool, optional
        Emit JSON lines via :class:`JsonFormatter` instead of plain text.
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    resolved = level.upper() if isinstance(level, str) else level
    logging.basicConfig(level=resolved, handlers=[handler], force=True)
