"""
stock_kernel.logging_config -- JSON-lines logging for the stock ledger.

Every record is one JSON object: the envelope ``ts``, ``level``,
``logger`` and ``message``, then the invocation context
(``correlation_id`` for one CLI run, ``command`` for the command being
executed), then whatever the caller passed through ``extra=``.

Records logged with exception info also carry ``exc_type``,
``exc_message`` and a ``traceback``.  A StockKernelError adds its
``exc_code`` and one ``exc_<attr>`` field per structured attribute, so a
rejected sale can be filtered on ``exc_short_by`` without parsing text.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator

from stock_kernel.exceptions import StockKernelError

_LOGGER_PREFIX = "stock_kernel"

_CONTEXT: dict[str, ContextVar[str | None]] = {
    "correlation_id": ContextVar("stock_log_correlation_id", default=None),
    "command": ContextVar("stock_log_command", default=None),
}


def _context_var(name: str) -> ContextVar[str | None]:
    try:
        return _CONTEXT[name]
    except KeyError:
        raise ValueError(f"unknown log context field: {name!r}") from None


class LogContext:
    """Invocation-scoped fields merged into every record."""

    FIELDS = tuple(_CONTEXT)

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set the given fields; None leaves a field unchanged."""
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                var.set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        ctx: dict[str, str] = {}
        for name, var in _CONTEXT.items():
            value = var.get()
            if value is not None:
                ctx[name] = value
        return ctx

    @staticmethod
    def clear() -> None:
        for var in _CONTEXT.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Set fields for the duration of a block, then restore them."""
        tokens = []
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                tokens.append((var, var.set(value)))
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

# Attributes every LogRecord has; anything else on a record came from extra=.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    return repr(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    if isinstance(exc, StockKernelError):
        fields["exc_code"] = exc.code
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_setup_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Logger ``stock_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def _installed_handlers(root: logging.Logger) -> list[logging.Handler]:
    return [h for h in root.handlers if getattr(h, "_stock_ledger", False)]


def configure_logging(
    *,
    level: int | str = logging.INFO,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler (stderr unless one is given) to ``stock_kernel``.

    Only the first call has any effect until reset_logging().
    """
    root = logging.getLogger(_LOGGER_PREFIX)
    with _setup_lock:
        if _installed_handlers(root):
            return
        h = handler if handler is not None else logging.StreamHandler(sys.stderr)
        h.setFormatter(StructuredFormatter())
        h._stock_ledger = True
        root.addHandler(h)
        root.setLevel(level)
        root.propagate = False


def reset_logging() -> None:
    """Detach the handler installed by configure_logging(). Used by tests."""
    root = logging.getLogger(_LOGGER_PREFIX)
    with _setup_lock:
        for h in _installed_handlers(root):
            root.removeHandler(h)
        root.setLevel(logging.WARNING)
        root.propagate = True
