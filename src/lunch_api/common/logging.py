"""Console logging for the lunch API.

Each record renders as one line::

    2026-10-19T10:00:00.125Z INFO  lunch_api.features.groups.service [rid=9f1c...] group.join.success group_id=... user_id=...

Services log dotted event names and pass their fields through
:func:`log_context`. Group, user, restaurant, order and voting period ids are
printed first so every line about one group reads the same way.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from lunch_api.settings import Settings

__all__ = [
    "ConsoleLogFormatter",
    "bind_request_id",
    "log_context",
    "reset_request_id",
    "setup_logging",
]

_REQUEST_ID: ContextVar[str | None] = ContextVar("lunch_request_id", default=None)

# Names a LogRecord already owns; logging refuses extras that reuse them.
RESERVED_RECORD_FIELDS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "request_id"}

_ID_FIELDS = ("group_id", "user_id", "restaurant_id", "order_id", "voting_period_id")

_HANDLER_NAME = "lunch_api.console"


class ConsoleLogFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-5s %(name)s [rid=%(request_id)s] %(message)s")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=UTC)
        return f"{stamp:%Y-%m-%dT%H:%M:%S}.{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = getattr(record, "request_id", None) or _REQUEST_ID.get() or "-"
        line = super().format(record)

        fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in RESERVED_RECORD_FIELDS and not key.startswith("_")
        }
        if not fields:
            return line
        keys = [key for key in _ID_FIELDS if key in fields]
        keys += sorted(key for key in fields if key not in _ID_FIELDS)
        return line + " " + " ".join(f"{key}={_render(fields[key])}" for key in keys)


def setup_logging(settings: Settings) -> None:
    """Attach the console handler to the root logger and apply ``LUNCH_LOGGING_LEVEL``.

    Safe to call repeatedly: the handler is installed once, the level is
    refreshed every time.
    """

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.logging_level, logging.INFO))
    if any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(ConsoleLogFormatter())
    root.addHandler(handler)


def bind_request_id(request_id: str | None) -> Token[str | None]:
    return _REQUEST_ID.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    _REQUEST_ID.reset(token)


def log_context(**fields: Any) -> dict[str, Any]:
    """Build the ``extra`` mapping for a log call.

    ``None`` values are dropped and UUIDs become strings. A field named after a
    LogRecord attribute (``created``, ``name``, ``module``...) is kept under a
    ``ctx_`` prefix instead of being rejected by :mod:`logging`.

        logger.info("group.join.success", extra=log_context(group_id=group.id, user_id=user_id))
    """

    ctx: dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if key in RESERVED_RECORD_FIELDS:
            key = f"ctx_{key}"
        ctx[key] = str(value) if isinstance(value, UUID) else value
    return ctx


def _render(value: Any) -> str:
    if value is None:
        return "null"
    return str(value)
